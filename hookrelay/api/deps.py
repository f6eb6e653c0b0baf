"""
FastAPI dependencies wiring the store and coordinators to a request's session.
"""
from typing import NoReturn, Optional

import httpx
from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from hookrelay.config import Settings, get_settings
from hookrelay.database import get_db
from hookrelay.errors import RelayError
from hookrelay.services.ingest import IngestCoordinator
from hookrelay.services.replay import ReplayCoordinator
from hookrelay.services.store import WebhookStore


def get_store(db: AsyncSession = Depends(get_db)) -> WebhookStore:
    return WebhookStore(db)


def get_replay_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport for replays. None means a real network transport."""
    return None


def get_ingest_coordinator(
    store: WebhookStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> IngestCoordinator:
    return IngestCoordinator(store, settings)


def get_replay_coordinator(
    store: WebhookStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_replay_transport),
) -> ReplayCoordinator:
    return ReplayCoordinator(store, settings, transport=transport)


def raise_http(error: RelayError) -> NoReturn:
    """Translate a service error into the matching HTTP error."""
    raise HTTPException(status_code=error.http_status, detail=error.detail) from error
