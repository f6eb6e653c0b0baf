"""
Stored message browsing and replay.

- GET  /api/messages                 - most recent first, optional endpoint_id (or endpointId) filter
- GET  /api/messages/{id}            - one message with headers and body
- POST /api/messages/{id}/replay     - resend the body to target_url, record the attempt
- GET  /api/messages/{id}/replays    - replay audit trail for a message
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from hookrelay.api.deps import get_replay_coordinator, get_store, raise_http
from hookrelay.errors import PersistenceError, RelayError
from hookrelay.schemas.api import (
    MessageResponse,
    ReplayAttemptResponse,
    ReplayRequest,
    ReplayResponse,
)
from hookrelay.services.replay import ReplayCoordinator
from hookrelay.services.store import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, WebhookStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/messages", tags=["messages"])


def _clamp_limit(limit: Optional[int]) -> int:
    # Out-of-range limits fall back to the default rather than erroring
    if limit is None or limit <= 0 or limit > MAX_LIST_LIMIT:
        return DEFAULT_LIST_LIMIT
    return limit


@router.get("", response_model=list[MessageResponse])
async def list_messages(
    endpoint_id: Optional[int] = Query(default=None),
    endpoint_id_camel: Optional[int] = Query(default=None, alias="endpointId"),
    limit: Optional[int] = Query(default=None),
    store: WebhookStore = Depends(get_store),
):
    # endpointId is the camelCase spelling older clients send; endpoint_id wins if both are given
    if endpoint_id is None:
        endpoint_id = endpoint_id_camel
    try:
        return await store.list_messages(endpoint_id=endpoint_id, limit=_clamp_limit(limit))
    except SQLAlchemyError:
        logger.exception(
            "Failed to list messages (endpoint %s)", endpoint_id,
            extra={"endpoint_id": endpoint_id},
        )
        await store.db.rollback()
        raise_http(PersistenceError("failed to load messages"))


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: int,
    store: WebhookStore = Depends(get_store),
):
    try:
        message = await store.get_message(message_id)
    except SQLAlchemyError:
        logger.exception(
            "Failed to load message %s", message_id,
            extra={"message_id": message_id},
        )
        await store.db.rollback()
        raise_http(PersistenceError("failed to load message"))
    if message is None:
        raise HTTPException(status_code=404, detail="message not found")
    return message


@router.post("/{message_id}/replay", response_model=ReplayResponse)
async def replay_message(
    message_id: int,
    payload: ReplayRequest,
    coordinator: ReplayCoordinator = Depends(get_replay_coordinator),
):
    try:
        summary = await coordinator.replay(message_id, payload.target_url)
    except RelayError as e:
        raise_http(e)
    return ReplayResponse(**summary.to_dict())


@router.get("/{message_id}/replays", response_model=list[ReplayAttemptResponse])
async def list_replays(
    message_id: int,
    store: WebhookStore = Depends(get_store),
):
    try:
        message = await store.get_message(message_id)
        attempts = await store.list_replay_attempts(message_id) if message is not None else None
    except SQLAlchemyError:
        logger.exception(
            "Failed to load replay attempts for message %s", message_id,
            extra={"message_id": message_id},
        )
        await store.db.rollback()
        raise_http(PersistenceError("failed to load replay attempts"))
    if attempts is None:
        raise HTTPException(status_code=404, detail="message not found")
    return attempts
