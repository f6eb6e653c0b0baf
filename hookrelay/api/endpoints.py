"""
Endpoint provisioning - POST /api/endpoints.
The secret is accepted here and never returned; callers get the receiving URL.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from hookrelay.api.deps import get_store, raise_http
from hookrelay.config import Settings, get_settings
from hookrelay.errors import PersistenceError
from hookrelay.models.endpoint import ProviderKind
from hookrelay.schemas.api import CreateEndpointRequest, CreateEndpointResponse
from hookrelay.services.store import WebhookStore, receiving_url

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["endpoints"])

SUPPORTED_PROVIDERS = {kind.value for kind in ProviderKind}


@router.post("/endpoints", response_model=CreateEndpointResponse, status_code=201)
async def create_endpoint(
    payload: CreateEndpointRequest,
    store: WebhookStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if payload.provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(status_code=400, detail="unsupported provider")
    if not payload.secret:
        raise HTTPException(status_code=400, detail="secret required")

    try:
        endpoint = await store.create_endpoint(ProviderKind(payload.provider), payload.secret)
        await store.db.commit()
    except SQLAlchemyError:
        # Never log the secret
        logger.exception(
            "Failed to create %s endpoint", payload.provider,
            extra={"provider": payload.provider},
        )
        await store.db.rollback()
        raise_http(PersistenceError("failed to create endpoint"))

    return CreateEndpointResponse(
        id=endpoint.id,
        token=str(endpoint.token),
        url=receiving_url(settings.public_base_url, endpoint.token),
    )
