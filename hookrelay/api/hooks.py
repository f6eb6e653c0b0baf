"""
Webhook receiver - POST /hooks/{token}.

Security layers (in order):
1. Endpoint lookup by opaque token (unknown and malformed tokens look identical)
2. Signature validation (per-provider, full body read first)
3. Persistence of headers + raw body
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from hookrelay.api.deps import get_ingest_coordinator, raise_http
from hookrelay.errors import RelayError
from hookrelay.services.ingest import IngestCoordinator, group_headers

logger = logging.getLogger(__name__)
router = APIRouter(tags=["hooks"])


@router.post("/hooks/{token}", response_class=PlainTextResponse)
async def receive_hook(
    token: str,
    request: Request,
    coordinator: IngestCoordinator = Depends(get_ingest_coordinator),
):
    """Verify and store one inbound delivery."""
    body = await request.body()
    headers = group_headers(
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in request.headers.raw
    )
    try:
        await coordinator.receive(token, headers, body)
    except RelayError as e:
        raise_http(e)
    return PlainTextResponse("received", status_code=200)
