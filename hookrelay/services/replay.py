"""
Replay a stored message to an arbitrary target URL and record the outcome.

Outbound request is deliberately minimal:
- Content-Type copied from the original delivery (application/json if absent)
- X-Replayed-From marker so receivers can tell a replay from a live delivery
- body byte-identical to what was ingested

Any HTTP response (including 4xx/5xx) is a completed attempt, even when its
body can't be decoded (recorded with the status, a NULL body and the error).
A failure before a response arrives is an UpstreamError; it is still recorded
with a NULL status.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError

from hookrelay.config import Settings
from hookrelay.errors import InvalidRequestError, NotFoundError, PersistenceError, UpstreamError
from hookrelay.models.message import Message
from hookrelay.services.store import WebhookStore

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"
REPLAY_HEADER = "X-Replayed-From"


@dataclass
class ReplaySummary:
    message_id: int
    target_url: str
    status: int
    response: Optional[str]

    def to_dict(self) -> dict:
        return asdict(self)


def stored_content_type(headers: dict) -> Optional[str]:
    """First Content-Type value from a stored header map, any name casing."""
    for name, values in (headers or {}).items():
        if name.lower() == "content-type" and values:
            return values[0] if isinstance(values, list) else str(values)
    return None


def build_replay_request(message: Message, marker: str) -> tuple[dict[str, str], bytes]:
    """Headers and body for the outbound replay of message."""
    headers = {
        "Content-Type": stored_content_type(message.headers) or DEFAULT_CONTENT_TYPE,
        REPLAY_HEADER: marker,
    }
    return headers, message.body.encode("utf-8")


class ReplayCoordinator:
    def __init__(
        self,
        store: WebhookStore,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.settings = settings
        self.transport = transport

    async def _send(self, url: str, headers: dict[str, str], body: bytes) -> tuple[int, Optional[str], Optional[str]]:
        """
        POST and return (status, body truncated to replay_response_max_bytes, body error).
        A body that can't be decoded still yields the status, with the error text instead of a body.
        """
        limit = self.settings.replay_response_max_bytes
        # One client per replay: no connection state shared between replays
        async with httpx.AsyncClient(
            timeout=self.settings.replay_timeout_seconds,
            transport=self.transport,
        ) as client:
            async with client.stream("POST", url, headers=headers, content=body) as response:
                chunks = bytearray()
                try:
                    async for chunk in response.aiter_bytes():
                        chunks.extend(chunk)
                        if len(chunks) >= limit:
                            break
                except httpx.DecodingError as e:
                    return response.status_code, None, f"undecodable response body: {e}"
                return response.status_code, bytes(chunks[:limit]).decode("utf-8", errors="replace"), None

    async def _record(self, **fields) -> None:
        try:
            await self.store.insert_replay_attempt(**fields)
            await self.store.db.commit()
        except SQLAlchemyError as e:
            logger.exception(
                "Failed to record replay attempt for message %s",
                fields.get("message_id"),
                extra={"message_id": fields.get("message_id")},
            )
            await self.store.db.rollback()
            raise PersistenceError("failed to record replay attempt") from e

    async def replay(self, message_id: int, target_url: str) -> ReplaySummary:
        if not target_url or not target_url.strip():
            raise InvalidRequestError("target_url required")
        target_url = target_url.strip()

        message = await self.store.get_message(message_id)
        if message is None:
            raise NotFoundError("message not found")

        headers, body = build_replay_request(message, self.settings.replay_marker)

        try:
            status, response_text, body_error = await asyncio.wait_for(
                self._send(target_url, headers, body),
                timeout=self.settings.replay_timeout_seconds,
            )
        except httpx.InvalidURL as e:
            raise InvalidRequestError(f"invalid target_url: {e}") from e
        except (httpx.TransportError, asyncio.TimeoutError) as e:
            error_text = str(e) or type(e).__name__
            logger.warning(
                "Replay of message %s to %s failed: %s",
                message.id, target_url, error_text,
                extra={"message_id": message.id, "target_url": target_url},
            )
            await self._record(
                message_id=message.id,
                target_url=target_url,
                error_message=error_text,
            )
            raise UpstreamError(f"replay failed: {error_text}") from e

        await self._record(
            message_id=message.id,
            target_url=target_url,
            status_code=status,
            response_body=response_text,
            error_message=body_error,
        )
        if body_error:
            logger.warning(
                "Replay of message %s to %s got %s with %s",
                message.id, target_url, status, body_error,
                extra={"message_id": message.id, "target_url": target_url, "status_code": status},
            )
        logger.info(
            "Replayed message %s to %s -> %s",
            message.id, target_url, status,
            extra={"message_id": message.id, "target_url": target_url, "status_code": status},
        )
        return ReplaySummary(
            message_id=message.id,
            target_url=target_url,
            status=status,
            response=response_text,
        )
