"""
Inbound delivery handling: resolve endpoint by token, verify signature, persist.

Callers only ever learn "endpoint not found" or "invalid signature"; the
specific rejection reason goes to the log, keyed by endpoint id and provider.
"""
import logging
import time
import uuid
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from hookrelay.config import Settings
from hookrelay.errors import AuthenticationError, NotFoundError, PersistenceError, UnknownProviderError
from hookrelay.models.endpoint import Endpoint
from hookrelay.models.message import Message
from hookrelay.providers import verify_signature
from hookrelay.services.store import WebhookStore

logger = logging.getLogger(__name__)


def group_headers(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Collect (name, value) pairs into name -> [values], keeping first-seen order."""
    grouped: dict[str, list[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return grouped


def parse_token(token: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(token)
    except (ValueError, TypeError, AttributeError):
        return None


class IngestCoordinator:
    def __init__(self, store: WebhookStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def resolve_endpoint(self, token: str) -> Endpoint:
        # Malformed and unknown tokens are indistinguishable to the caller
        parsed = parse_token(token)
        endpoint = await self.store.get_endpoint_by_token(parsed) if parsed else None
        if endpoint is None:
            raise NotFoundError("endpoint not found")
        return endpoint

    async def receive(
        self,
        token: str,
        headers: dict[str, list[str]],
        body: bytes,
        now: Optional[float] = None,
    ) -> Message:
        """
        Verify and store one delivery.
        Raises NotFoundError, AuthenticationError, UnknownProviderError or PersistenceError.
        """
        endpoint = await self.resolve_endpoint(token)

        first_values = {name: values[0] for name, values in headers.items() if values}
        try:
            result = verify_signature(
                endpoint.provider,
                endpoint.secret,
                first_values,
                body,
                now=time.time() if now is None else now,
                stripe_tolerance=self.settings.stripe_tolerance_seconds,
            )
        except UnknownProviderError:
            logger.error(
                "Endpoint %s has unknown provider '%s' - no verifier configured",
                endpoint.id, endpoint.provider,
                extra={"endpoint_id": endpoint.id, "provider": endpoint.provider},
            )
            raise

        if not result.ok:
            logger.warning(
                "Signature rejected for endpoint %s: provider=%s reason=%s",
                endpoint.id, endpoint.provider, result.reason,
                extra={"endpoint_id": endpoint.id, "provider": endpoint.provider, "reason": result.reason},
            )
            raise AuthenticationError(result.reason)

        try:
            message = await self.store.insert_message(endpoint.id, headers, body)
            await self.store.db.commit()
        except SQLAlchemyError as e:
            logger.exception(
                "Failed to store verified delivery for endpoint %s",
                endpoint.id,
                extra={"endpoint_id": endpoint.id, "provider": endpoint.provider},
            )
            await self.store.db.rollback()
            raise PersistenceError("failed to store message") from e

        logger.info(
            "Stored message %s for endpoint %s (%d bytes)",
            message.id, endpoint.id, len(body),
            extra={"endpoint_id": endpoint.id, "message_id": message.id, "provider": endpoint.provider},
        )
        return message
