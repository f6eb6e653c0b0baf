"""
Endpoint / message / replay persistence.

Thin wrapper over an AsyncSession. Inserts flush so the generated id and
timestamps are available immediately; the caller owns the commit.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hookrelay.models.endpoint import Endpoint, ProviderKind
from hookrelay.models.message import Message
from hookrelay.models.replay_attempt import ReplayAttempt

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 200


def receiving_url(public_base_url: str, token: uuid.UUID) -> str:
    """Fully-qualified URL a provider should deliver to for this endpoint."""
    return f"{public_base_url.rstrip('/')}/hooks/{token}"


class WebhookStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_endpoint(self, provider: ProviderKind, secret: str) -> Endpoint:
        endpoint = Endpoint(
            token=uuid.uuid4(),
            provider=ProviderKind(provider).value,
            secret=secret,
        )
        self.db.add(endpoint)
        await self.db.flush()
        logger.info(
            "Endpoint %s created", endpoint.id,
            extra={"endpoint_id": endpoint.id, "provider": endpoint.provider},
        )
        return endpoint

    async def get_endpoint(self, endpoint_id: int) -> Optional[Endpoint]:
        return await self.db.get(Endpoint, endpoint_id)

    async def get_endpoint_by_token(self, token: uuid.UUID) -> Optional[Endpoint]:
        result = await self.db.execute(
            select(Endpoint).where(Endpoint.token == token)
        )
        return result.scalar_one_or_none()

    async def insert_message(
        self,
        endpoint_id: int,
        headers: dict[str, list[str]],
        body: bytes,
    ) -> Message:
        message = Message(
            endpoint_id=endpoint_id,
            headers=headers,
            body=body.decode("utf-8", errors="replace"),  # providers send text payloads
        )
        self.db.add(message)
        await self.db.flush()
        return message

    async def get_message(self, message_id: int) -> Optional[Message]:
        return await self.db.get(Message, message_id)

    async def list_messages(
        self,
        endpoint_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[Message]:
        """Most recent first, optionally scoped to one endpoint."""
        query = select(Message)
        if endpoint_id is not None:
            query = query.where(Message.endpoint_id == endpoint_id)
        query = query.order_by(Message.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def insert_replay_attempt(
        self,
        message_id: int,
        target_url: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> ReplayAttempt:
        attempt = ReplayAttempt(
            message_id=message_id,
            target_url=target_url,
            status_code=status_code,
            response_body=response_body,
            error_message=error_message,
        )
        self.db.add(attempt)
        await self.db.flush()
        return attempt

    async def list_replay_attempts(self, message_id: int) -> list[ReplayAttempt]:
        result = await self.db.execute(
            select(ReplayAttempt)
            .where(ReplayAttempt.message_id == message_id)
            .order_by(ReplayAttempt.id.desc())
        )
        return list(result.scalars().all())
