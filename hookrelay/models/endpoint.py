"""
Endpoint model - one provisioned receiving URL bound to a provider and a secret.
The token is the only public identifier; it appears in /hooks/{token}.
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from hookrelay.database import Base


class ProviderKind(str, enum.Enum):
    """Supported webhook sources. Each member needs a verifier in hookrelay.providers."""

    STRIPE = "stripe"
    FLUTTERWAVE = "flutterwave"
    PAYSTACK = "paystack"
    GITHUB = "github"


class Endpoint(Base):
    __tablename__ = "endpoints"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, unique=True, index=True, default=uuid.uuid4
    )
    # Stored as plain text so a stale row can't break loading; dispatch validates it
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    secret: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<Endpoint {self.id} provider={self.provider}>"
