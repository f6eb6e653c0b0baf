"""
Message model - one accepted webhook delivery.
Headers keep every value per name so multi-valued headers survive storage.
"""
from datetime import datetime, timezone
from sqlalchemy import Integer, Text, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from hookrelay.database import Base


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    endpoint_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("endpoints.id"), nullable=False, index=True
    )
    headers: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)  # name -> [values]
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    def __repr__(self) -> str:
        return f"<Message {self.id} endpoint={self.endpoint_id}>"
