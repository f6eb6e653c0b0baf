"""
Database models - import all models here so Alembic can discover them.
"""
from hookrelay.models.endpoint import Endpoint, ProviderKind
from hookrelay.models.message import Message
from hookrelay.models.replay_attempt import ReplayAttempt

__all__ = [
    "Endpoint",
    "ProviderKind",
    "Message",
    "ReplayAttempt",
]
