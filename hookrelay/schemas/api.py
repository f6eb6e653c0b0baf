"""
API request/response schemas for provisioning, message browsing and replay.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class CreateEndpointRequest(BaseModel):
    provider: str = ""  # stripe | flutterwave | paystack | github
    secret: str = ""


class CreateEndpointResponse(BaseModel):
    id: int
    token: str
    url: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    endpoint_id: int
    headers: dict[str, list[str]]
    body: str
    received_at: datetime


class ReplayRequest(BaseModel):
    target_url: str = ""


class ReplayResponse(BaseModel):
    message_id: int
    target_url: str
    status: int
    response: Optional[str] = None


class ReplayAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message_id: int
    target_url: str
    status_code: Optional[int] = None
    response_body: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
