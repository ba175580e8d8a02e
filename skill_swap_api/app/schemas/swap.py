"""
Pydantic models for swap requests.

A swap request moves through a fixed lifecycle::

    pending -> accepted -> completed
    pending -> rejected | cancelled

``rejected``, ``cancelled`` and ``completed`` are terminal.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SwapRequestCreate(BaseModel):
    """Payload for proposing a swap to another user."""

    target_user_id: int = Field(..., description="User the request is sent to")
    message: str = Field(..., min_length=1, max_length=500)
    skills_offered: List[str] = Field(..., description="Skills the requester will teach")
    skills_requested: List[str] = Field(..., description="Skills the requester wants to learn")

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("skills_offered", "skills_requested")
    @classmethod
    def strip_skills(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s.strip()]


class SwapRequestRead(BaseModel):
    id: int
    requester_id: int
    target_id: int
    requester_name: Optional[str] = None
    target_name: Optional[str] = None
    message: str
    skills_offered: List[str]
    skills_requested: List[str]
    status: SwapStatus
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class SwapRequestAdminRead(SwapRequestRead):
    """Swap request as listed to administrators, with participant emails."""

    requester_email: Optional[str] = None
    target_email: Optional[str] = None


class SwapActionResponse(BaseModel):
    message: str
    swap_request: SwapRequestRead
