"""
Pydantic schemas for ratings left after a completed swap.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RatingCreate(BaseModel):
    """Schema for rating the other participant of a completed swap."""

    swap_request_id: int
    rated_user_id: int
    score: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    feedback: Optional[str] = Field(None, description="Optional textual feedback")

    @field_validator("feedback")
    @classmethod
    def sanitize_feedback(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace and enforce the maximum length."""
        if v is None:
            return None
        v = v.strip()
        if len(v) > 1000:
            raise ValueError("Feedback must be 1000 characters or fewer")
        return v or None


class RatingRead(BaseModel):
    id: int
    rater_id: int
    rated_user_id: int
    swap_request_id: int
    score: int
    feedback: Optional[str] = None
    created_at: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class RatingDetail(RatingRead):
    """A rating with the counterpart's name and the swap's skills for context."""

    counterpart_id: int
    counterpart_name: Optional[str] = None
    skills_offered: List[str] = []
    skills_requested: List[str] = []
