"""
Pydantic models for user data.

``UserPublic`` is the projection other users may see: it never carries
the email address, password hash or moderation internals.  ``UserRead``
is what a user sees about themselves.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class SkillKind(str, Enum):
    """Which of a user's two skill lists an operation targets."""

    OFFERED = "offered"
    WANTED = "wanted"


def _clean_skills(value: Optional[List[str]]) -> Optional[List[str]]:
    """Strip entries, drop blanks and keep the first occurrence of each."""
    if value is None:
        return None
    cleaned: List[str] = []
    for skill in value:
        skill = skill.strip()
        if skill and skill not in cleaned:
            cleaned.append(skill)
    return cleaned


class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile.

    Anything not listed here (rating, ban and admin flags) is ignored by
    construction.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    location: Optional[str] = Field(None, max_length=200)
    availability: Optional[str] = Field(None, max_length=200)
    is_public: Optional[bool] = None
    skills_offered: Optional[List[str]] = None
    skills_wanted: Optional[List[str]] = None

    # Runs before the length constraints so they apply to the stripped text.
    @field_validator("name", "location", "availability", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("skills_offered", "skills_wanted")
    @classmethod
    def clean_skills(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_skills(v)


class SkillAdd(BaseModel):
    skill: str = Field(..., max_length=100)

    @field_validator("skill")
    @classmethod
    def require_skill(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Skill is required")
        return v


class SkillList(BaseModel):
    kind: SkillKind
    skills: List[str]


class UserPublic(BaseModel):
    """Profile fields that are safe to show to other users."""

    id: int
    name: str
    location: Optional[str] = None
    availability: Optional[str] = None
    skills_offered: List[str] = []
    skills_wanted: List[str] = []
    is_public: bool = True
    rating: float = 0.0
    total_ratings: int = 0

    model_config = {
        "from_attributes": True,
    }


class UserRead(UserPublic):
    """A user's own profile."""

    email: str
    is_admin: bool = False
    is_banned: bool = False
    created_at: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
