"""
User directory endpoints for API v1.

Discovery of other users, public profiles, profile updates and the
offered/wanted skill lists.  ``/discover`` and ``/profile`` are
declared before ``/{user_id}`` so they are not captured by it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from skill_swap_api.app.core.config import settings
from skill_swap_api.app.core.security import get_current_user
from skill_swap_api.app.schemas.user import (
    ProfileUpdate,
    SkillAdd,
    SkillKind,
    SkillList,
    UserPublic,
    UserRead,
)
from skill_swap_api.app.services.user_service import UserService

router = APIRouter()


@router.get("/discover", response_model=List[UserPublic])
async def discover_users(
    skill: Optional[str] = Query(None, description="Substring matched against either skill list"),
    search: Optional[str] = Query(None, description="Substring matched against name and both skill lists"),
    current_user: dict = Depends(get_current_user),
) -> List[UserPublic]:
    """List other public, non-banned users, at most ``DISCOVER_LIMIT`` of them."""
    return await UserService.discover(
        current_user, skill=skill, search=search, limit=settings.discover_limit
    )


@router.put("/profile", response_model=UserRead)
async def update_profile(
    data: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserRead:
    """Update the caller's own profile.

    Only name, location, availability, visibility and the skill lists
    can be changed here.
    """
    return await UserService.update_profile(current_user, data)


@router.post("/skills/{kind}", response_model=SkillList)
async def add_skill(
    kind: SkillKind,
    data: SkillAdd,
    current_user: dict = Depends(get_current_user),
) -> SkillList:
    skills = await UserService.add_skill(current_user, kind, data.skill)
    return SkillList(kind=kind, skills=skills)


@router.delete("/skills/{kind}/{skill:path}", response_model=SkillList)
async def remove_skill(
    kind: SkillKind,
    skill: str,
    current_user: dict = Depends(get_current_user),
) -> SkillList:
    """Remove one skill; the last path segment may itself contain ``/``."""
    skills = await UserService.remove_skill(current_user, kind, skill)
    return SkillList(kind=kind, skills=skills)


@router.get("/{user_id}", response_model=UserPublic)
async def get_user_profile(
    user_id: int,
    current_user: dict = Depends(get_current_user),
) -> UserPublic:
    return await UserService.get_profile(user_id, current_user)
