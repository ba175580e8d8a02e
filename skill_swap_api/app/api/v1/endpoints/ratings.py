"""
Rating endpoints for API v1.

Participants of a completed swap rate each other here.  The public
view of a user's received ratings is capped; the caller's own given
ratings are not.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from skill_swap_api.app.core.config import settings
from skill_swap_api.app.core.security import get_current_user
from skill_swap_api.app.schemas.rating import RatingCreate, RatingDetail, RatingRead
from skill_swap_api.app.services.rating_service import RatingService

router = APIRouter()


@router.post("/submit", response_model=RatingRead, status_code=status.HTTP_201_CREATED)
async def submit_rating(
    data: RatingCreate,
    current_user: dict = Depends(get_current_user),
) -> RatingRead:
    """Rate the other participant of a completed swap (once per swap)."""
    return await RatingService.submit(current_user, data)


@router.get("/my-ratings", response_model=List[RatingDetail])
async def my_ratings(current_user: dict = Depends(get_current_user)) -> List[RatingDetail]:
    return await RatingService.ratings_given(current_user)


@router.get("/user/{user_id}", response_model=List[RatingDetail])
async def ratings_for_user(
    user_id: int,
    current_user: dict = Depends(get_current_user),
) -> List[RatingDetail]:
    return await RatingService.ratings_for_user(user_id, limit=settings.public_ratings_limit)
