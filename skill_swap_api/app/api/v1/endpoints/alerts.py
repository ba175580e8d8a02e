"""
Platform alerts visible to every signed-in user.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from skill_swap_api.app.core.security import get_current_user
from skill_swap_api.app.schemas.admin import AlertRead
from skill_swap_api.app.services.admin_service import AdminService

router = APIRouter()


@router.get("", response_model=List[AlertRead])
async def list_alerts(
    limit: int = Query(10, ge=1, le=50),
    current_user: dict = Depends(get_current_user),
) -> List[AlertRead]:
    return await AdminService.list_alerts(limit=limit)
