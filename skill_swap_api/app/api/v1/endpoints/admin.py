"""
Administrator endpoints for API v1.

Everything here except ``/promote/{user_id}`` requires an admin
caller.  Promotion is open to any authenticated user because the
bootstrap secret path must work before any admin exists;
``AdminService.promote`` enforces the actual rule.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from skill_swap_api.app.core.config import settings
from skill_swap_api.app.core.security import get_current_user, require_admin
from skill_swap_api.app.schemas.admin import (
    AdminLogPage,
    AlertCreate,
    AlertRead,
    BanUpdate,
    ExportResponse,
    PromoteRequest,
    SwapPage,
    SwapStats,
    UserPage,
)
from skill_swap_api.app.schemas.swap import SwapStatus
from skill_swap_api.app.schemas.user import UserRead
from skill_swap_api.app.services.admin_service import AdminService

router = APIRouter()


@router.post("/promote/{user_id}", response_model=UserRead)
async def promote_user(
    user_id: int,
    data: Optional[PromoteRequest] = None,
    current_user: dict = Depends(get_current_user),
) -> UserRead:
    secret_key = data.secret_key if data else None
    return await AdminService.promote(user_id, current_user, secret_key)


@router.get("/users", response_model=UserPage)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    banned: Optional[bool] = Query(None, description="Filter by ban status"),
    current_user: dict = Depends(require_admin),
) -> UserPage:
    return await AdminService.list_users(page=page, limit=limit, banned=banned)


@router.put("/users/{user_id}/ban", response_model=UserRead)
async def set_ban_status(
    user_id: int,
    data: BanUpdate,
    current_user: dict = Depends(require_admin),
) -> UserRead:
    return await AdminService.set_ban(user_id, data.is_banned, current_user)


@router.get("/stats/swaps", response_model=SwapStats)
async def swap_statistics(current_user: dict = Depends(require_admin)) -> SwapStats:
    return await AdminService.swap_stats()


@router.get("/swaps", response_model=SwapPage)
async def list_swaps(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    status_filter: Optional[SwapStatus] = Query(None, alias="status"),
    current_user: dict = Depends(require_admin),
) -> SwapPage:
    return await AdminService.list_swaps(page=page, limit=limit, status=status_filter)


@router.delete("/swaps/{swap_id}")
async def delete_swap(swap_id: int, current_user: dict = Depends(require_admin)) -> dict:
    """Delete a swap request and the ratings attached to it."""
    removed = await AdminService.delete_swap(swap_id, current_user)
    return {"message": "Swap request deleted successfully", "ratings_removed": removed}


@router.get("/export/{export_type}", response_model=ExportResponse)
async def export_data(export_type: str, current_user: dict = Depends(require_admin)) -> ExportResponse:
    """Export every user, swap or rating record."""
    return await AdminService.export(export_type, current_user)


@router.get("/logs", response_model=AdminLogPage)
async def list_admin_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=100),
    current_user: dict = Depends(require_admin),
) -> AdminLogPage:
    return await AdminService.list_logs(page=page, limit=limit)


@router.post("/alerts", response_model=AlertRead, status_code=status.HTTP_201_CREATED)
async def send_alert(data: AlertCreate, current_user: dict = Depends(require_admin)) -> AlertRead:
    return await AdminService.send_alert(data, current_user)
