"""
Pydantic schemas for administrator endpoints and the audit trail.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .swap import SwapRequestAdminRead
from .user import UserRead


class AdminAction(str, Enum):
    """Action tags recorded in the admin log."""

    PROMOTE_USER = "promote_user"
    BAN_USER = "ban_user"
    UNBAN_USER = "unban_user"
    DELETE_SWAP = "delete_swap"
    SEND_ALERT = "send_alert"
    EXPORT_DATA = "export_data"


class ExportType(str, Enum):
    USERS = "users"
    SWAPS = "swaps"
    RATINGS = "ratings"


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show ``total`` records ``limit`` at a time."""
    return math.ceil(total / limit) if limit else 0


class PromoteRequest(BaseModel):
    secret_key: Optional[str] = Field(
        None, description="Bootstrap secret; only honoured while no admin exists"
    )


class BanUpdate(BaseModel):
    is_banned: bool


class AlertCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)


class AlertRead(BaseModel):
    id: int
    admin_id: int
    title: str
    message: str
    created_at: Optional[str] = None


class AdminLogRead(BaseModel):
    id: int
    admin_id: int
    admin_name: Optional[str] = None
    action: AdminAction
    target_user_id: Optional[int] = None
    target_user_name: Optional[str] = None
    details: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None


class PageMeta(BaseModel):
    total: int
    page: int
    total_pages: int


class UserPage(PageMeta):
    users: List[UserRead]


class SwapPage(PageMeta):
    swap_requests: List[SwapRequestAdminRead]


class AdminLogPage(PageMeta):
    logs: List[AdminLogRead]


class StatusCount(BaseModel):
    status: str
    count: int


class SwapStats(BaseModel):
    swap_stats: List[StatusCount]
    total_users: int
    total_ratings: int


class ExportResponse(BaseModel):
    type: ExportType
    count: int
    data: List[Dict[str, Any]]
