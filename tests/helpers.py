"""Helpers for building users and swaps directly through the services."""

from typing import Dict, List, Optional

from skill_swap_api.app.core.db import dump_skills, get_connection
from skill_swap_api.app.schemas.swap import SwapRequestCreate
from skill_swap_api.app.schemas.user import UserRegister
from skill_swap_api.app.services.swap_service import SwapService
from skill_swap_api.app.services.user_service import UserService

PASSWORD = "secret123"


async def make_user(
    name: str,
    *,
    is_admin: bool = False,
    is_banned: bool = False,
    is_public: bool = True,
    skills_offered: Optional[List[str]] = None,
    skills_wanted: Optional[List[str]] = None,
) -> Dict:
    """Register a user and return the ``current_user`` dict services expect."""
    user = await UserService.create_user(
        UserRegister(name=name, email=f"{name.lower()}@example.com", password=PASSWORD)
    )
    conn = get_connection()
    try:
        conn.execute(
            "UPDATE users SET is_admin = ?, is_banned = ?, is_public = ?, "
            "skills_offered = ?, skills_wanted = ? WHERE id = ?",
            (
                int(is_admin),
                int(is_banned),
                int(is_public),
                dump_skills(skills_offered),
                dump_skills(skills_wanted),
                user.id,
            ),
        )
        conn.commit()
    finally:
        conn.close()
    return {
        "user_id": user.id,
        "email": user.email,
        "name": user.name,
        "is_admin": is_admin,
        "is_banned": is_banned,
    }


async def make_swap(requester: Dict, target: Dict, status: str = "pending"):
    """Create a swap from ``requester`` to ``target`` and walk it to ``status``."""
    swap = await SwapService.create(
        requester,
        SwapRequestCreate(
            target_user_id=target["user_id"],
            message="teach me guitar",
            skills_offered=["cooking"],
            skills_requested=["guitar"],
        ),
    )
    if status == "accepted":
        swap = await SwapService.accept(swap.id, target)
    elif status == "completed":
        await SwapService.accept(swap.id, target)
        swap = await SwapService.complete(swap.id, requester)
    elif status == "rejected":
        swap = await SwapService.reject(swap.id, target)
    elif status == "cancelled":
        swap = await SwapService.cancel(swap.id, requester)
    return swap
