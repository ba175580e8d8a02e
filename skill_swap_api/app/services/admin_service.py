"""
Business logic for administrator oversight.

Administrators can promote users, ban and unban them, inspect and
delete swap requests, export whole collections, broadcast alerts and
read the audit trail.  Every state-changing action writes an entry to
``admin_logs`` through ``AuditService`` inside the same transaction as
the change itself.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from skill_swap_api.app.core.db import get_connection, load_skills
from skill_swap_api.app.core.exceptions import ForbiddenError, NotFoundError, ValidationFailed
from skill_swap_api.app.core.security import verify_admin_secret
from skill_swap_api.app.schemas.admin import (
    AdminAction,
    AdminLogPage,
    AdminLogRead,
    AlertCreate,
    AlertRead,
    ExportResponse,
    ExportType,
    StatusCount,
    SwapPage,
    SwapStats,
    UserPage,
    total_pages,
)
from skill_swap_api.app.schemas.swap import SwapRequestAdminRead, SwapStatus
from skill_swap_api.app.schemas.user import UserRead
from skill_swap_api.app.services.audit_service import AuditService
from skill_swap_api.app.services.rating_service import RatingService
from skill_swap_api.app.services.user_service import USER_COLUMNS, row_to_read

logger = logging.getLogger(__name__)

ADMIN_SWAP_SELECT = (
    "SELECT s.id, s.requester_id, s.target_id, r.name AS requester_name, r.email AS requester_email, "
    "t.name AS target_name, t.email AS target_email, s.message, s.skills_offered, "
    "s.skills_requested, s.status, s.completed_at, s.created_at, s.updated_at "
    "FROM swap_requests s "
    "LEFT JOIN users r ON r.id = s.requester_id "
    "LEFT JOIN users t ON t.id = s.target_id"
)


def _row_to_admin_swap(row) -> SwapRequestAdminRead:
    return SwapRequestAdminRead(
        id=row["id"],
        requester_id=row["requester_id"],
        target_id=row["target_id"],
        requester_name=row["requester_name"],
        requester_email=row["requester_email"],
        target_name=row["target_name"],
        target_email=row["target_email"],
        message=row["message"],
        skills_offered=load_skills(row["skills_offered"]),
        skills_requested=load_skills(row["skills_requested"]),
        status=SwapStatus(row["status"]),
        completed_at=row["completed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class AdminService:
    """Service implementing moderation and reporting for administrators."""

    @classmethod
    async def promote(
        cls, user_id: int, current_user: Dict, secret_key: Optional[str] = None
    ) -> UserRead:
        """Grant admin rights to ``user_id``.

        An existing administrator may always promote.  Until the first
        administrator exists, any authenticated user presenting the
        configured bootstrap secret may promote instead.  Promoting a
        user who is already an admin is a no-op and writes no log entry.
        """
        actor_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            if not current_user.get("is_admin"):
                admins = cursor.execute(
                    "SELECT COUNT(*) FROM users WHERE is_admin = 1"
                ).fetchone()[0]
                if admins or not verify_admin_secret(secret_key):
                    logger.warning("Rejected admin promotion of user %s by user %s", user_id, actor_id)
                    raise ForbiddenError("Invalid secret key")
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("User not found")
            if not row["is_admin"]:
                cursor.execute(
                    "UPDATE users SET is_admin = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (user_id,),
                )
                await AuditService.log(
                    admin_id=actor_id,
                    action=AdminAction.PROMOTE_USER,
                    target_user_id=user_id,
                    details=f"User {row['name']} promoted to admin",
                    cursor=cursor,
                )
                logger.info("User %s promoted user %s to admin", actor_id, user_id)
            conn.commit()
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return row_to_read(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def list_users(
        cls, page: int = 1, limit: int = 20, banned: Optional[bool] = None
    ) -> UserPage:
        """Page through all users, newest first, optionally by ban status."""
        where = ""
        params: List[Any] = []
        if banned is not None:
            where = " WHERE is_banned = ?"
            params.append(1 if banned else 0)
        conn = get_connection()
        try:
            total = conn.execute(f"SELECT COUNT(*) FROM users{where}", tuple(params)).fetchone()[0]
            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users{where} "
                "ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                tuple(params + [limit, (page - 1) * limit]),
            ).fetchall()
            return UserPage(
                users=[row_to_read(row) for row in rows],
                total=total,
                page=page,
                total_pages=total_pages(total, limit),
            )
        finally:
            conn.close()

    @classmethod
    async def set_ban(cls, user_id: int, is_banned: bool, current_user: Dict) -> UserRead:
        """Ban or unban a user and log the resulting state."""
        admin_id = current_user["user_id"]
        if user_id == admin_id:
            raise ValidationFailed("Cannot change the ban status of your own account")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id, name FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise NotFoundError("User not found")
            cursor.execute(
                "UPDATE users SET is_banned = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (1 if is_banned else 0, user_id),
            )
            verb = "banned" if is_banned else "unbanned"
            await AuditService.log(
                admin_id=admin_id,
                action=AdminAction.BAN_USER if is_banned else AdminAction.UNBAN_USER,
                target_user_id=user_id,
                details=f"User {verb}: {row['name']}",
                cursor=cursor,
            )
            conn.commit()
            logger.info("Admin %s %s user %s", admin_id, verb, user_id)
            updated = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return row_to_read(updated)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def swap_stats(cls) -> SwapStats:
        """Swap counts grouped by status plus user and rating totals."""
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT status, COUNT(*) AS count FROM swap_requests GROUP BY status ORDER BY status"
            ).fetchall()
            total_users = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
            total_ratings = conn.execute("SELECT COUNT(*) FROM ratings").fetchone()[0]
            return SwapStats(
                swap_stats=[StatusCount(status=row["status"], count=row["count"]) for row in rows],
                total_users=total_users,
                total_ratings=total_ratings,
            )
        finally:
            conn.close()

    @classmethod
    async def list_swaps(
        cls, page: int = 1, limit: int = 20, status: Optional[SwapStatus] = None
    ) -> SwapPage:
        where = ""
        params: List[Any] = []
        if status is not None:
            where = " WHERE s.status = ?"
            params.append(SwapStatus(status).value)
        conn = get_connection()
        try:
            total = conn.execute(
                f"SELECT COUNT(*) FROM swap_requests s{where}", tuple(params)
            ).fetchone()[0]
            rows = conn.execute(
                f"{ADMIN_SWAP_SELECT}{where} ORDER BY s.created_at DESC, s.id DESC LIMIT ? OFFSET ?",
                tuple(params + [limit, (page - 1) * limit]),
            ).fetchall()
            return SwapPage(
                swap_requests=[_row_to_admin_swap(row) for row in rows],
                total=total,
                page=page,
                total_pages=total_pages(total, limit),
            )
        finally:
            conn.close()

    @classmethod
    async def delete_swap(cls, swap_id: int, current_user: Dict) -> int:
        """Permanently delete a swap request together with its ratings.

        The aggregates of users who lost a rating are rebuilt in the same
        transaction.  Returns the number of ratings removed.
        """
        admin_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            swap = cursor.execute(
                "SELECT id FROM swap_requests WHERE id = ?", (swap_id,)
            ).fetchone()
            if not swap:
                raise NotFoundError("Swap request not found")
            affected = [
                row["rated_user_id"]
                for row in cursor.execute(
                    "SELECT DISTINCT rated_user_id FROM ratings WHERE swap_request_id = ?",
                    (swap_id,),
                ).fetchall()
            ]
            cursor.execute("DELETE FROM ratings WHERE swap_request_id = ?", (swap_id,))
            ratings_removed = cursor.rowcount
            cursor.execute("DELETE FROM swap_requests WHERE id = ?", (swap_id,))
            for user_id in affected:
                RatingService.recompute_user_rating(cursor, user_id)
            await AuditService.log(
                admin_id=admin_id,
                action=AdminAction.DELETE_SWAP,
                details=f"Deleted swap request: {swap_id}",
                metadata={"swap_request_id": swap_id, "ratings_removed": ratings_removed},
                cursor=cursor,
            )
            conn.commit()
            logger.info(
                "Admin %s deleted swap request %s (%s ratings removed)",
                admin_id, swap_id, ratings_removed,
            )
            return ratings_removed
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def export(cls, entity: str, current_user: Dict) -> ExportResponse:
        """Return every record of ``entity`` and log the export with its count."""
        try:
            export_type = ExportType(entity)
        except ValueError:
            raise ValidationFailed("Invalid export type")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if export_type is ExportType.USERS:
                rows = cursor.execute(
                    f"SELECT {USER_COLUMNS} FROM users ORDER BY id"
                ).fetchall()
                data = [row_to_read(row).model_dump() for row in rows]
            elif export_type is ExportType.SWAPS:
                rows = cursor.execute(f"{ADMIN_SWAP_SELECT} ORDER BY s.id").fetchall()
                data = [_row_to_admin_swap(row).model_dump(mode="json") for row in rows]
            else:
                rows = cursor.execute(
                    "SELECT r.id, r.rater_id, f.name AS rater_name, r.rated_user_id, "
                    "t.name AS rated_user_name, r.swap_request_id, r.score, r.feedback, r.created_at "
                    "FROM ratings r "
                    "LEFT JOIN users f ON f.id = r.rater_id "
                    "LEFT JOIN users t ON t.id = r.rated_user_id "
                    "ORDER BY r.id"
                ).fetchall()
                data = [dict(row) for row in rows]
            await AuditService.log(
                admin_id=current_user["user_id"],
                action=AdminAction.EXPORT_DATA,
                details=f"Exported {export_type.value} data",
                metadata={"type": export_type.value, "count": len(data)},
                cursor=cursor,
            )
            conn.commit()
            logger.info(
                "Admin %s exported %s %s records",
                current_user["user_id"], len(data), export_type.value,
            )
            return ExportResponse(type=export_type, count=len(data), data=data)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def list_logs(cls, page: int = 1, limit: int = 20) -> AdminLogPage:
        total = await AuditService.count_logs()
        logs = await AuditService.list_logs(limit=limit, offset=(page - 1) * limit)
        return AdminLogPage(
            logs=[AdminLogRead(**entry) for entry in logs],
            total=total,
            page=page,
            total_pages=total_pages(total, limit),
        )

    @classmethod
    async def send_alert(cls, data: AlertCreate, current_user: Dict) -> AlertRead:
        """Publish a platform-wide alert and log it."""
        admin_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO alerts (admin_id, title, message) VALUES (?, ?, ?)",
                (admin_id, data.title, data.message),
            )
            alert_id = cursor.lastrowid
            await AuditService.log(
                admin_id=admin_id,
                action=AdminAction.SEND_ALERT,
                details=f"Sent alert: {data.title}",
                metadata={"alert_id": alert_id},
                cursor=cursor,
            )
            conn.commit()
            row = cursor.execute(
                "SELECT id, admin_id, title, message, created_at FROM alerts WHERE id = ?",
                (alert_id,),
            ).fetchone()
            logger.info("Admin %s sent alert %s", admin_id, alert_id)
            return AlertRead(**dict(row))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def list_alerts(cls, limit: int = 10) -> List[AlertRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT id, admin_id, title, message, created_at FROM alerts "
                "ORDER BY created_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return [AlertRead(**dict(row)) for row in rows]
        finally:
            conn.close()
