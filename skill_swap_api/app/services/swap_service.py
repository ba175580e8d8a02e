"""
Business logic for swap requests.

A swap request is created ``pending`` by its requester and then moved
through a fixed lifecycle:

* ``accept`` / ``reject``: target only, from ``pending``.
* ``cancel``: requester only, from ``pending``.
* ``complete``: either participant, from ``accepted``; stamps
  ``completed_at``.

Checks run in the order not-found, not-authorized, wrong state.  The
final write is conditional on the expected current status, so two
racing transitions cannot both succeed.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..core.db import dump_skills, get_connection, load_skills
from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationFailed,
)
from ..schemas.swap import SwapRequestCreate, SwapRequestRead, SwapStatus

logger = logging.getLogger(__name__)

SWAP_SELECT = (
    "SELECT s.id, s.requester_id, s.target_id, r.name AS requester_name, "
    "t.name AS target_name, s.message, s.skills_offered, s.skills_requested, "
    "s.status, s.completed_at, s.created_at, s.updated_at "
    "FROM swap_requests s "
    "LEFT JOIN users r ON r.id = s.requester_id "
    "LEFT JOIN users t ON t.id = s.target_id"
)


@dataclass(frozen=True)
class Transition:
    """One edge of the swap lifecycle and who may traverse it."""

    source: SwapStatus
    target: SwapStatus
    actor: str  # "requester", "target" or "participant"
    forbidden_message: str
    state_message: str
    done_message: str


TRANSITIONS: Dict[str, Transition] = {
    "accept": Transition(
        SwapStatus.PENDING, SwapStatus.ACCEPTED, "target",
        "Not authorized to accept this request",
        "Request is not pending",
        "Swap request accepted",
    ),
    "reject": Transition(
        SwapStatus.PENDING, SwapStatus.REJECTED, "target",
        "Not authorized to reject this request",
        "Request is not pending",
        "Swap request rejected",
    ),
    "cancel": Transition(
        SwapStatus.PENDING, SwapStatus.CANCELLED, "requester",
        "Only the sender can cancel the request",
        "Can only cancel pending requests",
        "Swap request cancelled",
    ),
    "complete": Transition(
        SwapStatus.ACCEPTED, SwapStatus.COMPLETED, "participant",
        "Not authorized to complete this request",
        "Request must be accepted to complete",
        "Swap completed successfully",
    ),
}


def row_to_swap(row: sqlite3.Row) -> SwapRequestRead:
    return SwapRequestRead(
        id=row["id"],
        requester_id=row["requester_id"],
        target_id=row["target_id"],
        requester_name=row["requester_name"],
        target_name=row["target_name"],
        message=row["message"],
        skills_offered=load_skills(row["skills_offered"]),
        skills_requested=load_skills(row["skills_requested"]),
        status=SwapStatus(row["status"]),
        completed_at=row["completed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _is_allowed(actor: str, row: sqlite3.Row, user_id: int) -> bool:
    if actor == "requester":
        return row["requester_id"] == user_id
    if actor == "target":
        return row["target_id"] == user_id
    return user_id in (row["requester_id"], row["target_id"])


class SwapService:
    """Service for creating swap requests and driving their lifecycle."""

    @classmethod
    async def create(cls, current_user: Dict, data: SwapRequestCreate) -> SwapRequestRead:
        """Create a pending swap request from the caller to ``data.target_user_id``.

        Refuses requests to oneself, to missing or banned users, and a
        second pending request in the same direction.  A pending request
        in the opposite direction does not block this one.
        """
        requester_id = current_user["user_id"]
        if data.target_user_id == requester_id:
            raise ValidationFailed("Cannot send request to yourself")
        conn = get_connection()
        try:
            cursor = conn.cursor()
            target = cursor.execute(
                "SELECT id, is_banned FROM users WHERE id = ?", (data.target_user_id,)
            ).fetchone()
            if not target or target["is_banned"]:
                raise NotFoundError("User not found")
            if cls._pending_request_id(cursor, requester_id, data.target_user_id):
                raise ConflictError("You already have a pending request with this user")
            try:
                cursor.execute(
                    "INSERT INTO swap_requests (requester_id, target_id, message, skills_offered, skills_requested) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        requester_id,
                        data.target_user_id,
                        data.message,
                        dump_skills(data.skills_offered),
                        dump_skills(data.skills_requested),
                    ),
                )
            except sqlite3.IntegrityError:
                # Lost a race against a concurrent identical request.
                raise ConflictError("You already have a pending request with this user")
            swap_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(f"{SWAP_SELECT} WHERE s.id = ?", (swap_id,)).fetchone()
            logger.info(
                "User %s sent swap request %s to user %s", requester_id, swap_id, data.target_user_id
            )
            return row_to_swap(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _pending_request_id(cursor: sqlite3.Cursor, requester_id: int, target_id: int) -> Optional[int]:
        row = cursor.execute(
            "SELECT id FROM swap_requests WHERE requester_id = ? AND target_id = ? AND status = ?",
            (requester_id, target_id, SwapStatus.PENDING.value),
        ).fetchone()
        return row["id"] if row else None

    @classmethod
    async def get(cls, swap_id: int, current_user: Dict) -> SwapRequestRead:
        """Return a single swap request to one of its participants or an admin."""
        conn = get_connection()
        try:
            row = conn.execute(f"{SWAP_SELECT} WHERE s.id = ?", (swap_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError("Swap request not found")
        if not current_user.get("is_admin") and not _is_allowed(
            "participant", row, current_user["user_id"]
        ):
            raise ForbiddenError("Not authorized to view this request")
        return row_to_swap(row)

    @classmethod
    async def list_for_user(
        cls, current_user: Dict, status: Optional[SwapStatus] = None
    ) -> List[SwapRequestRead]:
        """Requests the caller sent or received, newest first."""
        user_id = current_user["user_id"]
        query = f"{SWAP_SELECT} WHERE (s.requester_id = ? OR s.target_id = ?)"
        params: List = [user_id, user_id]
        if status is not None:
            query += " AND s.status = ?"
            params.append(SwapStatus(status).value)
        query += " ORDER BY s.created_at DESC, s.id DESC"
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
            return [row_to_swap(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def accept(cls, swap_id: int, current_user: Dict) -> SwapRequestRead:
        return await cls._transition(swap_id, current_user, "accept")

    @classmethod
    async def reject(cls, swap_id: int, current_user: Dict) -> SwapRequestRead:
        return await cls._transition(swap_id, current_user, "reject")

    @classmethod
    async def cancel(cls, swap_id: int, current_user: Dict) -> SwapRequestRead:
        return await cls._transition(swap_id, current_user, "cancel")

    @classmethod
    async def complete(cls, swap_id: int, current_user: Dict) -> SwapRequestRead:
        return await cls._transition(swap_id, current_user, "complete")

    @classmethod
    async def _transition(cls, swap_id: int, current_user: Dict, name: str) -> SwapRequestRead:
        rule = TRANSITIONS[name]
        user_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute(
                "SELECT id, requester_id, target_id, status FROM swap_requests WHERE id = ?",
                (swap_id,),
            ).fetchone()
            if not row:
                raise NotFoundError("Swap request not found")
            if not _is_allowed(rule.actor, row, user_id):
                raise ForbiddenError(rule.forbidden_message)
            if row["status"] != rule.source.value:
                raise InvalidStateError(rule.state_message)
            completed_clause = (
                ", completed_at = CURRENT_TIMESTAMP" if rule.target is SwapStatus.COMPLETED else ""
            )
            cursor.execute(
                f"UPDATE swap_requests SET status = ?, updated_at = CURRENT_TIMESTAMP{completed_clause} "
                "WHERE id = ? AND status = ?",
                (rule.target.value, swap_id, rule.source.value),
            )
            if cursor.rowcount == 0:
                raise InvalidStateError(rule.state_message)
            conn.commit()
            updated = cursor.execute(f"{SWAP_SELECT} WHERE s.id = ?", (swap_id,)).fetchone()
            logger.info(
                "User %s moved swap request %s from %s to %s",
                user_id, swap_id, rule.source.value, rule.target.value,
            )
            return row_to_swap(updated)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
