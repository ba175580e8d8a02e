"""
Business logic for the rating ledger.

A participant of a completed swap may rate the other participant once.
The rating row and the rated user's aggregate are written in the same
transaction: ``rating_sum`` and ``total_ratings`` are incremented and
``rating`` is re-derived from them, so the stored average always
equals the mean of every score received, rounded half away from zero
to one decimal.
"""

import logging
import sqlite3
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from ..core.db import get_connection, load_skills
from ..core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    InvalidTargetError,
    NotFoundError,
)
from ..schemas.rating import RatingCreate, RatingDetail, RatingRead
from ..schemas.swap import SwapStatus

logger = logging.getLogger(__name__)

RATING_COLUMNS = "id, rater_id, rated_user_id, swap_request_id, score, feedback, created_at"


def round_rating(score_sum: int, count: int) -> float:
    """Mean of ``count`` scores summing to ``score_sum``, to one decimal (half up)."""
    if count <= 0:
        return 0.0
    mean = Decimal(score_sum) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _row_to_detail(row: sqlite3.Row, counterpart_column: str) -> RatingDetail:
    return RatingDetail(
        id=row["id"],
        rater_id=row["rater_id"],
        rated_user_id=row["rated_user_id"],
        swap_request_id=row["swap_request_id"],
        score=row["score"],
        feedback=row["feedback"],
        created_at=row["created_at"],
        counterpart_id=row[counterpart_column],
        counterpart_name=row["counterpart_name"],
        skills_offered=load_skills(row["skills_offered"]),
        skills_requested=load_skills(row["skills_requested"]),
    )


class RatingService:
    """Service for submitting and reading ratings."""

    @classmethod
    async def submit(cls, current_user: Dict, data: RatingCreate) -> RatingRead:
        """Record the caller's rating of the other participant of a completed swap.

        Checks, in order: the swap exists, it is completed, the caller
        took part in it, ``rated_user_id`` is the other participant, and
        the caller has not rated this swap yet.
        """
        rater_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            swap = cursor.execute(
                "SELECT id, requester_id, target_id, status FROM swap_requests WHERE id = ?",
                (data.swap_request_id,),
            ).fetchone()
            if not swap:
                raise NotFoundError("Swap request not found")
            if swap["status"] != SwapStatus.COMPLETED.value:
                raise InvalidStateError("Can only rate completed swaps")
            if rater_id not in (swap["requester_id"], swap["target_id"]):
                raise ForbiddenError("Not authorized to rate this swap")
            counterpart = (
                swap["target_id"] if rater_id == swap["requester_id"] else swap["requester_id"]
            )
            if data.rated_user_id != counterpart:
                raise InvalidTargetError("Invalid rating target")
            if cls._existing_rating_id(cursor, rater_id, data.swap_request_id):
                raise ConflictError("You have already rated this swap")
            try:
                cursor.execute(
                    "INSERT INTO ratings (rater_id, rated_user_id, swap_request_id, score, feedback) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (rater_id, counterpart, data.swap_request_id, data.score, data.feedback),
                )
            except sqlite3.IntegrityError:
                raise ConflictError("You have already rated this swap")
            rating_id = cursor.lastrowid
            cursor.execute(
                "UPDATE users SET rating_sum = rating_sum + ?, total_ratings = total_ratings + 1, "
                "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (data.score, counterpart),
            )
            cls._refresh_average(cursor, counterpart)
            conn.commit()
            row = cursor.execute(
                f"SELECT {RATING_COLUMNS} FROM ratings WHERE id = ?", (rating_id,)
            ).fetchone()
            logger.info(
                "User %s rated user %s %s/5 for swap %s",
                rater_id, counterpart, data.score, data.swap_request_id,
            )
            return RatingRead(**dict(row))
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _existing_rating_id(cursor: sqlite3.Cursor, rater_id: int, swap_id: int) -> Optional[int]:
        row = cursor.execute(
            "SELECT id FROM ratings WHERE rater_id = ? AND swap_request_id = ?",
            (rater_id, swap_id),
        ).fetchone()
        return row["id"] if row else None

    @staticmethod
    def _refresh_average(cursor: sqlite3.Cursor, user_id: int) -> None:
        totals = cursor.execute(
            "SELECT rating_sum, total_ratings FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        cursor.execute(
            "UPDATE users SET rating = ? WHERE id = ?",
            (round_rating(totals["rating_sum"], totals["total_ratings"]), user_id),
        )

    @classmethod
    def recompute_user_rating(cls, cursor: sqlite3.Cursor, user_id: int) -> None:
        """Rebuild a user's aggregate from the full rating history.

        Runs on the caller's cursor so it shares their transaction; used
        after ratings are removed.
        """
        totals = cursor.execute(
            "SELECT COALESCE(SUM(score), 0) AS score_sum, COUNT(*) AS count "
            "FROM ratings WHERE rated_user_id = ?",
            (user_id,),
        ).fetchone()
        cursor.execute(
            "UPDATE users SET rating_sum = ?, total_ratings = ?, updated_at = CURRENT_TIMESTAMP "
            "WHERE id = ?",
            (totals["score_sum"], totals["count"], user_id),
        )
        cls._refresh_average(cursor, user_id)

    @classmethod
    async def ratings_for_user(cls, user_id: int, limit: Optional[int] = 10) -> List[RatingDetail]:
        """Ratings received by ``user_id``, newest first, with rater names."""
        return await cls._list("rated_user_id", "rater_id", user_id, limit)

    @classmethod
    async def ratings_given(cls, current_user: Dict) -> List[RatingDetail]:
        """Every rating the caller has given, newest first."""
        return await cls._list("rater_id", "rated_user_id", current_user["user_id"], None)

    @classmethod
    async def _list(
        cls, owner_column: str, counterpart_column: str, user_id: int, limit: Optional[int]
    ) -> List[RatingDetail]:
        query = (
            "SELECT r.id, r.rater_id, r.rated_user_id, r.swap_request_id, r.score, r.feedback, "
            "r.created_at, u.name AS counterpart_name, s.skills_offered, s.skills_requested "
            "FROM ratings r "
            f"LEFT JOIN users u ON u.id = r.{counterpart_column} "
            "LEFT JOIN swap_requests s ON s.id = r.swap_request_id "
            f"WHERE r.{owner_column} = ? "
            "ORDER BY r.created_at DESC, r.id DESC"
        )
        params: List = [user_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
            return [_row_to_detail(row, counterpart_column) for row in rows]
        finally:
            conn.close()
