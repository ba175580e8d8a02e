"""
Audit service for the administrator action log.

Every moderation action (promotion, ban/unban, swap deletion, alerts,
exports) is appended to ``admin_logs``.  The log is append-only: there
is no update or delete path.  Entries are written on the caller's
cursor so they commit or roll back together with the action they
describe.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, List, Optional

from skill_swap_api.app.core.db import get_connection
from skill_swap_api.app.schemas.admin import AdminAction


class AuditService:
    """Service class for writing and retrieving admin log entries."""

    @classmethod
    async def log(
        cls,
        admin_id: int,
        action: AdminAction,
        target_user_id: Optional[int] = None,
        details: Optional[str] = None,
        metadata: Optional[dict] = None,
        *,
        cursor: sqlite3.Cursor,
    ) -> int:
        """Insert a new admin log record and return its id.

        Parameters
        ----------
        admin_id : int
            ID of the administrator performing the action.
        action : AdminAction
            One of the fixed action tags.
        target_user_id : Optional[int]
            User affected by the action, if any.
        details : Optional[str]
            Human readable description.
        metadata : Optional[dict]
            Additional structured data, stored as JSON.
        cursor : sqlite3.Cursor
            Cursor of the transaction performing the action; the caller
            commits.
        """
        params = (
            admin_id,
            AdminAction(action).value,
            target_user_id,
            details,
            json.dumps(metadata) if metadata is not None else None,
        )
        sql = (
            "INSERT INTO admin_logs (admin_id, action, target_user_id, details, metadata) "
            "VALUES (?, ?, ?, ?, ?)"
        )
        cursor.execute(sql, params)
        return cursor.lastrowid

    @classmethod
    async def count_logs(cls, action: Optional[AdminAction] = None) -> int:
        conn = get_connection()
        try:
            if action is None:
                return conn.execute("SELECT COUNT(*) FROM admin_logs").fetchone()[0]
            return conn.execute(
                "SELECT COUNT(*) FROM admin_logs WHERE action = ?",
                (AdminAction(action).value,),
            ).fetchone()[0]
        finally:
            conn.close()

    @classmethod
    async def list_logs(
        cls,
        action: Optional[AdminAction] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Retrieve log entries newest first with admin and target names resolved."""
        conn = get_connection()
        try:
            params: List[Any] = []
            query = (
                "SELECT l.id, l.admin_id, a.name AS admin_name, l.action, l.target_user_id, "
                "t.name AS target_user_name, l.details, l.metadata, l.created_at "
                "FROM admin_logs l "
                "LEFT JOIN users a ON a.id = l.admin_id "
                "LEFT JOIN users t ON t.id = l.target_user_id"
            )
            if action is not None:
                query += " WHERE l.action = ?"
                params.append(AdminAction(action).value)
            query += " ORDER BY l.created_at DESC, l.id DESC LIMIT ? OFFSET ?"
            params.extend([limit, offset])
            rows = conn.execute(query, tuple(params)).fetchall()
            logs = []
            for row in rows:
                metadata = None
                if row["metadata"]:
                    try:
                        metadata = json.loads(row["metadata"])
                    except json.JSONDecodeError:
                        metadata = {"raw": row["metadata"]}
                logs.append(
                    {
                        "id": row["id"],
                        "admin_id": row["admin_id"],
                        "admin_name": row["admin_name"],
                        "action": row["action"],
                        "target_user_id": row["target_user_id"],
                        "target_user_name": row["target_user_name"],
                        "details": row["details"],
                        "metadata": metadata,
                        "created_at": row["created_at"],
                    }
                )
            return logs
        finally:
            conn.close()
