"""
Business logic for the user directory.

Covers registration and login (a thin authentication layer), profile
reads and updates, the two skill lists and discovery of other users.
Only the fields listed in ``ProfileUpdate`` can be changed by a user;
the aggregate rating is owned by ``RatingService`` and the ban/admin
flags by ``AdminService``.
"""

import logging
import sqlite3
from typing import Dict, List, Optional

from ..core.db import dump_skills, get_connection, load_skills
from ..core.exceptions import ConflictError, ForbiddenError, NotFoundError
from ..core.security import hash_password, verify_password
from ..schemas.user import (
    ProfileUpdate,
    SkillKind,
    UserPublic,
    UserRead,
    UserRegister,
)

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, email, name, location, availability, skills_offered, skills_wanted, "
    "is_public, is_banned, is_admin, rating, total_ratings, created_at"
)

SKILL_COLUMNS = {
    SkillKind.OFFERED: "skills_offered",
    SkillKind.WANTED: "skills_wanted",
}


def row_to_public(row: sqlite3.Row) -> UserPublic:
    return UserPublic(
        id=row["id"],
        name=row["name"],
        location=row["location"],
        availability=row["availability"],
        skills_offered=load_skills(row["skills_offered"]),
        skills_wanted=load_skills(row["skills_wanted"]),
        is_public=bool(row["is_public"]),
        rating=row["rating"],
        total_ratings=row["total_ratings"],
    )


def row_to_read(row: sqlite3.Row) -> UserRead:
    return UserRead(
        **row_to_public(row).model_dump(),
        email=row["email"],
        is_admin=bool(row["is_admin"]),
        is_banned=bool(row["is_banned"]),
        created_at=row["created_at"],
    )


def _like_pattern(term: str) -> str:
    """Build a ``LIKE ... ESCAPE '\\'`` substring pattern for ``term``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserService:
    """Service for user accounts, profiles and discovery."""

    @classmethod
    async def create_user(cls, data: UserRegister) -> UserRead:
        """Register a new user with a hashed password.

        Raises ``ConflictError`` if the email is already taken.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    "INSERT INTO users (email, name, password) VALUES (?, ?, ?)",
                    (data.email.lower(), data.name, hash_password(data.password)),
                )
            except sqlite3.IntegrityError:
                raise ConflictError("User already exists with this email")
            user_id = cursor.lastrowid
            conn.commit()
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            logger.info("Registered user %s (%s)", user_id, row["email"])
            return row_to_read(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS}, password FROM users WHERE email = ?",
                (email.lower(),),
            ).fetchone()
        finally:
            conn.close()
        if not row or not verify_password(password, row["password"]):
            return None
        return row_to_read(row)

    @classmethod
    async def get_user_by_id(cls, user_id: int) -> Optional[UserRead]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            return row_to_read(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def get_profile(cls, user_id: int, current_user: Dict) -> UserPublic:
        """Return another user's public profile.

        Banned users are reported as missing to everyone but themselves;
        private profiles are only visible to their owner.
        """
        is_self = user_id == current_user.get("user_id")
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()
        if not row or (row["is_banned"] and not is_self):
            raise NotFoundError("User not found")
        if not row["is_public"] and not is_self:
            raise ForbiddenError("Profile is private")
        return row_to_public(row)

    @classmethod
    async def update_profile(cls, current_user: Dict, data: ProfileUpdate) -> UserRead:
        """Apply the provided profile fields to the caller's own record."""
        user_id = current_user["user_id"]
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if updates:
                fields = []
                values = []
                for key, value in updates.items():
                    if key in ("skills_offered", "skills_wanted"):
                        value = dump_skills(value)
                    elif isinstance(value, bool):
                        value = 1 if value else 0
                    fields.append(f"{key} = ?")
                    values.append(value)
                values.append(user_id)
                cursor.execute(
                    f"UPDATE users SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    tuple(values),
                )
                conn.commit()
                logger.info("User %s updated profile fields %s", user_id, sorted(updates))
            row = cursor.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("User not found")
            return row_to_read(row)
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def add_skill(cls, current_user: Dict, kind: SkillKind, skill: str) -> List[str]:
        """Append ``skill`` to one of the caller's lists unless already present."""
        return await cls._edit_skills(current_user, kind, skill, add=True)

    @classmethod
    async def remove_skill(cls, current_user: Dict, kind: SkillKind, skill: str) -> List[str]:
        """Remove every exact occurrence of ``skill`` from one of the caller's lists."""
        return await cls._edit_skills(current_user, kind, skill, add=False)

    @classmethod
    async def _edit_skills(cls, current_user: Dict, kind: SkillKind, skill: str, add: bool) -> List[str]:
        column = SKILL_COLUMNS[SkillKind(kind)]
        user_id = current_user["user_id"]
        conn = get_connection()
        try:
            cursor = conn.cursor()
            # Hold the write lock across the read-modify-write of the list.
            cursor.execute("BEGIN IMMEDIATE")
            row = cursor.execute(
                f"SELECT {column} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("User not found")
            skills = load_skills(row[column])
            if add:
                changed = skill not in skills
                if changed:
                    skills.append(skill)
            else:
                remaining = [s for s in skills if s != skill]
                changed = len(remaining) != len(skills)
                skills = remaining
            if changed:
                cursor.execute(
                    f"UPDATE users SET {column} = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (dump_skills(skills), user_id),
                )
            conn.commit()
            return skills
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @classmethod
    async def discover(
        cls,
        current_user: Dict,
        skill: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> List[UserPublic]:
        """Find other public, non-banned users.

        ``skill`` matches either skill list; ``search`` matches the name
        or either skill list and takes precedence when both are given.
        Matching is a case-insensitive (Unicode casefold) substring match.
        """
        where = ["u.is_public = 1", "u.is_banned = 0", "u.id != ?"]
        params: List = [current_user["user_id"]]
        skill_match = (
            "EXISTS (SELECT 1 FROM json_each(u.skills_offered) WHERE casefold(value) LIKE ? ESCAPE '\\') "
            "OR EXISTS (SELECT 1 FROM json_each(u.skills_wanted) WHERE casefold(value) LIKE ? ESCAPE '\\')"
        )
        search = search.strip() if search else None
        skill = skill.strip() if skill else None
        if search:
            pattern = _like_pattern(search.casefold())
            where.append(f"(casefold(u.name) LIKE ? ESCAPE '\\' OR {skill_match})")
            params.extend([pattern, pattern, pattern])
        elif skill:
            pattern = _like_pattern(skill.casefold())
            where.append(f"({skill_match})")
            params.extend([pattern, pattern])
        params.append(limit)
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users u WHERE {' AND '.join(where)} "
                "ORDER BY u.id LIMIT ?",
                tuple(params),
            ).fetchall()
            return [row_to_public(row) for row in rows]
        finally:
            conn.close()
