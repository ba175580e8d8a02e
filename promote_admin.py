#!/usr/bin/env python3
"""
Promote an existing user to administrator directly in the SQLite database.

Intended for operators with access to the database file, e.g. to create
the first admin without going through the HTTP bootstrap secret.  The
promotion is recorded in ``admin_logs`` with the user as their own
actor.

Usage:
    python promote_admin.py --db ./skill_swap_api/skill_swap.db --email admin@example.com
"""

import argparse
import os
import sqlite3
import sys
from typing import List, Optional


def promote(db_path: str, email: str) -> int:
    """Promote the user with ``email``.

    Returns a process exit code: 0 on success or if the user already is
    an admin, 2 if no such user exists.
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        cur = conn.cursor()
        row = cur.execute(
            "SELECT id, name, is_admin FROM users WHERE email = ?", (email.lower(),)
        ).fetchone()
        if not row:
            print(f"[!] No user found with email: {email}", file=sys.stderr)
            print("[!] Register the user through the application first.", file=sys.stderr)
            return 2
        if row["is_admin"]:
            print(f"[=] User {row['name']} is already an admin")
            return 0
        cur.execute(
            "UPDATE users SET is_admin = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (row["id"],),
        )
        cur.execute(
            "INSERT INTO admin_logs (admin_id, action, target_user_id, details) VALUES (?, ?, ?, ?)",
            (row["id"], "promote_user", row["id"], f"User {row['name']} promoted to admin from the command line"),
        )
        conn.commit()
        print(f"[+] Promoted {row['name']} ({email}) to admin")
        return 0
    finally:
        conn.close()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Promote a Skill Swap user to administrator (SQLite).")
    ap.add_argument("--db", required=True, help="Path to the SQLite DB file")
    ap.add_argument("--email", required=True, help="Email of the user to promote")
    args = ap.parse_args(argv)

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1
    return promote(args.db, args.email)


if __name__ == "__main__":
    sys.exit(main())
