"""
Endpoint subpackage for API v1.

Each module defines an ``APIRouter`` for one domain (auth, users,
swaps, ratings, admin, alerts); ``router.py`` aggregates them.
"""
