"""
Application package.

Organised by layer: ``core`` (configuration, database, security,
errors), ``schemas`` (pydantic payloads), ``services`` (business
rules) and ``api`` (versioned HTTP routers).  Each domain (users,
swaps, ratings, admin) has a module in each layer.
"""

from .main import app  # noqa: F401
