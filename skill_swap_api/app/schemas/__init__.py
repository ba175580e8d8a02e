"""
Pydantic schema definitions for API payloads.

Each domain (users, swaps, ratings, admin) defines its own models for
request and response bodies.  Schemas are kept apart from the SQL in
the service layer so the API representation can evolve independently
of storage.
"""
