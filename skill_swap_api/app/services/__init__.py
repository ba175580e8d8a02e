"""
Service layer.

Each service encapsulates the business rules for one domain and
receives the calling user explicitly as a plain dict, so the rules can
be exercised without an HTTP request.
"""
