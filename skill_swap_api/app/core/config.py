"""
Application configuration.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration; override them via the
environment in a real deployment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Skill Swap API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Shared secret accepted by the promotion endpoint only while no
    # administrator exists yet.  Once the first admin is in place,
    # promotions require an admin caller.  Empty disables the bootstrap
    # path entirely.
    admin_secret_key: str = os.getenv("ADMIN_SECRET_KEY", "")

    # Path to the SQLite database.  Relative paths are resolved against
    # the package root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "skill_swap.db")

    discover_limit: int = int(os.getenv("DISCOVER_LIMIT", "20"))
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    public_ratings_limit: int = int(os.getenv("PUBLIC_RATINGS_LIMIT", "10"))


# Environment variables must be set before this module is imported.
settings = Settings()
