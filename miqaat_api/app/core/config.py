"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts without any setup; override them via environment variables
in a real deployment.
"""

import os
from dataclasses import dataclass
from typing import List, Set


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Miqaat Management API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Key shared with ITS OneLogin.  Identities arrive as
    # base64(IV || AES-256-CBC ciphertext) encrypted with this key.
    its_encryption_key: str = os.getenv("ITS_ENCRYPTION_KEY", "")

    # Comma-separated ITS ids granted the ``admin`` role, e.g.
    # ADMIN_ITS_IDS="30361114,40456337".
    admin_its_ids: str = os.getenv("ADMIN_ITS_IDS", "")

    # Comma-separated jamaat names whose members may read their own
    # registry record through ``GET /mumineen/``.  Empty means no filter.
    allowed_jamaats: str = os.getenv("ALLOWED_JAMAATS", "")

    # Path or connection string for the SQLite database.  Relative
    # paths are resolved against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "miqaat.db")

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    def role_its_ids(self) -> dict:
        """Map each role name to the set of ITS ids holding it."""
        return {"admin": {int(v) for v in _split_list(self.admin_its_ids) if v.isdigit()}}

    def jamaat_filter(self) -> Set[str]:
        return {j.upper() for j in _split_list(self.allowed_jamaats)}


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module; tests patch attributes directly.
settings = Settings()
