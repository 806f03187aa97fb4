"""
Service configuration, read once at process start.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from planner.exceptions import ConfigurationError

DEFAULT_DB_PATH = "data/planner.db"
DEFAULT_PORT = 8004


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Settings:
    """Runtime settings for the planner service."""

    jwt_secret: str
    jwt_expires_days: int = 7
    google_client_id: Optional[str] = None
    db_path: str = DEFAULT_DB_PATH
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    tracing_enabled: bool = False

    def __post_init__(self):
        if not self.jwt_secret:
            raise ConfigurationError("JWT_SECRET environment variable is required")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables (and a .env file if present).

        Raises:
            ConfigurationError: If JWT_SECRET is not set
        """
        load_dotenv()

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ConfigurationError("JWT_SECRET environment variable is required")

        cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        return cls(
            jwt_secret=jwt_secret,
            jwt_expires_days=int(os.getenv("JWT_EXPIRES_DAYS", "7")),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
            db_path=os.getenv("PLANNER_DB_PATH", DEFAULT_DB_PATH),
            port=int(os.getenv("PLANNER_SERVICE_PORT", str(DEFAULT_PORT))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=cors_origins or ["*"],
            tracing_enabled=_env_bool("OTEL_TRACING_ENABLED", "false"),
        )
