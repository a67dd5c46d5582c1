import os
import logging
from pydantic import BaseModel, ConfigDict, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


class AdminSettings(BaseModel):
    """Bootstrap administrator identity, used on first run only."""
    model_config = ConfigDict(frozen=True)

    email: str = Field(default_factory=lambda: os.getenv("ADMIN_EMAIL", "admin@local"))
    password: str = Field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin1234"))
    name: str = Field(default_factory=lambda: os.getenv("ADMIN_NAME", "System Administrator"))


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    app_name: str = "OKR Tracker"
    environment: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = Field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./okr.db"))

    # Auth
    secret_key: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD"))
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # First-run administrator
    admin: AdminSettings = Field(default_factory=AdminSettings)

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = Field(default_factory=lambda: int(os.getenv("RATE_LIMIT_PER_MINUTE", "60")))

    # Where OKRClient keeps its session when no storage is passed in
    client_storage_path: str = Field(
        default_factory=lambda: os.getenv(
            "CLIENT_STORAGE_PATH", os.path.join(os.path.expanduser("~"), ".okr_tracker", "storage.json")
        )
    )


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("⚠ Using insecure default SECRET_KEY, only acceptable in development.")
