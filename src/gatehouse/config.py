"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with GATEHOUSE_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: The signing secret and the database URL have no defaults. A process
started without them logs a fatal event and exits instead of running with
a guessable secret or a dangling connection string.
"""

import structlog
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from gatehouse.logging_config import configure_logging

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """All app configuration. Set via GATEHOUSE_* env vars."""

    # Database
    database_url: str

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    bcrypt_rounds: int = 12

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_prefix": "GATEHOUSE_"}

    @field_validator("database_url", "jwt_secret")
    @classmethod
    def require_non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def require_hmac(cls, value: str) -> str:
        if value not in HMAC_ALGORITHMS:
            raise ValueError(f"must be one of {', '.join(HMAC_ALGORITHMS)}")
        return value


def load_settings() -> Settings:
    """Load settings, exiting the process if required values are absent.

    Runs at import time, before the app factory configures logging, so
    the fatal path sets up the JSON renderer itself.
    """
    try:
        return Settings()
    except ValidationError as exc:
        fields = [
            "GATEHOUSE_" + "_".join(str(part) for part in err["loc"]).upper()
            for err in exc.errors()
        ]
        configure_logging(json_logs=True)
        structlog.get_logger().critical("config.invalid", fields=fields)
        raise SystemExit(1) from exc


# Singleton — import this everywhere
settings = load_settings()
