"""
Configuration management for LinkFolio.

Builds the runtime configuration from defaults, an optional JSON config file
and ``LINKFOLIO_*`` environment variables.
"""

import json
import logging
import os
import secrets
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional, List

from .core.enums import Plan
from .core.plans import PLANS

# List of known weak/default JWT secrets that should be rejected
WEAK_JWT_SECRETS = {
    "your-secret-key-change-in-production",
    "secret",
    "key",
    "password",
    "jwt-secret",
    "secret-key",
    "change-me",
    "default",
    "test",
    "development",
    "dev",
    "demo",
    "example",
    "sample",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _validate_jwt_secret_key(jwt_secret_key: str) -> None:
    """Validate JWT secret key security and reject weak/default keys.

    Args:
        jwt_secret_key: The JWT secret key to validate

    Raises:
        SystemExit: If the secret key is weak, default, or insecure
    """
    if not jwt_secret_key:
        logging.critical(
            "JWT secret key is empty - this is a critical security vulnerability"
        )
        sys.exit(1)

    if len(jwt_secret_key) < 32:
        logging.critical(
            f"JWT secret key is too short ({len(jwt_secret_key)} chars). "
            f"Minimum 32 characters required for security."
        )
        sys.exit(1)

    if jwt_secret_key.lower() in WEAK_JWT_SECRETS:
        logging.critical(
            "JWT secret key is a known weak/default secret. "
            "Set LINKFOLIO_JWT_SECRET_KEY environment variable with a secure key."
        )
        sys.exit(1)

    unique_chars = len(set(jwt_secret_key))
    if unique_chars < 8:
        logging.critical(
            f"JWT secret key has insufficient entropy ({unique_chars} unique characters). "
            f"Use a cryptographically secure random key."
        )
        sys.exit(1)

    logging.debug(
        f"JWT secret key validation passed ({len(jwt_secret_key)} chars, {unique_chars} unique)"
    )


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///./linkfolio.db"
    echo: bool = False
    log_queries: bool = False  # Slow query warnings via engine events


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    auto_reload: bool = False
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )


@dataclass
class AppConfig:
    """Main application configuration."""

    app_name: str = "LinkFolio"
    description: str = "Link-in-bio profile pages with click and view analytics"
    public_url: str = "http://localhost:3000"

    # Session / JWT
    jwt_secret_key: str = ""  # Must be set at runtime - no default for security
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    session_cookie_name: str = "auth-token"
    cookie_secure: bool = False
    password_hash_iterations: int = 120_000  # PBKDF2 iterations

    # Analytics window: free plan length by default, capped at the pro plan length
    default_analytics_days: int = PLANS[Plan.FREE].analytics_days
    max_analytics_days: int = PLANS[Plan.PRO].analytics_days

    # Requests
    max_request_bytes: int = 16 * 1024

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"


@dataclass
class LinkFolioConfig:
    """Complete configuration for LinkFolio."""

    app: AppConfig
    server: ServerConfig
    database: DatabaseConfig

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LinkFolioConfig":
        """Create from dictionary."""
        return cls(
            app=AppConfig(**data.get("app", {})),
            server=ServerConfig(**data.get("server", {})),
            database=DatabaseConfig(**data.get("database", {})),
        )


class ConfigManager:
    """Loads configuration from file and environment."""

    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[LinkFolioConfig] = None

    def get_config_file_path(self) -> Optional[Path]:
        """Get the path of the optional JSON config file."""
        config_file = os.getenv("LINKFOLIO_CONFIG_FILE")
        return Path(config_file) if config_file else None

    def _apply_environment(self, config: LinkFolioConfig) -> LinkFolioConfig:
        """Overlay ``LINKFOLIO_*`` environment variables onto a config."""
        db_url = os.getenv("LINKFOLIO_DATABASE_URL") or os.getenv("DATABASE_URL")
        if db_url:
            config.database.url = db_url
        config.database.log_queries = _env_flag(
            "LINKFOLIO_LOG_QUERIES", config.database.log_queries
        )

        config.server.host = os.getenv("LINKFOLIO_HOST", config.server.host)
        if os.getenv("LINKFOLIO_PORT"):
            config.server.port = int(os.environ["LINKFOLIO_PORT"])
        config.server.debug = _env_flag("LINKFOLIO_DEBUG", config.server.debug)
        if os.getenv("LINKFOLIO_CORS_ORIGINS"):
            config.server.cors_origins = [
                origin.strip()
                for origin in os.environ["LINKFOLIO_CORS_ORIGINS"].split(",")
                if origin.strip()
            ]

        config.app.log_level = os.getenv(
            "LINKFOLIO_LOG_LEVEL", "DEBUG" if config.server.debug else config.app.log_level
        )
        config.app.log_to_file = _env_flag("LINKFOLIO_LOG_TO_FILE", config.app.log_to_file)
        config.app.log_dir = os.getenv("LINKFOLIO_LOG_DIR", config.app.log_dir)
        config.app.cookie_secure = _env_flag(
            "LINKFOLIO_COOKIE_SECURE", config.app.cookie_secure
        )
        config.app.public_url = os.getenv("LINKFOLIO_PUBLIC_URL", config.app.public_url)

        jwt_secret_key = os.getenv("LINKFOLIO_JWT_SECRET_KEY")
        if jwt_secret_key:
            config.app.jwt_secret_key = jwt_secret_key
            logging.info(
                "Using JWT secret key from LINKFOLIO_JWT_SECRET_KEY environment variable"
            )
        elif not config.app.jwt_secret_key:
            # Tokens will not survive a restart without a configured key
            config.app.jwt_secret_key = secrets.token_urlsafe(64)
            logging.info("Generated new JWT secret key (not from environment)")

        return config

    def load_config(self) -> LinkFolioConfig:
        """Load configuration from file (if any) and environment."""
        self.config_file = self.get_config_file_path()
        data: Dict[str, Any] = {}

        if self.config_file and self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                logging.info(f"Loaded configuration from {self.config_file}")
            except (OSError, ValueError) as e:
                logging.warning(f"Failed to load config from {self.config_file}: {e}")
                data = {}

        config = self._apply_environment(LinkFolioConfig.from_dict(data))
        _validate_jwt_secret_key(config.app.jwt_secret_key)
        self.config = config
        return config


def load_config() -> LinkFolioConfig:
    """Build a fresh configuration from file and environment."""
    return ConfigManager().load_config()
