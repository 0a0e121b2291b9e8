import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by IDGATE_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("IDGATE_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Frontend(BaseModel):
    """Frontend configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "http://localhost:3001"
    allowed_origins: list[str] = []  # Extra origins a login may redirect back to

    def is_allowed_origin(self, origin: str) -> bool:
        """Check whether a redirect origin is the frontend or an allowed extra."""
        candidate = origin.rstrip("/")
        return candidate == self.url.rstrip("/") or candidate in {
            o.rstrip("/") for o in self.allowed_origins
        }


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "idgate"
    version: str = "0.1.0"
    description: str = "OAuth identity gateway with account linking and whitelist access"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///~/.idgate/idgate.db"
    echo: bool = False
    auto_migrate: bool = True  # Auto-migrate for SQLite, manual for PostgreSQL


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from IDGATE_LOG_FILE env var."""
        return os.environ.get("IDGATE_LOG_FILE")


# =============================================================================
# Authentication Configuration
# =============================================================================


class GitHubConfig(BaseModel):
    """GitHub OAuth app configuration."""

    client_id: str = ""
    client_secret: str = ""
    callback_url: str = ""  # e.g. https://gateway.example.org/api/v1/auth/github/callback
    scope: str = "repo read:user user:email"


class GoogleConfig(BaseModel):
    """Google OAuth client configuration."""

    client_id: str = ""
    client_secret: str = ""
    callback_url: str = ""
    scope: str = "openid email profile"


class JwtConfig(BaseModel):
    """JWT configuration."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days


class AuthConfig(BaseModel):
    """Authentication configuration."""

    github: GitHubConfig = GitHubConfig()
    google: GoogleConfig = GoogleConfig()
    jwt: JwtConfig = JwtConfig()
    encryption_key: str = ""  # Key material for stored provider tokens; empty stores plaintext
    state_expire_seconds: int = 600
    http_timeout: float = 10.0  # Seconds, applied to every provider call
    recheck_whitelist: bool = False  # Ignore the token claim and always hit the whitelist table


class ArtifactsConfig(BaseModel):
    """Artifact service used to attach a pending report to a freshly logged-in user."""

    associate_url: str = ""  # Empty disables association
    api_key: str = ""


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    frontend: Frontend = Frontend()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()
    artifacts: ArtifactsConfig = ArtifactsConfig()

    model_config = {
        "env_prefix": "IDGATE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows IDGATE_AUTH__JWT__SECRET override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - IDGATE_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every module logger
    picks up the handler.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
