"""
config/settings.py — Hiven Client Runtime Settings

Hosts, pipe size and logging come from config.yaml; the session token comes
from the environment (HIVEN_TOKEN) or .env, never from the YAML file.

  - GatewayConfig rejects a queue_capacity below 1 at parse time
  - Host fields reject values carrying a scheme or path ("wss://...")
  - validate_all() performs startup validation and raises ConfigError
    with a human-readable message listing every problem found
  - load_settings() respects HIVEN_CONFIG env var as a fallback
    when no explicit config_path argument is given
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class ConfigError(Exception):
    """Raised by validate_all() when one or more config problems are found."""


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _check_host(v: str, field_name: str) -> str:
    v = v.strip()
    if "://" in v or "/" in v:
        raise ValueError(
            f"{field_name} must be a bare host name like 'api.hiven.io', got '{v}'"
        )
    return v


# ─────────────────────────────────────────────────────────────────────────────
# Sub-models
# ─────────────────────────────────────────────────────────────────────────────

class GatewayConfig(BaseModel):
    host: str = "swarm-dev.hiven.io"
    queue_capacity: int = 5

    @field_validator("host")
    @classmethod
    def _bare_host(cls, v: str) -> str:
        return _check_host(v, "gateway.host")

    @field_validator("queue_capacity")
    @classmethod
    def _positive_capacity(cls, v: int) -> int:
        if v < 1:
            raise ValueError("gateway.queue_capacity must be >= 1")
        return v


class APIConfig(BaseModel):
    host: str = "api.hiven.io"
    timeout_seconds: float = 30.0

    @field_validator("host")
    @classmethod
    def _bare_host(cls, v: str) -> str:
        return _check_host(v, "api.host")

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("api.timeout_seconds must be > 0")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: str = "./data/logs"
    max_file_size_mb: int = 10
    backup_count: int = 5
    console_output: bool = True
    json_format: Optional[bool] = None

    @field_validator("level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level '{v}' is not valid. "
                f"Must be one of: {sorted(_VALID_LOG_LEVELS)}"
            )
        return upper


# ─────────────────────────────────────────────────────────────────────────────
# Root Settings
# ─────────────────────────────────────────────────────────────────────────────

class Settings(BaseSettings):
    """
    Hiven client settings. HIVEN_TOKEN from the environment wins over .env;
    the YAML sections are passed in as init values by load_settings().
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # -- Secrets from .env ---------------------------------------------------
    token: Optional[str] = Field(default=None, alias="HIVEN_TOKEN")

    # -- Structured config (from config.yaml) --------------------------------
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, v: Any) -> Optional[str]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("gateway", mode="before")
    @classmethod
    def _coerce_gateway(cls, v: Any) -> Any:
        return GatewayConfig(**v) if isinstance(v, dict) else v

    @field_validator("api", mode="before")
    @classmethod
    def _coerce_api(cls, v: Any) -> Any:
        return APIConfig(**v) if isinstance(v, dict) else v

    @field_validator("logging", mode="before")
    @classmethod
    def _coerce_logging(cls, v: Any) -> Any:
        return LoggingConfig(**v) if isinstance(v, dict) else v

    # -- Convenience properties ----------------------------------------------

    @property
    def gateway_url(self) -> str:
        return f"wss://{self.gateway.host}/socket"

    @property
    def api_base_url(self) -> str:
        return f"https://{self.api.host}/v1"

    @property
    def log_level(self) -> str:
        return self.logging.level.upper()

    @property
    def log_dir(self) -> Path:
        return Path(self.logging.log_dir)

    def validate_all(self) -> None:
        """
        Checks that need the whole object, run once before connecting.
        Raises ConfigError with every problem numbered.
        """
        errors: list[str] = []

        if not self.token:
            errors.append(
                "No session token configured. Set HIVEN_TOKEN in your "
                "environment or .env file, or pass --token."
            )
        if not self.gateway.host:
            errors.append("gateway.host must not be empty.")
        if not self.api.host:
            errors.append("api.host must not be empty.")

        if errors:
            numbered = "\n".join(f"  {i+1}. {e}" for i, e in enumerate(errors))
            raise ConfigError(
                f"\n\nCannot start: {len(errors)} configuration problem(s):\n\n"
                f"{numbered}\n\n"
                f"Check config/config.yaml, .env and the command-line flags.\n"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Loader + singleton
# ─────────────────────────────────────────────────────────────────────────────

_singleton: Optional[Settings] = None
_singleton_lock = threading.Lock()

_KNOWN_SECTIONS = {"gateway", "api", "logging"}


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """
    --config argument, then $HIVEN_CONFIG, then config/config.yaml.
    """
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get("HIVEN_CONFIG")
    if env_path:
        return Path(env_path)
    return Path("config/config.yaml")


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings by merging config.yaml with environment variables."""
    global _singleton
    yaml_data = _load_yaml(_resolve_config_path(config_path))
    init_kwargs = {k: v for k, v in yaml_data.items() if k in _KNOWN_SECTIONS}

    instance = Settings(**init_kwargs)
    with _singleton_lock:
        _singleton = instance
    return instance


def get_settings() -> Settings:
    """Return the settings loaded last, loading them on first use."""
    with _singleton_lock:
        current = _singleton
    return current if current is not None else load_settings()
