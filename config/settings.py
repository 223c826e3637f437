"""Global settings and configuration loading"""
import json
import os
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, validator

from data.tokens import STABLE_COINS, SYMBOL_REMAP

# API endpoints
WHALE_ALERT_URL = "https://api.whale-alert.io/v1/transactions"
TELEGRAM_API_URL = "https://api.telegram.org"

# Net changes smaller than this (USD) are noise and left out of the report
SIGNIFICANCE_FLOOR_USD = 1_000_000

# 48 so cron is convenient: whale alert rejects a full 60 minute range.
#   0,48 0,4,8,12,16,20 * * *
#   36 1,5,9,13,17,21 * * *
#   24 2,6,10,14,18,22 * * *
#   12 3,7,11,15,19,23 * * *
DEFAULT_INTERVAL_MINUTES = 48

REQUEST_TIMEOUT_SECONDS = 30

# Environment variables that take precedence over secrets in the config file
ENV_OVERRIDES = {
    "WHALE_ALERT_API_KEY": ("whale_alert", "api_key"),
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_id"),
    "SUPABASE_URL": ("whale_registry", "supabase_url"),
    "SUPABASE_SERVICE_ROLE_KEY": ("whale_registry", "supabase_key"),
}


class ConfigError(Exception):
    """Configuration file missing, unreadable or invalid."""


class TelegramConfig(BaseModel):
    """Bot credentials and the two destination chats"""
    bot_id: str = ""
    recipient_id: str = ""  # rendered report
    log_id: str = ""  # errors and unhandled transactions


class WhaleAlertConfig(BaseModel):
    """Whale Alert REST feed settings"""
    api_key: str = ""
    min: int = Field(500_000, ge=0, description="Minimum USD value of a transaction")
    limit: int = Field(100, gt=0, description="Page size")
    base_url: str = WHALE_ALERT_URL
    timeout: float = Field(REQUEST_TIMEOUT_SECONDS, gt=0)
    retry_wait: float = Field(0, ge=0, description="Seconds to wait before retrying a failed page")


class WhaleRegistryConfig(BaseModel):
    """Optional supabase table that collects observed wallet labels"""
    supabase_url: str = ""
    supabase_key: str = ""
    table: str = "whales"

    @property
    def enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


class AppConfig(BaseModel):
    """Top-level configuration file"""
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    whale_alert: WhaleAlertConfig = Field(default_factory=WhaleAlertConfig)
    stable_coins: List[str] = Field(default_factory=lambda: sorted(STABLE_COINS))
    remap: Dict[str, str] = Field(default_factory=lambda: dict(SYMBOL_REMAP))
    whale_registry: WhaleRegistryConfig = Field(default_factory=WhaleRegistryConfig)
    significance_floor: float = Field(SIGNIFICANCE_FLOOR_USD, ge=0)
    interval_minutes: int = Field(DEFAULT_INTERVAL_MINUTES, gt=0)
    telegram_api_url: str = TELEGRAM_API_URL
    log_level: str = "INFO"

    @validator("log_level")
    def _check_log_level(cls, value):
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


def apply_env_overrides(data: Dict, environ: Optional[Dict[str, str]] = None) -> Dict:
    """Overlay secrets from the environment onto raw config data."""
    environ = os.environ if environ is None else environ
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value
    return data


def load_config(path: str, environ: Optional[Dict[str, str]] = None) -> AppConfig:
    """
    Load and validate the JSON configuration file.

    An empty file yields the defaults. A missing file, malformed JSON or a
    schema violation raises ConfigError.

    Args:
        path: Path to the JSON configuration file
        environ: Environment mapping for secret overrides (defaults to os.environ)

    Returns:
        AppConfig: Validated configuration
    """
    try:
        with open(path, "r") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigError(f"Cannot open configuration file {path}: {e}") from e

    data = {}
    if raw.strip():
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Cannot load configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a JSON object")

    apply_env_overrides(data, environ)

    try:
        return AppConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
