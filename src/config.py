"""
Process configuration for the proxy.

Settings are read once from environment variables (optionally seeded from a
local .env file) and validated at process start. Validation does not raise
for a missing OpenWeather key; it is reported as a ConfigIssue and enforced
per request by the /weather handler.
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_FUNCTION_BASE_PATH = "/.netlify/functions/api"
DEFAULT_RAIN_HISTORY_YEAR = 2023
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "farm-data-proxy/1.0"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class ConfigIssue:
    """A non-fatal configuration problem found at startup."""
    setting: str
    message: str


@dataclass(frozen=True)
class Settings:
    """Runtime settings for handlers and entry points."""
    openweather_api_key: Optional[str] = None
    function_base_path: str = DEFAULT_FUNCTION_BASE_PATH
    rain_history_year: int = DEFAULT_RAIN_HISTORY_YEAR
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    nominatim_user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"


def _read_number(env, name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'")


def load_settings(env=None, dotenv: bool = True) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (default: os.environ)
        dotenv: Load a .env file into os.environ first (ignored when env is given)

    Returns:
        Frozen Settings instance.

    Raises:
        ConfigError: If a numeric variable cannot be parsed.
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    api_key = (env.get("OPENWEATHER_API_KEY") or "").strip() or None

    timeout = _read_number(env, "HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT, float)
    if timeout <= 0:
        raise ConfigError(f"HTTP_TIMEOUT_SECONDS must be positive, got {timeout}")

    return Settings(
        openweather_api_key=api_key,
        function_base_path=env.get("FUNCTION_BASE_PATH", DEFAULT_FUNCTION_BASE_PATH).rstrip("/"),
        rain_history_year=_read_number(env, "RAIN_HISTORY_YEAR", DEFAULT_RAIN_HISTORY_YEAR, int),
        http_timeout=timeout,
        nominatim_user_agent=env.get("NOMINATIM_USER_AGENT") or DEFAULT_USER_AGENT,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )


def validate_settings(settings: Settings) -> List[ConfigIssue]:
    """Return the configuration issues that degrade (but do not stop) the proxy."""
    issues = []
    if not settings.openweather_api_key:
        issues.append(ConfigIssue(
            setting="OPENWEATHER_API_KEY",
            message="OpenWeather API key not set; /weather will return 500",
        ))
    return issues


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def init_settings(env=None) -> Settings:
    """Load settings, configure logging and report startup issues once."""
    settings = load_settings(env)
    configure_logging(settings.log_level)
    for issue in validate_settings(settings):
        logger.warning("Config %s: %s", issue.setting, issue.message)
    return settings
