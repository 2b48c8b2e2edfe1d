"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.access.models import DEFAULT_API_HOST, DEFAULT_CARD_HOST
from ..core.exceptions import ConfigurationError
from ..core.timezone import DEFAULT_COMMUNITY_TIMEZONE

logger = logging.getLogger(__name__)

ENV_PREFIX = "UCLBRT_"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false, 1/0, yes/no, on/off), got {value!r}")


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name, "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


@dataclass
class ClientSettings:
    """Client configuration container."""
    # Identity
    account_sid: str
    auth_token: str

    # Endpoints
    api_host: str = DEFAULT_API_HOST
    card_host: str = DEFAULT_CARD_HOST

    # Community
    community_no: Optional[int] = None
    community_timezone: str = DEFAULT_COMMUNITY_TIMEZONE
    local_timezone: Optional[str] = None

    # Transport
    debug: bool = False
    verify_tls: bool = True
    request_timeout: Optional[float] = None

    # Link encryption key override
    public_key_path: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ClientSettings(account_sid={self.account_sid!r}, auth_token='***', "
            f"api_host={self.api_host!r}, card_host={self.card_host!r}, "
            f"community_no={self.community_no!r}, verify_tls={self.verify_tls!r})"
        )


def load_settings() -> ClientSettings:
    """Load client settings from /run/secrets and UCLBRT_* environment variables.

    Raises:
        ConfigurationError: Missing credentials or malformed values
    """
    account_sid = _load_secret_from_file("uclbrt_account_sid", f"{ENV_PREFIX}ACCOUNT_SID")
    if not account_sid:
        raise ConfigurationError(f"{ENV_PREFIX}ACCOUNT_SID not found in /run/secrets or environment")

    auth_token = _load_secret_from_file("uclbrt_auth_token", f"{ENV_PREFIX}AUTH_TOKEN")
    if not auth_token:
        raise ConfigurationError(f"{ENV_PREFIX}AUTH_TOKEN not found in /run/secrets or environment")

    verify_tls = _env_bool(f"{ENV_PREFIX}VERIFY_TLS", True)
    if not verify_tls:
        logger.warning("%sVERIFY_TLS is off: server certificates will not be verified", ENV_PREFIX)

    settings = ClientSettings(
        account_sid=account_sid,
        auth_token=auth_token,
        api_host=os.environ.get(f"{ENV_PREFIX}API_HOST") or DEFAULT_API_HOST,
        card_host=os.environ.get(f"{ENV_PREFIX}CARD_HOST") or DEFAULT_CARD_HOST,
        community_no=_env_int(f"{ENV_PREFIX}COMMUNITY_NO"),
        community_timezone=os.environ.get(f"{ENV_PREFIX}COMMUNITY_TIMEZONE") or DEFAULT_COMMUNITY_TIMEZONE,
        local_timezone=os.environ.get(f"{ENV_PREFIX}LOCAL_TIMEZONE") or None,
        debug=_env_bool(f"{ENV_PREFIX}DEBUG", False),
        verify_tls=verify_tls,
        request_timeout=_env_float(f"{ENV_PREFIX}REQUEST_TIMEOUT"),
        public_key_path=os.environ.get(f"{ENV_PREFIX}PUBLIC_KEY_PATH") or None,
    )
    logger.debug("Loaded settings: api_host=%s community_no=%s", settings.api_host, settings.community_no)
    return settings
