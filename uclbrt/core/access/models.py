"""Value types shared by the access-control services."""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from ..timezone import DEFAULT_COMMUNITY_TIMEZONE, resolve_timezone

DEFAULT_API_HOST = "https://api.uclbrt.com/"
DEFAULT_CARD_HOST = "http://cz.uclbrt.com/"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"


class CardType(IntEnum):
    """Key scope. Wire values are fixed by the remote service."""
    ROOM = 0
    FLOOR = 1
    BUILDING = 2


class ShareResultType(IntEnum):
    """``resultType`` values for the getCard endpoint."""
    IMAGE = 1
    BLE_STRING = 2
    CIPHER = 4


@dataclass(frozen=True)
class ClientIdentity:
    """Account credentials. Both fields are required."""
    account_sid: str
    auth_token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.account_sid:
            raise ConfigurationError("accountSid cannot be empty.")
        if not self.auth_token:
            raise ConfigurationError("authToken cannot be empty.")


def _validate_host(url: str, name: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigurationError(f"{name} is not a valid domain.")
    return url


@dataclass(frozen=True)
class ServiceEndpoints:
    """Base URLs of the API and card (access link) hosts.

    Paths are appended directly, so both are expected to end with "/".
    """
    api_host: str = DEFAULT_API_HOST
    card_host: str = DEFAULT_CARD_HOST

    def __post_init__(self) -> None:
        _validate_host(self.api_host, "apiHost")
        _validate_host(self.card_host, "cardHost")


@dataclass(frozen=True)
class CommunityContext:
    """Community the client operates on.

    ``community_no`` may stay unset until an operation needs it.
    ``local_timezone=None`` means the system zone of the running process.
    """
    community_no: Optional[int] = None
    community_timezone: str = DEFAULT_COMMUNITY_TIMEZONE
    local_timezone: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.community_timezone:
            raise ConfigurationError("communityTimezone cannot be empty.")
        resolve_timezone(self.community_timezone)
        resolve_timezone(self.local_timezone)

    def require_community_no(self) -> int:
        """Return the community id or raise if it was never set."""
        if not self.community_no:
            raise ConfigurationError("communityNo cannot be empty.")
        return self.community_no

    def with_community_no(self, community_no: int) -> "CommunityContext":
        if not community_no:
            raise ConfigurationError("communityNo cannot be empty.")
        return replace(self, community_no=int(community_no))


@dataclass(frozen=True)
class SignedRequest:
    """One POST exchange, fully signed and ready for the transport."""
    url: str
    body: Dict[str, Any]
    content_type: str = FORM_CONTENT_TYPE
    auth_header: Optional[str] = field(default=None, repr=False)
