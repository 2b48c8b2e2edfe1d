"""Access-control API client library.

Architecture:
- client.py: HTTP client holding identity, endpoints and community context
- models.py: Identity, endpoint, context and request value types
- keys.py: Virtual keys (issue, share, cancel, report lost)
- links.py: Encrypted access links
- devices.py: Card issuing devices
- records.py: Access records and inventory queries

Usage:
    from uclbrt.core.access import UclbrtClient, KeyService

    client = UclbrtClient("sid", "token", community_no=1001)
    card_no = KeyService(client).create_room_key("13800000000", "86", "101")
"""
from .client import UclbrtClient, USER_AGENT
from .devices import DeviceCardService
from .keys import KeyService, KeyVariant
from .links import LinkService
from .models import (
    CardType,
    ShareResultType,
    ClientIdentity,
    ServiceEndpoints,
    CommunityContext,
    SignedRequest,
)
from .records import RecordService

__all__ = [
    # Client
    "UclbrtClient",
    "USER_AGENT",

    # Models
    "CardType",
    "ShareResultType",
    "ClientIdentity",
    "ServiceEndpoints",
    "CommunityContext",
    "SignedRequest",

    # Services
    "KeyService",
    "KeyVariant",
    "LinkService",
    "DeviceCardService",
    "RecordService",
]
