"""Encrypted access links opened by key holders in a browser."""
from __future__ import annotations
import time
from typing import Optional
from urllib.parse import quote

from ..validators import require_non_empty
from .client import UclbrtClient
from .models import CardType


class LinkService:
    """Builds ``{cardHost}apiLogin/?data=...`` links. No HTTP request is made."""

    def __init__(self, client: UclbrtClient):
        self.client = client

    def get_link(
        self,
        mobile: str,
        area_code: str,
        card_no: str = "",
        card_type: int = CardType.ROOM,
        now: Optional[float] = None,
    ) -> str:
        """Return an access link carrying the RSA-encrypted login payload.

        Args:
            mobile: Holder's mobile number
            area_code: Holder's dialling code
            card_no: Card number, "" for the holder's default card
            card_type: CardType value
            now: Unix time to embed (defaults to the current time)

        Returns:
            Link URL with the URL-encoded Base64 ciphertext as ``data``

        Raises:
            InvalidArgumentError: Empty mobile
            ConfigurationError: Community id not set
            EncryptionError: Key material unusable
        """
        self.client.log("called getLink")
        require_non_empty(mobile, "mobile")
        community_no = self.client.context.require_community_no()
        identity = self.client.identity
        payload = {
            "id": identity.account_sid,
            "token": identity.auth_token,
            "communityNo": str(community_no),
            "time": int(now if now is not None else time.time()),
            "mobile": mobile,
            "areaCode": area_code,
            "cardNo": card_no,
            "cardType": int(card_type),
        }
        encrypted = self.client.encryptor.encrypt_link(payload)
        link = f"{self.client.endpoints.card_host}apiLogin/?data={quote(encrypted, safe='')}"
        self.client.log("got link: %s", link)
        return link

    def get_room_key_link(self, mobile: str, area_code: str, card_no: str = "") -> str:
        return self.get_link(mobile, area_code, card_no, CardType.ROOM)

    def get_floor_key_link(self, mobile: str, area_code: str, card_no: str = "") -> str:
        return self.get_link(mobile, area_code, card_no, CardType.FLOOR)

    def get_building_key_link(self, mobile: str, area_code: str, card_no: str = "") -> str:
        return self.get_link(mobile, area_code, card_no, CardType.BUILDING)
