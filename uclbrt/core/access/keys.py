"""Virtual key operations (Qrcode family, batch signature, JSON body)."""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Optional

from ..signing import batch_auth_header, batch_signature, new_batch_id
from ..timezone import to_community_time, truncate_to_hour
from ..validators import STATUS_200, STATUS_ONLY, SUCCESS_MARKER, ResponseExpectation
from .client import UclbrtClient
from .models import JSON_CONTENT_TYPE, CardType, ShareResultType, SignedRequest

CARD_NO = ResponseExpectation(field="cardNo")
BASE_IMG = ResponseExpectation(field="baseImg")
BLE_STR = ResponseExpectation(field="bleStr")
CIPHER = ResponseExpectation(field="cipher")
CARD_INFO = ResponseExpectation(require_success=True, extract="data")


class KeyVariant(Enum):
    """Flavours of the getLink issue call, each with its own wire field set."""
    STANDARD = "standard"
    LOST = "lost"
    CIPHER = "cipher"


class KeyService:
    """Service for issuing, sharing and cancelling virtual keys."""

    def __init__(self, client: UclbrtClient):
        """Initialize key service.

        Args:
            client: Configured access-control client
        """
        self.client = client

    def _signed(self, action: str, body: Dict[str, Any], batch_id: Optional[str] = None) -> SignedRequest:
        """Build a batch-signed request for ``?c=Qrcode&a=<action>``."""
        batch_id = batch_id or new_batch_id()
        identity = self.client.identity
        sig = batch_signature(identity.account_sid, identity.auth_token, batch_id)
        return SignedRequest(
            url=self.client.api_url(f"?c=Qrcode&a={action}&sig={sig}"),
            body=body,
            content_type=JSON_CONTENT_TYPE,
            auth_header=batch_auth_header(identity.account_sid, batch_id),
        )

    def _community_time(self, time_str: str) -> str:
        context = self.client.context
        return to_community_time(time_str, context.community_timezone, context.local_timezone)

    def build_issue_request(
        self,
        variant: KeyVariant,
        mobile: str,
        area_code: str,
        room_no: str,
        floor_no: str = "",
        build_no: str = "",
        start_time: str = "",
        end_time: str = "",
        *,
        send_sms: int = 0,
        card_type: int = CardType.ROOM,
        times: int = 0,
        opentype: int = 0,
        cipher_type: int = 1,
    ) -> SignedRequest:
        """Build the getLink request for a key variant.

        Field order and set per variant:
        - STANDARD: ..., startTime, endTime, sendSms, cardType, times, opentype
        - LOST: ..., startTime, endTime, cardType=0, times=0, isLost=1
        - CIPHER: ..., startTime, endTime (hour precision), cipherType

        Raises:
            ConfigurationError: Community id not set
            FormatError: Malformed start/end time
        """
        community_no = self.client.context.require_community_no()
        start = self._community_time(start_time)
        end = self._community_time(end_time)
        if variant is KeyVariant.CIPHER:
            start, end = truncate_to_hour(start), truncate_to_hour(end)

        body: Dict[str, Any] = {
            "mobile": mobile,
            "areaCode": area_code,
            "roomNo": room_no,
            "floorNo": floor_no,
            "buildNo": build_no,
            "communityNo": str(community_no),
            "startTime": start,
            "endTime": end,
        }
        if variant is KeyVariant.STANDARD:
            body.update(sendSms=send_sms, cardType=int(card_type), times=times, opentype=opentype)
        elif variant is KeyVariant.LOST:
            body.update(cardType=int(CardType.ROOM), times=0, isLost=1)
        else:
            body.update(cipherType=cipher_type)
        return self._signed("getLink", body)

    def create(
        self,
        mobile: str,
        area_code: str,
        room_no: str,
        floor_no: str = "",
        build_no: str = "",
        start_time: str = "",
        end_time: str = "",
        send_sms: int = 0,
        card_type: int = CardType.ROOM,
        times: int = 0,
        opentype: int = 0,
    ) -> str:
        """Issue a key and return its card number.

        Args:
            mobile: Holder's mobile number
            area_code: Holder's dialling code
            room_no: Room number ("" for floor/building keys)
            floor_no: Floor number
            build_no: Building number
            start_time: Validity start, YYMMDDHHmm in the operator's zone
            end_time: Validity end, YYMMDDHHmm in the operator's zone
            send_sms: 1 to have the service text the holder
            card_type: CardType value
            times: Usage limit, 0 for unlimited
            opentype: Opening mode

        Returns:
            Card number
        """
        self.client.log("called create")
        request = self.build_issue_request(
            KeyVariant.STANDARD, mobile, area_code, room_no, floor_no, build_no, start_time, end_time,
            send_sms=send_sms, card_type=card_type, times=times, opentype=opentype,
        )
        return self.client.send(request, CARD_NO)

    def create_room_key(
        self,
        mobile: str,
        area_code: str,
        room_no: str,
        floor_no: str = "",
        build_no: str = "",
        start_time: str = "",
        end_time: str = "",
        send_sms: int = 0,
        times: int = 0,
    ) -> str:
        return self.create(
            mobile, area_code, room_no, floor_no, build_no, start_time, end_time, send_sms, CardType.ROOM, times
        )

    def create_floor_key(
        self,
        mobile: str,
        area_code: str,
        floor_no: str,
        build_no: str,
        start_time: str = "",
        end_time: str = "",
        send_sms: int = 0,
    ) -> str:
        return self.create(mobile, area_code, "", floor_no, build_no, start_time, end_time, send_sms, CardType.FLOOR)

    def create_building_key(
        self,
        mobile: str,
        area_code: str,
        build_no: str,
        start_time: str = "",
        end_time: str = "",
        send_sms: int = 0,
    ) -> str:
        return self.create(mobile, area_code, "", "", build_no, start_time, end_time, send_sms, CardType.BUILDING)

    def create_room_lost_key(
        self,
        mobile: str,
        area_code: str,
        room_no: str,
        floor_no: str = "",
        build_no: str = "",
        start_time: str = "",
        end_time: str = "",
    ) -> str:
        """Issue a replacement room key that invalidates the lost one."""
        self.client.log("called createRoomLostKey")
        request = self.build_issue_request(
            KeyVariant.LOST, mobile, area_code, room_no, floor_no, build_no, start_time, end_time
        )
        return self.client.send(request, CARD_NO)

    def generate_qrp_room_cipher(
        self,
        mobile: str,
        area_code: str,
        room_no: str,
        floor_no: str = "",
        build_no: str = "",
        start_time: str = "",
        end_time: str = "",
        cipher_type: int = 1,
    ) -> str:
        """Issue a keypad cipher key. Validity is rounded down to the hour."""
        self.client.log("called generateQRPRoomCipher")
        request = self.build_issue_request(
            KeyVariant.CIPHER, mobile, area_code, room_no, floor_no, build_no, start_time, end_time,
            cipher_type=cipher_type,
        )
        return self.client.send(request, CARD_NO)

    def report_card_lost(self, card_no: str, whole_room: bool = False) -> bool:
        self.client.log("called reportCardLost")
        self.client.context.require_community_no()
        request = self._signed("reportLost", {"cardNo": card_no, "wholeRoom": 1 if whole_room else 0})
        self.client.send(request, STATUS_200)
        return True

    def get_share(
        self,
        mobile: str,
        area_code: str,
        room_flag: str,
        card_type: int = CardType.ROOM,
        open_end_time: str = "",
        lock_type: int = 0,
        result_type: int = ShareResultType.IMAGE,
        expectation: ResponseExpectation = STATUS_ONLY,
    ) -> Any:
        """Fetch a shareable form of a key (image, BLE string or cipher).

        Returns the whole reply unless ``expectation`` selects a field.
        """
        self.client.log("called getShare")
        community_no = self.client.context.require_community_no()
        body = {
            "mobile": mobile,
            "areaCode": area_code,
            "communityNo": str(community_no),
            "roomFlag": room_flag,
            "cardType": int(card_type),
            "lockType": lock_type,
            "resultType": int(result_type),
            "openEndTime": self._community_time(open_end_time),
        }
        return self.client.send(self._signed("getCard", body), expectation)

    def get_room_key_image(
        self, mobile: str, area_code: str, card_no: str, open_end_time: str = "", lock_type: int = 0
    ) -> str:
        return self.get_share(
            mobile, area_code, card_no, CardType.ROOM, open_end_time, lock_type, ShareResultType.IMAGE, BASE_IMG
        )

    def get_floor_key_image(
        self, mobile: str, area_code: str, card_no: str, open_end_time: str = "", lock_type: int = 0
    ) -> str:
        return self.get_share(
            mobile, area_code, card_no, CardType.FLOOR, open_end_time, lock_type, ShareResultType.IMAGE, BASE_IMG
        )

    def get_building_key_image(
        self, mobile: str, area_code: str, card_no: str, open_end_time: str = "", lock_type: int = 0
    ) -> str:
        return self.get_share(
            mobile, area_code, card_no, CardType.BUILDING, open_end_time, lock_type, ShareResultType.IMAGE, BASE_IMG
        )

    def get_room_key_string(self, mobile: str, area_code: str, mac: str) -> str:
        """Bluetooth key string for a lock identified by its MAC."""
        return self.get_share(mobile, area_code, mac, CardType.ROOM, "", 0, ShareResultType.BLE_STRING, BLE_STR)

    def get_qrp_room_cipher(self, mobile: str, area_code: str, card_no: str) -> str:
        return self.get_share(mobile, area_code, card_no, CardType.ROOM, "", 0, ShareResultType.CIPHER, CIPHER)

    def cancel(self, card_no: str, card_type: int = CardType.ROOM) -> bool:
        self.client.log("called cancel")
        self.client.context.require_community_no()
        request = self._signed("cancelCard", {"cardNo": card_no, "cardType": int(card_type)})
        self.client.send(request, SUCCESS_MARKER)
        return True

    def cancel_room_key(self, card_no: str) -> bool:
        return self.cancel(card_no, CardType.ROOM)

    def cancel_floor_key(self, card_no: str) -> bool:
        return self.cancel(card_no, CardType.FLOOR)

    def cancel_building_key(self, card_no: str) -> bool:
        return self.cancel(card_no, CardType.BUILDING)

    def get_room_card_info(self, card_string: str) -> Any:
        """Decode a room card string. Works without a community id."""
        self.client.log("called getRoomCardInfo")
        community_no = self.client.context.community_no
        body = {
            "communityNo": str(community_no) if community_no else "",
            "cardString": card_string,
        }
        return self.client.send(self._signed("getRoomCardInfo", body), CARD_INFO)
