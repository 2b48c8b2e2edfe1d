"""Card issuing devices (Qrm family, concatenation signature, form body).

The signature covers only a fixed prefix of the fields, in a fixed order.
Fields after ``sig`` are sent but not signed.
"""
from __future__ import annotations
from typing import Any, Dict

from ..encoding import OrderedFields
from ..signing import SIGNATURE_FIELD, concatenation_signature, md5_hex
from ..timezone import to_community_time
from ..validators import SUCCESS_MARKER, ResponseExpectation
from .client import UclbrtClient
from .models import FORM_CONTENT_TYPE, SignedRequest

DATA = ResponseExpectation(field="data")


class DeviceCardService:
    """Service for card issuing terminals identified by MAC address."""

    def __init__(self, client: UclbrtClient):
        self.client = client

    def build_request(self, path: str, signed: OrderedFields, unsigned: OrderedFields = OrderedFields()) -> SignedRequest:
        """Sign ``signed`` in order, then append ``sig`` and the unsigned fields."""
        sig = concatenation_signature(signed, self.client.auth_token)
        body: Dict[str, Any] = signed.then((SIGNATURE_FIELD, sig), *unsigned.items()).to_dict()
        return SignedRequest(url=self.client.api_url(path), body=body, content_type=FORM_CONTENT_TYPE)

    def get_mac_list(self) -> Any:
        """List the community's card issuing devices."""
        self.client.log("called getMacList")
        community_no = self.client.context.require_community_no()
        signed = OrderedFields([
            ("accountSid", self.client.account_sid),
            ("communityNo", str(community_no)),
        ])
        return self.client.send(self.build_request("Home/Qrm/getMacList", signed), DATA)

    def build_room_card_request(
        self,
        issue_mac: str,
        build_no: str,
        floor_no: str,
        room_no: str,
        end_time: str,
        creator_area_code: str,
        creator_mobile: str,
        creator_password: str,
        owner: str = "",
        opentype: int = 0,
        owner_gender: int = 1,
        owner_area_code: str = "",
        owner_mobile: str = "",
        creator_email: str = "",
        lost: bool = False,
    ) -> SignedRequest:
        community_no = self.client.context.require_community_no()
        context = self.client.context
        signed = OrderedFields([
            ("issueMac", issue_mac),
            ("endTime", to_community_time(end_time, context.community_timezone, context.local_timezone)),
            ("accountSid", self.client.account_sid),
            ("communityNo", str(community_no)),
            ("buildNo", build_no),
            ("floorNo", floor_no),
            ("roomNo", room_no),
        ])
        unsigned = OrderedFields([
            ("owner", owner),
            ("creatorAreaCode", creator_area_code),
            ("creatorMobile", creator_mobile),
            ("creatorPassword", md5_hex(creator_password)),
            ("opentype", opentype),
            ("ownerGender", owner_gender),
            ("ownerAreaCode", owner_area_code),
            ("ownerMobile", owner_mobile),
            ("creatorEmail", creator_email),
        ])
        if lost:
            # The service has always received the creator email as isLost.
            # Kept as-is until the expected flag value is confirmed.
            unsigned = unsigned.then(("isLost", creator_email))
        return self.build_request("Home/Qrm/makeRoomCard", signed, unsigned)

    def make_card(
        self,
        issue_mac: str,
        build_no: str,
        floor_no: str,
        room_no: str,
        end_time: str,
        creator_area_code: str,
        creator_mobile: str,
        creator_password: str,
        owner: str = "",
        opentype: int = 0,
        owner_gender: int = 1,
        owner_area_code: str = "",
        owner_mobile: str = "",
        creator_email: str = "",
    ) -> bool:
        """Write a room card on the device ``issue_mac``.

        Args:
            issue_mac: Device MAC
            build_no: Building number
            floor_no: Floor number
            room_no: Room number
            end_time: Validity end, YYMMDDHHmm in the operator's zone
            creator_area_code: Operator's dialling code
            creator_mobile: Operator's mobile number
            creator_password: Operator's plain password (sent as MD5)
            owner: Card holder name
            opentype: Opening mode
            owner_gender: Holder gender code
            owner_area_code: Holder's dialling code
            owner_mobile: Holder's mobile number
            creator_email: Operator's email

        Returns:
            True on success
        """
        self.client.log("called makeCard")
        request = self.build_room_card_request(
            issue_mac, build_no, floor_no, room_no, end_time, creator_area_code, creator_mobile,
            creator_password, owner, opentype, owner_gender, owner_area_code, owner_mobile, creator_email,
        )
        self.client.send(request, SUCCESS_MARKER)
        return True

    def make_lost_card(
        self,
        issue_mac: str,
        build_no: str,
        floor_no: str,
        room_no: str,
        end_time: str,
        creator_area_code: str,
        creator_mobile: str,
        creator_password: str,
        owner: str = "",
        opentype: int = 0,
        owner_gender: int = 1,
        owner_area_code: str = "",
        owner_mobile: str = "",
        creator_email: str = "",
    ) -> bool:
        """Write a replacement room card; same arguments as ``make_card``."""
        self.client.log("called makeLostCard")
        request = self.build_room_card_request(
            issue_mac, build_no, floor_no, room_no, end_time, creator_area_code, creator_mobile,
            creator_password, owner, opentype, owner_gender, owner_area_code, owner_mobile, creator_email,
            lost=True,
        )
        self.client.send(request, SUCCESS_MARKER)
        return True

    def read_card(
        self,
        issue_mac: str,
        creator_area_code: str,
        creator_mobile: str,
        creator_password: str,
        operate_card_type: int,
        creator_email: str = "",
    ) -> Any:
        """Read the card currently placed on the device; returns the full reply."""
        self.client.log("called readCard")
        community_no = self.client.context.require_community_no()
        signed = OrderedFields([
            ("accountSid", self.client.account_sid),
            ("communityNo", str(community_no)),
            ("issueMac", issue_mac),
            ("creatorAreaCode", creator_area_code),
            ("creatorMobile", creator_mobile),
            ("creatorPassword", md5_hex(creator_password)),
        ])
        unsigned = OrderedFields([("operateCardType", operate_card_type), ("creatorEmail", creator_email)])
        return self.client.send(self.build_request("Home/Qrm/readCard", signed, unsigned), SUCCESS_MARKER)

    def cancel_card(
        self,
        issue_mac: str,
        serial_num: str,
        creator_area_code: str,
        creator_mobile: str,
        creator_password: str,
        operate_card_type: int,
        creator_email: str = "",
    ) -> Any:
        """Erase the card with ``serial_num`` on the device; returns the full reply."""
        self.client.log("called cancelCard")
        community_no = self.client.context.require_community_no()
        signed = OrderedFields([
            ("accountSid", self.client.account_sid),
            ("communityNo", str(community_no)),
            ("issueMac", issue_mac),
            ("serialNum", serial_num),
            ("creatorAreaCode", creator_area_code),
            ("creatorMobile", creator_mobile),
            ("creatorPassword", md5_hex(creator_password)),
        ])
        unsigned = OrderedFields([("operateCardType", operate_card_type), ("creatorEmail", creator_email)])
        return self.client.send(self.build_request("Home/Qrm/cancelCard", signed, unsigned), SUCCESS_MARKER)
