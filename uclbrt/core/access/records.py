"""Access records and room/box inventory (Records family, canonical-query signature)."""
from __future__ import annotations
import random
import time
from typing import Any, Dict, Optional

from ..signing import AUTH_TOKEN_FIELD, canonical_query_signature
from ..validators import ResponseExpectation
from .client import UclbrtClient
from .models import FORM_CONTENT_TYPE, SignedRequest

DATA = ResponseExpectation(field="data")


class RecordService:
    """Service for querying door access records and community inventory."""

    def __init__(self, client: UclbrtClient):
        self.client = client

    def build_request(self, action: str, body: Dict[str, Any]) -> SignedRequest:
        """Sign ``body`` into the URL.

        The service expects ``authToken`` in the posted form as well as in the
        hash input. It is masked in debug output.
        """
        sig = canonical_query_signature(body, self.client.auth_token)
        form = dict(body)
        form[AUTH_TOKEN_FIELD] = self.client.auth_token
        return SignedRequest(
            url=self.client.api_url(f"Home/Records/{action}?sig={sig}"),
            body=form,
            content_type=FORM_CONTENT_TYPE,
        )

    def _base_fields(self, now: Optional[float]) -> Dict[str, Any]:
        return {
            "accountSid": self.client.account_sid,
            "timestamp": int(now if now is not None else time.time()),
        }

    def get_records_by_room(
        self,
        build_no: str,
        floor_no: str,
        room_no: str,
        start_date: str,
        end_date: str,
        record_type: int = 0,
        holder_from: int = 0,
        now: Optional[float] = None,
    ) -> Any:
        """Return the access records of one room between two dates."""
        self.client.log("called getRecordsByRoom")
        community_no = self.client.context.require_community_no()
        body = self._base_fields(now)
        body.update(
            rand=random.randint(0, 99999999),
            communityNo=str(community_no),
            buildNo=build_no,
            floorNo=floor_no,
            roomNo=room_no,
            startDate=start_date,
            endDate=end_date,
            recordType=record_type,
            holderFrom=holder_from,
        )
        return self.client.send(self.build_request("queryByRoom", body), DATA)

    def fetch_room_info(self, now: Optional[float] = None) -> Any:
        self.client.log("called fetchRoomInfo")
        community_no = self.client.context.require_community_no()
        body = self._base_fields(now)
        body["communityNo"] = str(community_no)
        return self.client.send(self.build_request("fetchRoomInfo", body), DATA)

    def get_box_info(self, now: Optional[float] = None) -> Any:
        self.client.log("called getBoxInfo")
        community_no = self.client.context.require_community_no()
        body = self._base_fields(now)
        body["communityNo"] = str(community_no)
        return self.client.send(self.build_request("getBoxInfo", body), DATA)
