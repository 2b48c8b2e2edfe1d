import pytest

from uclbrt.core.access import DeviceCardService
from uclbrt.core.encoding import OrderedFields
from uclbrt.core.exceptions import ConfigurationError, UnexpectedResponseError

PASSWORD_MD5 = "5ebe2294ecd0e0f08eab7690d2a6ee69"


@pytest.fixture()
def service(make_client):
    return DeviceCardService(make_client())


def test_get_mac_list(service, session):
    session.queue({"status": 200, "data": [{"mac": "AA:BB"}]})
    assert service.get_mac_list() == [{"mac": "AA:BB"}]
    call = session.last
    assert call["url"] == "https://api.example.com/Home/Qrm/getMacList"
    assert list(call["data"].items()) == [
        ("accountSid", "A"),
        ("communityNo", "1001"),
        ("sig", "76a29485ea73885b04aebb1c4a04489a"),
    ]
    assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
    assert "Authorization" not in call["headers"]


def test_get_mac_list_requires_data(service, session):
    session.queue({"status": 200, "data": []})
    with pytest.raises(UnexpectedResponseError, match="data"):
        service.get_mac_list()


def test_make_card_wire_format(service, session):
    session.queue({"status": 200, "info": "success"})
    assert service.make_card(
        "AA:BB", "1", "2", "101", "2401011200", "86", "13800000000", "secret", owner="Li"
    ) is True
    body = session.last["data"]
    assert session.last["url"] == "https://api.example.com/Home/Qrm/makeRoomCard"
    assert list(body) == [
        "issueMac", "endTime", "accountSid", "communityNo", "buildNo", "floorNo", "roomNo",
        "sig",
        "owner", "creatorAreaCode", "creatorMobile", "creatorPassword", "opentype",
        "ownerGender", "ownerAreaCode", "ownerMobile", "creatorEmail",
    ]
    assert body["sig"] == "354ac102dfafbfadac75f1c5c9da4910"
    assert body["creatorPassword"] == PASSWORD_MD5
    assert body["owner"] == "Li"
    assert body["ownerGender"] == 1


def test_unsigned_fields_do_not_affect_signature(service):
    first = service.build_room_card_request("AA:BB", "1", "2", "101", "2401011200", "86", "138", "secret", owner="X")
    second = service.build_room_card_request("AA:BB", "1", "2", "101", "2401011200", "1", "139", "other", owner="Y")
    assert first.body["sig"] == second.body["sig"]


def test_make_lost_card_sends_creator_email_as_lost_flag(service, session):
    session.queue({"status": 200, "info": "success"})
    service.make_lost_card(
        "AA:BB", "1", "2", "101", "2401011200", "86", "13800000000", "secret", creator_email="ops@example.com"
    )
    body = session.last["data"]
    assert list(body)[-2:] == ["creatorEmail", "isLost"]
    assert body["isLost"] == "ops@example.com"


def test_make_card_requires_success(service, session):
    session.queue({"status": 200, "info": "device offline"})
    with pytest.raises(UnexpectedResponseError):
        service.make_card("AA:BB", "1", "2", "101", "", "86", "138", "secret")


def test_read_card(service, session):
    reply = {"status": 200, "info": "success", "serialNum": "SN1"}
    session.queue(reply)
    assert service.read_card("AA:BB", "86", "13800000000", "secret", 1) == reply
    body = session.last["data"]
    assert session.last["url"] == "https://api.example.com/Home/Qrm/readCard"
    assert list(body) == [
        "accountSid", "communityNo", "issueMac", "creatorAreaCode", "creatorMobile", "creatorPassword",
        "sig", "operateCardType", "creatorEmail",
    ]
    assert body["sig"] == "ba830b5425547c2685eb188e3db0e07d"


def test_cancel_card(service, session):
    session.queue({"status": 200, "info": "success"})
    service.cancel_card("AA:BB", "SN1", "86", "13800000000", "secret", 1)
    body = session.last["data"]
    assert session.last["url"] == "https://api.example.com/Home/Qrm/cancelCard"
    assert list(body)[:4] == ["accountSid", "communityNo", "issueMac", "serialNum"]
    assert body["sig"] == "95dfe950095270ff0d84d19e09efab3e"


def test_requires_community(make_client, session):
    service = DeviceCardService(make_client(community_no=None))
    with pytest.raises(ConfigurationError):
        service.get_mac_list()
    assert session.calls == []


def test_build_request_rejects_unordered_mapping(service):
    with pytest.raises(TypeError):
        service.build_request("Home/Qrm/getMacList", {"accountSid": "A"})
    assert service.build_request("x", OrderedFields([("a", "1")])).body["a"] == "1"
