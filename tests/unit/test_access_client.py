import logging

import pytest
import requests

from uclbrt.core.access import UclbrtClient, USER_AGENT
from uclbrt.core.access.models import JSON_CONTENT_TYPE, CommunityContext, SignedRequest
from uclbrt.core.exceptions import (
    ConfigurationError,
    TransportError,
    UnexpectedResponseError,
)
from uclbrt.core.validators import ResponseExpectation


class TestConstruction:
    @pytest.mark.parametrize(
        "sid, token, message",
        [("", "T", "accountSid cannot be empty"), ("A", "", "authToken cannot be empty")],
    )
    def test_identity_required(self, sid, token, message, session):
        with pytest.raises(ConfigurationError, match=message):
            UclbrtClient(sid, token, session=session)

    @pytest.mark.parametrize(
        "api_host, card_host, message",
        [
            ("not a url", "http://card.example.com/", "apiHost is not a valid domain"),
            ("https://api.example.com/", "/relative/", "cardHost is not a valid domain"),
            ("ftp://api.example.com/", "http://card.example.com/", "apiHost"),
        ],
    )
    def test_endpoints_validated(self, api_host, card_host, message, session):
        with pytest.raises(ConfigurationError, match=message):
            UclbrtClient("A", "T", api_host, card_host, session=session)

    def test_defaults(self, session):
        client = UclbrtClient("A", "T", session=session)
        assert client.endpoints.api_host == "https://api.uclbrt.com/"
        assert client.endpoints.card_host == "http://cz.uclbrt.com/"
        assert client.context.community_no is None
        assert client.context.community_timezone == "Asia/Shanghai"
        assert client.verify_tls is True
        assert client.timeout is None
        assert session.max_redirects == 3

    def test_auth_token_not_in_repr(self, make_client):
        assert "T'" not in repr(make_client().identity)

    def test_insecure_transport_is_logged(self, session, caplog):
        with caplog.at_level(logging.WARNING):
            UclbrtClient("A", "T", session=session, verify_tls=False)
        assert "TLS certificate verification is disabled" in caplog.text


class TestCommunityContext:
    def test_unset_community_is_rejected_lazily(self, make_client):
        client = make_client(community_no=None)
        with pytest.raises(ConfigurationError, match="communityNo cannot be empty"):
            client.context.require_community_no()

    def test_set_community_no_replaces_context(self, make_client):
        client = make_client(community_no=None)
        before = client.context
        client.set_community_no(42)
        assert client.context.community_no == 42
        assert before.community_no is None

    @pytest.mark.parametrize("value", [0, None])
    def test_set_community_no_rejects_empty(self, make_client, value):
        with pytest.raises(ConfigurationError):
            make_client().set_community_no(value)

    def test_timezone_setters(self, make_client):
        client = make_client()
        client.set_community_timezone("Europe/Paris")
        client.set_local_timezone("UTC")
        assert client.context == CommunityContext(1001, "Europe/Paris", "UTC")
        with pytest.raises(ConfigurationError, match="localTimezone cannot be empty"):
            client.set_local_timezone("")
        with pytest.raises(ConfigurationError, match="Unknown timezone"):
            client.set_community_timezone("Nowhere/Special")

    def test_for_community_leaves_source_client_untouched(self, make_client):
        client = make_client()
        other = client.for_community(7)
        assert other.context.community_no == 7
        assert client.context.community_no == 1001
        assert other.session is client.session
        assert other.identity is client.identity


class TestSend:
    def _json_request(self):
        return SignedRequest(
            url="https://api.example.com/?c=Qrcode&a=getLink&sig=ABC",
            body={"mobile": "138"},
            content_type=JSON_CONTENT_TYPE,
            auth_header="QTox",
        )

    def test_json_request_headers(self, make_client, session):
        session.queue({"status": 200, "cardNo": "C1"})
        result = make_client().send(self._json_request(), ResponseExpectation(field="cardNo"))
        assert result == "C1"
        call = session.last
        assert call["json"] == {"mobile": "138"}
        assert "data" not in call
        assert call["headers"] == {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            "Authorization": "QTox",
        }
        assert call["verify"] is True
        assert call["timeout"] is None

    def test_form_request_has_no_authorization(self, make_client, session):
        session.queue({"status": 200})
        make_client().send(SignedRequest(url="https://api.example.com/Home/Qrm/getMacList", body={"a": "1"}))
        call = session.last
        assert call["data"] == {"a": "1"}
        assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert "Authorization" not in call["headers"]

    def test_timeout_and_tls_knobs(self, make_client, session):
        session.queue({"status": 200}).queue({"status": 200})
        client = make_client(timeout=5.0, verify_tls=False)
        client.send(self._json_request())
        assert session.last["timeout"] == 5.0
        assert session.last["verify"] is False
        client.send(self._json_request(), timeout=1.5)
        assert session.last["timeout"] == 1.5

    def test_non_200_http_status(self, make_client, session):
        session.queue({"error": "nope"}, status_code=503, text="Service Unavailable")
        with pytest.raises(TransportError) as excinfo:
            make_client().send(self._json_request())
        assert excinfo.value.status_code == 503
        assert excinfo.value.body == "Service Unavailable"

    def test_connection_failure(self, make_client, session):
        session.queue(requests.ConnectionError("refused"))
        with pytest.raises(TransportError) as excinfo:
            make_client().send(self._json_request())
        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_non_json_body(self, make_client, session):
        session.queue(ValueError("no json"), text="<html>")
        with pytest.raises(UnexpectedResponseError):
            make_client().send(self._json_request())

    def test_debug_log_masks_secrets(self, make_client, session, caplog):
        session.queue({"status": 200})
        request = SignedRequest(url="https://api.example.com/x", body={"token": "T", "creatorPassword": "p", "a": 1})
        with caplog.at_level(logging.DEBUG, logger="uclbrt"):
            make_client(debug=True).send(request)
        assert "request url: https://api.example.com/x" in caplog.text
        assert "'token': '***'" in caplog.text
        assert "'creatorPassword': '***'" in caplog.text

    def test_no_debug_output_by_default(self, make_client, session, caplog):
        session.queue({"status": 200})
        with caplog.at_level(logging.DEBUG, logger="uclbrt"):
            make_client().send(self._json_request())
        assert "request url" not in caplog.text
