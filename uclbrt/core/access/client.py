"""Low-level HTTP client for the access-control API.

Holds identity, endpoints and community context, and performs the signed
POST exchanges built by the service modules.
"""
from __future__ import annotations
import copy
import logging
from typing import Any, Dict, Optional, Union

import requests

from ... import __version__
from ..encryption import PayloadEncryptor
from ..exceptions import ConfigurationError, TransportError, UnexpectedResponseError
from ..validators import ResponseExpectation, STATUS_ONLY, check_http_status, validate_reply
from .models import (
    DEFAULT_API_HOST,
    DEFAULT_CARD_HOST,
    JSON_CONTENT_TYPE,
    ClientIdentity,
    CommunityContext,
    ServiceEndpoints,
    SignedRequest,
)

logger = logging.getLogger(__name__)

USER_AGENT = f"uclbrt-python/{__version__}"
MAX_REDIRECTS = 3

# Never written to debug output in clear text
_SENSITIVE_FIELDS = {"authToken", "token", "creatorPassword", "Authorization"}

Timeout = Optional[Union[float, tuple]]


def _mask(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: ("***" if key in _SENSITIVE_FIELDS else value) for key, value in data.items()}


class UclbrtClient:
    """HTTP client for the access-control API.

    Features:
    - Immutable identity and endpoints, validated at construction
    - Swappable immutable community context
    - Centralized reply validation

    Usage:
        client = UclbrtClient("sid", "token", community_no=1001)
        reply = client.send(signed_request, ResponseExpectation(field="cardNo"))

    Context setters are not synchronized: do not change the community
    context while operations on the same client are in flight. Use
    ``for_community`` to get an independent client instead.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        api_host: str = DEFAULT_API_HOST,
        card_host: str = DEFAULT_CARD_HOST,
        *,
        community_no: Optional[int] = None,
        community_timezone: Optional[str] = None,
        local_timezone: Optional[str] = None,
        debug: bool = False,
        verify_tls: bool = True,
        timeout: Timeout = None,
        public_key_path: Optional[str] = None,
        encryptor: Optional[PayloadEncryptor] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            account_sid: Account SID
            auth_token: Account auth token
            api_host: API base URL (trailing slash expected)
            card_host: Access-link host base URL
            community_no: Community id, may be set later
            community_timezone: IANA zone of the community (default Asia/Shanghai)
            local_timezone: IANA zone of the operator (default: system zone)
            debug: Emit request/response tracing on the module logger
            verify_tls: Verify server certificates; disable only knowingly
            timeout: requests timeout; None waits indefinitely
            public_key_path: PEM file replacing the shipped link encryption key
            encryptor: Pre-built encryptor (overrides public_key_path)
            session: requests session to use
        """
        self.identity = ClientIdentity(account_sid, auth_token)
        self.endpoints = ServiceEndpoints(api_host, card_host)
        context_kwargs: Dict[str, Any] = {"community_no": community_no, "local_timezone": local_timezone}
        if community_timezone is not None:
            context_kwargs["community_timezone"] = community_timezone
        self.context = CommunityContext(**context_kwargs)
        self.debug = debug
        self.verify_tls = verify_tls
        self.timeout = timeout
        self.encryptor = encryptor or PayloadEncryptor.from_file(public_key_path)
        self.session = session or requests.Session()
        self.session.max_redirects = MAX_REDIRECTS
        if not verify_tls:
            logger.warning("TLS certificate verification is disabled for %s", self.endpoints.api_host)

    @classmethod
    def from_settings(cls, settings, session: Optional[requests.Session] = None) -> "UclbrtClient":
        """Build a client from a ClientSettings instance."""
        return cls(
            settings.account_sid,
            settings.auth_token,
            settings.api_host,
            settings.card_host,
            community_no=settings.community_no,
            community_timezone=settings.community_timezone,
            local_timezone=settings.local_timezone,
            debug=settings.debug,
            verify_tls=settings.verify_tls,
            timeout=settings.request_timeout,
            public_key_path=settings.public_key_path,
            session=session,
        )

    @property
    def account_sid(self) -> str:
        return self.identity.account_sid

    @property
    def auth_token(self) -> str:
        return self.identity.auth_token

    # ─────────────────────────────────────────────────────────────────────
    # Community context
    # ─────────────────────────────────────────────────────────────────────
    def set_community_no(self, community_no: int) -> None:
        self.context = self.context.with_community_no(community_no)

    def set_community_timezone(self, community_timezone: str) -> None:
        if not community_timezone:
            raise ConfigurationError("communityTimezone cannot be empty.")
        self.context = CommunityContext(
            self.context.community_no, community_timezone, self.context.local_timezone
        )

    def set_local_timezone(self, local_timezone: str) -> None:
        if not local_timezone:
            raise ConfigurationError("localTimezone cannot be empty.")
        self.context = CommunityContext(
            self.context.community_no, self.context.community_timezone, local_timezone
        )

    def for_community(self, community_no: int) -> "UclbrtClient":
        """Return a client bound to another community, sharing session and identity."""
        clone = copy.copy(self)
        clone.context = self.context.with_community_no(community_no)
        return clone

    # ─────────────────────────────────────────────────────────────────────
    # HTTP
    # ─────────────────────────────────────────────────────────────────────
    def api_url(self, path: str) -> str:
        return f"{self.endpoints.api_host}{path}"

    def log(self, message: str, *args: Any) -> None:
        """Debug tracing, active only when the client was built with debug=True."""
        if self.debug:
            logger.debug("[uclbrt] " + message, *args)

    def send(
        self,
        request: SignedRequest,
        expectation: ResponseExpectation = STATUS_ONLY,
        timeout: Timeout = None,
    ) -> Any:
        """POST a signed request and validate the reply.

        Args:
            request: Signed request description
            expectation: What the operation requires from the reply
            timeout: Per-call timeout overriding the client default

        Returns:
            Result selected by ``expectation``

        Raises:
            TransportError: Connection failure or non-200 HTTP status
            ServerError: Reply-level status is not 200
            UnexpectedResponseError: Expected reply content missing
        """
        headers = {
            "Accept": "application/json",
            "Content-Type": request.content_type,
            "User-Agent": USER_AGENT,
        }
        if request.auth_header:
            headers["Authorization"] = request.auth_header

        kwargs: Dict[str, Any] = {}
        if request.content_type == JSON_CONTENT_TYPE:
            kwargs["json"] = request.body
        else:
            kwargs["data"] = request.body

        self.log("request url: %s", request.url)
        self.log("request data: %s", _mask(request.body))
        try:
            resp = self.session.post(
                request.url,
                headers=headers,
                timeout=timeout if timeout is not None else self.timeout,
                verify=self.verify_tls,
                **kwargs,
            )
        except requests.RequestException as exc:
            raise TransportError(None, str(exc)) from exc

        self._handle_error(resp)
        try:
            reply = resp.json()
        except ValueError as exc:
            raise UnexpectedResponseError("status", "server returns an unexpected value.") from exc
        self.log("server return: %s", reply)
        return validate_reply(reply, expectation)

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized HTTP status check.

        Raises:
            TransportError: If the status is anything but 200
        """
        check_http_status(resp.status_code, resp.text)
