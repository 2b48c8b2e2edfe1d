"""Argument checks and server reply validation."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .exceptions import InvalidArgumentError, ServerError, TransportError, UnexpectedResponseError

SUCCESS_INFO = "success"


@dataclass(frozen=True)
class ResponseExpectation:
    """What an operation requires from a successful reply.

    Attributes:
        field: Payload field that must be present and truthy; its value is returned
        require_success: Reply ``info`` must equal "success"
        require_status: Reply ``status`` must be present (and 200)
        extract: Field returned (without a presence check) when ``field`` is unset
    """
    field: Optional[str] = None
    require_success: bool = False
    require_status: bool = False
    extract: Optional[str] = None


STATUS_ONLY = ResponseExpectation()
STATUS_200 = ResponseExpectation(require_status=True)
SUCCESS_MARKER = ResponseExpectation(require_success=True)


def require_non_empty(value: Any, name: str) -> Any:
    """Reject missing required arguments.

    Only None and "" are rejected; whitespace is passed through to the server.

    Raises:
        InvalidArgumentError: If value is None or an empty string
    """
    if value is None or value == "":
        raise InvalidArgumentError(f"{name} cannot be empty.")
    return value


def check_http_status(status_code: Optional[int], body: Any) -> None:
    """Raise TransportError unless the HTTP status is exactly 200."""
    if status_code != 200:
        raise TransportError(status_code, body)


def check_reply_status(reply: Any, required: bool = False) -> Mapping[str, Any]:
    """Verify the decoded reply is an object whose ``status`` is 200.

    A missing ``status`` passes unless ``required`` is set.

    Raises:
        UnexpectedResponseError: Reply is not a JSON object
        ServerError: Reply-level status is not 200, or missing when required
    """
    if not isinstance(reply, Mapping):
        raise UnexpectedResponseError("status", "server returns an unexpected value.")
    if "status" not in reply:
        if required:
            raise ServerError(reply.get("info"))
        return reply
    if str(reply["status"]) != "200":
        raise ServerError(reply.get("info"), reply["status"])
    return reply


def expect_field(reply: Mapping[str, Any], field: str) -> Any:
    value = reply.get(field)
    if not value:
        raise UnexpectedResponseError(field)
    return value


def expect_success(reply: Mapping[str, Any]) -> None:
    if reply.get("info") != SUCCESS_INFO:
        raise UnexpectedResponseError("info", "server returns an unexpected value.")


def validate_reply(reply: Any, expectation: ResponseExpectation = STATUS_ONLY) -> Any:
    """Turn a decoded server reply into the operation's result.

    The HTTP status is checked by the transport before the body is decoded.

    Args:
        reply: Decoded JSON body
        expectation: Operation-specific requirements

    Returns:
        The expected field's value, the extracted field, or the whole reply

    Raises:
        ServerError: Reply-level status is not 200
        UnexpectedResponseError: Expected field or success marker missing
    """
    reply = check_reply_status(reply, expectation.require_status)
    if expectation.require_success:
        expect_success(reply)
    if expectation.field:
        return expect_field(reply, expectation.field)
    if expectation.extract:
        return reply.get(expectation.extract)
    return reply
