"""Request signature schemes.

Three schemes exist, one per operation family:

- batch: MD5 over account SID, auth token and a per-request UTC batch id,
  upper-case hex (Qrcode family), paired with a Base64 Authorization value
- concatenation: MD5 over field values in insertion order plus the auth
  token, lower-case hex (Qrm family)
- canonical query: SHA1 over the canonical encoding of the fields with the
  auth token injected as ``authToken``, lower-case hex (Records family)
"""
from __future__ import annotations
import base64
import hashlib
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .encoding import OrderedFields, canonical_encode, stringify_value

BATCH_FORMAT = "%Y%m%d%H%M%S"
SIGNATURE_FIELD = "sig"
AUTH_TOKEN_FIELD = "authToken"


def new_batch_id(now: Optional[datetime] = None) -> str:
    """Return a 14-digit ``YYYYMMDDHHmmss`` UTC timestamp."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(BATCH_FORMAT)


def batch_signature(account_sid: str, auth_token: str, batch_id: str) -> str:
    digest = hashlib.md5(f"{account_sid}{auth_token}{batch_id}".encode("utf-8"))
    return digest.hexdigest().upper()


def batch_auth_header(account_sid: str, batch_id: str) -> str:
    """Authorization header value for batch-signed requests."""
    return base64.b64encode(f"{account_sid}:{batch_id}".encode("utf-8")).decode("ascii")


def concatenation_signature(fields: OrderedFields, auth_token: str) -> str:
    """Sign field values in insertion order.

    A plain dict is rejected so that the signed order is always explicit.
    Any ``sig`` field already present is left out of the digest.

    Args:
        fields: Ordered fields to sign
        auth_token: Account auth token

    Returns:
        Lower-case hex MD5 digest

    Raises:
        TypeError: If ``fields`` is not an OrderedFields instance
    """
    if not isinstance(fields, OrderedFields):
        raise TypeError("concatenation_signature requires OrderedFields, got " + type(fields).__name__)
    joined = "".join(stringify_value(value) for name, value in fields if name != SIGNATURE_FIELD)
    return hashlib.md5(f"{joined}{auth_token}".encode("utf-8")).hexdigest()


def canonical_query_signature(mapping: Mapping[str, Any], auth_token: str) -> str:
    """SHA1 of the canonical query string with ``authToken`` injected.

    The caller's mapping is not modified.
    """
    signed = dict(mapping)
    signed[AUTH_TOKEN_FIELD] = auth_token
    return hashlib.sha1(canonical_encode(signed).encode("utf-8")).hexdigest()


def md5_hex(value: str) -> str:
    """Lower-case hex MD5, used for creator passwords on device operations."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()
