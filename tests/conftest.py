"""Pytest shared fixtures for the access-control client tests."""
import json
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization

from uclbrt.core.access import UclbrtClient
from uclbrt.core.encryption import PayloadEncryptor


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, payload, status_code: int = 200, text=None):
        self._payload = payload
        self.status_code = status_code
        if text is None:
            text = str(payload) if isinstance(payload, Exception) else json.dumps(payload)
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records every POST and replays queued replies."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.max_redirects = 30

    def queue(self, payload, status_code: int = 200, text=None):
        self.responses.append(StubResponse(payload, status_code, text))
        return self

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected HTTP POST in unit test: {url}")
        response = self.responses.pop(0)
        if isinstance(response._payload, requests.RequestException):
            raise response._payload
        return response

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Prevent unit tests from reaching the real service through requests."""
    def _refuse(*args, **kwargs):
        raise RuntimeError("Unexpected network access in tests")

    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for link encryption
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate an RSA key pair standing in for the service's link key."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return {"private_key": private_key, "public_pem": public_pem}


@pytest.fixture()
def encryptor(rsa_key_pair):
    return PayloadEncryptor(rsa_key_pair["public_pem"])


@pytest.fixture()
def session():
    return FakeSession()


@pytest.fixture()
def make_client(session, encryptor):
    """Factory for clients wired to the fake session and test key."""
    def _make(**overrides):
        kwargs = dict(
            community_no=1001,
            community_timezone="Asia/Shanghai",
            local_timezone="Asia/Shanghai",
            encryptor=encryptor,
            session=session,
        )
        kwargs.update(overrides)
        return UclbrtClient("A", "T", "https://api.example.com/", "http://card.example.com/", **kwargs)

    return _make
