"""Public-key encryption of access-link payloads."""
from __future__ import annotations
import base64
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .encoding import canonical_encode
from .exceptions import EncryptionError

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_KEY_PATH = Path(__file__).resolve().parent.parent / "resources" / "public.pem"


class PayloadEncryptor:
    """Encrypts canonical query strings with the service's RSA public key.

    Key material is loaded once at construction. A load failure is kept and
    re-raised as EncryptionError on first use, so clients that never build
    access links are not affected by a missing key.

    Usage:
        encryptor = PayloadEncryptor.from_file()
        blob = encryptor.encrypt_link({"id": "sid", "mobile": "138..."})
    """

    def __init__(self, pem: Optional[bytes]):
        self._key: Optional[rsa.RSAPublicKey] = None
        self._load_error: Optional[str] = None
        if not pem:
            self._load_error = "public key material is missing"
            return
        try:
            key = serialization.load_pem_public_key(pem)
        except (ValueError, TypeError) as exc:
            self._load_error = f"public key material is invalid: {exc}"
            logger.warning("Failed to load link encryption key: %s", exc)
            return
        if not isinstance(key, rsa.RSAPublicKey):
            self._load_error = f"expected an RSA public key, got {type(key).__name__}"
            return
        self._key = key

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "PayloadEncryptor":
        """Load the PEM key from ``path`` (defaults to the shipped asset)."""
        key_path = Path(path) if path else DEFAULT_PUBLIC_KEY_PATH
        try:
            pem = key_path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read public key %s: %s", key_path, exc)
            pem = None
        return cls(pem)

    @property
    def available(self) -> bool:
        return self._key is not None

    def encrypt(self, plaintext: str) -> str:
        """RSA-OAEP (SHA-1) encrypt ``plaintext`` and return Base64 ciphertext.

        Raises:
            EncryptionError: Key unusable or plaintext too long for the key
        """
        if self._key is None:
            raise EncryptionError(self._load_error or "public key material is missing")
        try:
            ciphertext = self._key.encrypt(
                plaintext.encode("utf-8"),
                padding.OAEP(
                    mgf=padding.MGF1(algorithm=hashes.SHA1()),
                    algorithm=hashes.SHA1(),
                    label=None,
                ),
            )
        except ValueError as exc:
            raise EncryptionError(f"failed to encrypt payload: {exc}") from exc
        return base64.b64encode(ciphertext).decode("ascii")

    def encrypt_link(self, mapping: Mapping[str, Any]) -> str:
        """Canonically encode ``mapping`` (unescaped) and encrypt it."""
        return self.encrypt(canonical_encode(mapping))
