"""Encryption of stored provider access tokens."""

import base64
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from idgate.domain.auth.port.cipher import TokenCipher

logger = logging.getLogger(__name__)

PREFIX = "enc:v1:"
NONCE_SIZE = 12  # GCM standard nonce
_KDF_SALT = b"idgate.provider-token"


def derive_key(secret: str) -> bytes:
    """Stretch configured key material into a 256-bit AES key."""
    kdf = Scrypt(salt=_KDF_SALT, length=32, n=2**14, r=8, p=1)
    return kdf.derive(secret.encode())


class AesGcmTokenCipher(TokenCipher):
    """AES-256-GCM with a random nonce per value.

    Stored form: ``enc:v1:`` + base64(nonce || ciphertext+tag). Values without
    the prefix predate encryption and are returned as-is.
    """

    def __init__(self, secret: str) -> None:
        self._aead = AESGCM(derive_key(secret))

    def encrypt(self, plaintext: str) -> str:
        if not plaintext:
            return ""
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode(), None)
        return PREFIX + base64.b64encode(nonce + sealed).decode()

    def decrypt(self, stored: str) -> str:
        if not stored or not stored.startswith(PREFIX):
            return stored
        try:
            raw = base64.b64decode(stored[len(PREFIX) :])
            nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
            return self._aead.decrypt(nonce, sealed, None).decode()
        except (InvalidTag, ValueError):
            # Key rotated or value corrupted; the provider token is simply unusable
            logger.warning("Stored provider token could not be decrypted; treating as absent")
            return ""


class PlaintextTokenCipher(TokenCipher):
    """Used when no encryption key is configured (development only)."""

    def encrypt(self, plaintext: str) -> str:
        return plaintext

    def decrypt(self, stored: str) -> str:
        return stored
