"""AES-256-GCM encryption for payout destination account numbers."""

import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.config import settings

NONCE_SIZE = 12  # 96-bit nonce for GCM


def derive_key(secret: str) -> bytes:
    """32-byte AES key from the configured secret of any length."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(secret.encode("utf-8"))
    return digest.finalize()


class EncryptionService:
    """Encrypts account numbers at rest; stored as nonce + ciphertext."""

    def __init__(self, key: bytes) -> None:
        if len(key) != 32:
            raise ValueError("Encryption key must be 32 bytes for AES-256")
        self._aesgcm = AESGCM(key)

    def encrypt(self, plaintext: str) -> bytes:
        nonce = os.urandom(NONCE_SIZE)
        return nonce + self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

    def decrypt(self, ciphertext: bytes) -> str:
        """Decrypt a stored value.

        Raises:
            ValueError: If the value is truncated or was encrypted with another key
        """
        if len(ciphertext) <= NONCE_SIZE:
            raise ValueError("Ciphertext too short")
        try:
            plaintext = self._aesgcm.decrypt(
                ciphertext[:NONCE_SIZE], ciphertext[NONCE_SIZE:], None
            )
        except InvalidTag:
            raise ValueError("Ciphertext failed authentication") from None
        return plaintext.decode("utf-8")


@lru_cache
def get_encryption_service() -> EncryptionService:
    """Get cached encryption service instance."""
    return EncryptionService(derive_key(settings.encryption_key))


def encrypt_account_number(account_number: str) -> bytes:
    return get_encryption_service().encrypt(account_number)


def decrypt_account_number(ciphertext: bytes) -> str:
    return get_encryption_service().decrypt(ciphertext)


def mask_account_number(account_number: str) -> str:
    """Last four digits for display, e.g. ``XXXXXX1234``."""
    last4 = account_number[-4:]
    return "X" * max(len(account_number) - 4, 0) + last4
