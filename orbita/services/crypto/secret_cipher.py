"""
Secret cipher for credentials stored at rest

Implements authenticated symmetric encryption of short secret strings
(API keys, OAuth access tokens, vault passwords):
- AES-256-GCM with a fresh 96-bit nonce per call
- 128-bit authentication tag checked on every decryption
- Storage format: <ivHex>:<tagHex>:<cipherHex>
"""

import binascii
import re
import secrets
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import (
    AuthenticationError,
    ConfigurationError,
    MalformedCiphertextError,
)

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


class SecretCipher:
    """
    AES-256-GCM cipher bound to a single process-wide key.

    Instances hold only immutable key material and may be shared freely
    between threads and tasks.
    """

    KEY_LENGTH = 32     # 256 bits
    NONCE_LENGTH = 12   # 96 bits, standard for GCM
    TAG_LENGTH = 16     # 128 bits
    SEPARATOR = ":"

    def __init__(self, key: Optional[bytes]):
        """
        Initialize SecretCipher.

        Args:
            key: Raw 32-byte AES key

        Raises:
            ConfigurationError: If the key is missing or not 32 bytes long
        """
        if not key:
            raise ConfigurationError("Encryption key is not configured")
        if len(key) != self.KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be {self.KEY_LENGTH} bytes, got {len(key)}"
            )
        self._aesgcm = AESGCM(bytes(key))

    @classmethod
    def from_hex(cls, key_hex: Optional[str]) -> "SecretCipher":
        """
        Build a cipher from the 64-character hex form used in configuration.

        Raises:
            ConfigurationError: If the value is missing, has the wrong length
                or is not hex
        """
        if not key_hex:
            raise ConfigurationError("ENCRYPTION_KEY is not set")
        key_hex = key_hex.strip()
        if len(key_hex) != cls.KEY_LENGTH * 2:
            raise ConfigurationError(
                "ENCRYPTION_KEY must be a 64-char hex string (32 bytes)"
            )
        try:
            key = bytes.fromhex(key_hex)
        except ValueError:
            raise ConfigurationError("ENCRYPTION_KEY is not valid hex")
        return cls(key)

    @staticmethod
    def generate_key_hex() -> str:
        """Generate a new random key in its configuration (hex) form"""
        return secrets.token_hex(SecretCipher.KEY_LENGTH)

    @classmethod
    def is_ciphertext(cls, value: Union[str, None]) -> bool:
        """
        Check whether a value has the shape of a stored ciphertext.

        Only the format is checked; no key is involved.
        """
        if not isinstance(value, str):
            return False
        parts = value.split(cls.SEPARATOR)
        if len(parts) != 3:
            return False
        iv_hex, tag_hex, data_hex = parts
        return (
            len(iv_hex) == cls.NONCE_LENGTH * 2
            and len(tag_hex) == cls.TAG_LENGTH * 2
            and len(data_hex) % 2 == 0
            and all(_HEX_RE.match(p) for p in parts)
        )

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret string.

        Two calls with the same plaintext never produce the same output,
        since every call draws its own nonce.

        Args:
            plaintext: Secret to encrypt (the empty string is allowed)

        Returns:
            Ciphertext in iv:tag:data hex form
        """
        if plaintext is None:
            raise TypeError("plaintext must be a string, not None")

        nonce = secrets.token_bytes(self.NONCE_LENGTH)
        # AESGCM appends the tag to the encrypted bytes
        sealed = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        data, tag = sealed[:-self.TAG_LENGTH], sealed[-self.TAG_LENGTH:]

        return self.SEPARATOR.join((nonce.hex(), tag.hex(), data.hex()))

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a ciphertext produced by encrypt().

        Args:
            ciphertext: Value in iv:tag:data hex form

        Returns:
            The original plaintext

        Raises:
            MalformedCiphertextError: If the value is not three hex fields
                with a 12-byte nonce and a 16-byte tag
            AuthenticationError: If the tag does not verify
        """
        nonce, tag, data = self._split(ciphertext)

        try:
            plaintext = self._aesgcm.decrypt(nonce, data + tag, None)
        except InvalidTag:
            raise AuthenticationError("Ciphertext failed authentication")

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            # Authenticated but not produced by encrypt()
            raise MalformedCiphertextError("Decrypted data is not valid UTF-8")

    def _split(self, ciphertext: str) -> tuple[bytes, bytes, bytes]:
        """Parse the storage format into nonce, tag and encrypted bytes"""
        if not isinstance(ciphertext, str):
            raise MalformedCiphertextError("Ciphertext must be a string")

        parts = ciphertext.split(self.SEPARATOR)
        if len(parts) != 3:
            raise MalformedCiphertextError(
                f"Invalid ciphertext format: expected 3 fields, got {len(parts)}"
            )

        iv_hex, tag_hex, data_hex = parts
        if not iv_hex or not tag_hex:
            raise MalformedCiphertextError("Invalid ciphertext format: empty field")

        try:
            nonce = binascii.unhexlify(iv_hex)
            tag = binascii.unhexlify(tag_hex)
            data = binascii.unhexlify(data_hex)
        except (binascii.Error, ValueError):
            raise MalformedCiphertextError("Invalid ciphertext format: non-hex field")

        if len(nonce) != self.NONCE_LENGTH:
            raise MalformedCiphertextError(
                f"Invalid nonce length: expected {self.NONCE_LENGTH} bytes"
            )
        if len(tag) != self.TAG_LENGTH:
            raise MalformedCiphertextError(
                f"Invalid tag length: expected {self.TAG_LENGTH} bytes"
            )

        return nonce, tag, data
