"""
Orbita Secrets Cryptographic Module

Provides the two leaf components used to protect third-party credentials:
- Secret cipher (AES-256-GCM) for secrets stored at rest
- Signed, expiring OAuth state tokens (HMAC-SHA256)
"""

from .errors import (
    AuthenticationError,
    ConfigurationError,
    DecryptionError,
    ExpiredOrInvalidStateError,
    MalformedCiphertextError,
    SecretsError,
)
from .oauth_state import OAuthStateSigner
from .secret_cipher import SecretCipher

__all__ = [
    "SecretCipher",
    "OAuthStateSigner",
    "SecretsError",
    "ConfigurationError",
    "DecryptionError",
    "MalformedCiphertextError",
    "AuthenticationError",
    "ExpiredOrInvalidStateError",
]
