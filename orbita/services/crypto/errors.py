"""
Error taxonomy for the secrets subsystem.

Every failure raised by the cipher or the OAuth state signer is one of the
classes below. Callers that do not care whether stored data was corrupted or
tampered with catch DecryptionError.
"""


class SecretsError(Exception):
    """Base exception for secret encryption and state signing"""
    pass


class ConfigurationError(SecretsError):
    """Raised when the encryption key or signing secret is missing or malformed"""
    pass


class DecryptionError(SecretsError):
    """Raised when a ciphertext cannot be turned back into plaintext"""
    pass


class MalformedCiphertextError(DecryptionError):
    """Raised when a ciphertext does not match the iv:tag:data hex format"""
    pass


class AuthenticationError(DecryptionError):
    """Raised when GCM tag verification fails (tampering or wrong key)"""
    pass


class ExpiredOrInvalidStateError(SecretsError):
    """Raised when an OAuth state token is forged, malformed or expired"""
    pass
