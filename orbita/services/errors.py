"""
Service-layer exceptions
"""


class OrbitaError(Exception):
    """Base exception for Orbita service errors"""
    pass


class CredentialNotFoundError(OrbitaError):
    """Raised when a credential (or its password) does not exist"""
    pass


class SettingsValidationError(OrbitaError):
    """Raised when submitted settings are incomplete or malformed"""
    pass


class GitHubNotConfiguredError(OrbitaError):
    """Raised when GitHub OAuth app credentials or a project connection are missing"""
    pass


class GitHubOAuthError(OrbitaError):
    """Raised when GitHub rejects a code exchange"""
    pass
