"""
Service wiring.

This is the only module that reads the encryption key and state secret from
configuration; everything below it receives them as constructor arguments.
Providers are cached so each process builds one instance of each service,
and FastAPI routes resolve them through Depends() so tests can override them.
"""
from functools import lru_cache

from .config import get_settings
from .metrics import Metrics
from .services.crypto import OAuthStateSigner, SecretCipher
from .services.github_oauth import GitHubOAuthService
from .services.site_settings import SiteSettingsService
from .services.vault import CredentialVault

SERVICE_NAME = "orbita-secrets"
VERSION = "0.1.0"


@lru_cache(maxsize=1)
def get_metrics() -> Metrics:
    return Metrics(service_name=SERVICE_NAME, version=VERSION)


@lru_cache(maxsize=1)
def get_cipher() -> SecretCipher:
    """
    Raises:
        ConfigurationError: If ENCRYPTION_KEY is missing or malformed
    """
    return SecretCipher.from_hex(get_settings().ENCRYPTION_KEY)


@lru_cache(maxsize=1)
def get_state_signer() -> OAuthStateSigner:
    """
    Raises:
        ConfigurationError: If OAUTH_STATE_SECRET is missing
    """
    settings = get_settings()
    return OAuthStateSigner(
        settings.OAUTH_STATE_SECRET,
        ttl_seconds=settings.OAUTH_STATE_TTL_SECONDS,
    )


@lru_cache(maxsize=1)
def get_vault() -> CredentialVault:
    return CredentialVault(get_cipher(), metrics=get_metrics())


@lru_cache(maxsize=1)
def get_site_settings() -> SiteSettingsService:
    return SiteSettingsService(get_cipher(), metrics=get_metrics())


@lru_cache(maxsize=1)
def get_github_oauth() -> GitHubOAuthService:
    return GitHubOAuthService(
        get_cipher(),
        get_state_signer(),
        get_site_settings(),
        redirect_uri=get_settings().GITHUB_REDIRECT_URI,
        metrics=get_metrics(),
    )


def reset_services() -> None:
    """Drop cached services so the next call rebuilds them from settings."""
    for provider in (
        get_github_oauth,
        get_site_settings,
        get_vault,
        get_state_signer,
        get_cipher,
    ):
        provider.cache_clear()
