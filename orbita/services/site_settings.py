"""Site-wide settings holding encrypted third-party secrets."""
from dataclasses import dataclass
from typing import Optional

import structlog

from .crypto import DecryptionError, SecretCipher
from .errors import SettingsValidationError
from .models import EmailProvider, SiteSettings
from .store import InMemoryRecordStore

log = structlog.get_logger()

ANTHROPIC_KEY_PREFIX = "sk-ant-"


@dataclass(frozen=True)
class SettingsStatus:
    has_api_key: bool
    has_github_credentials: bool
    has_email_config: bool
    email_provider: Optional[str]


@dataclass(frozen=True)
class GitHubAppCredentials:
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class EmailConfig:
    provider: EmailProvider
    resend_api_key: Optional[str] = None
    imap_email: Optional[str] = None
    imap_password: Optional[str] = None


class SiteSettingsService:
    """
    Reads and writes the singleton settings record.

    Every secret is encrypted before it reaches the store and decrypted only
    by the accessor that needs it.
    """

    def __init__(
        self,
        cipher: SecretCipher,
        store: InMemoryRecordStore[SiteSettings] | None = None,
        metrics=None,
    ):
        self._cipher = cipher
        self._store = store if store is not None else InMemoryRecordStore("site_settings")
        self._metrics = metrics

    def status(self) -> SettingsStatus:
        settings = self._load()
        if settings.email_provider is None:
            has_email = False
        elif settings.email_provider is EmailProvider.RESEND:
            has_email = settings.resend_api_key is not None
        else:
            has_email = settings.imap_email is not None and settings.imap_password is not None

        return SettingsStatus(
            has_api_key=settings.anthropic_api_key is not None,
            has_github_credentials=(
                settings.github_client_id is not None
                and settings.github_client_secret is not None
            ),
            has_email_config=has_email,
            email_provider=settings.email_provider.value if settings.email_provider else None,
        )

    # Anthropic

    def save_anthropic_api_key(self, api_key: Optional[str]) -> None:
        """
        Raises:
            SettingsValidationError: If the key is blank or not an Anthropic key
        """
        api_key = (api_key or "").strip()
        if not api_key:
            raise SettingsValidationError("API key is required")
        if not api_key.startswith(ANTHROPIC_KEY_PREFIX):
            raise SettingsValidationError("Invalid Anthropic API key format")

        self._save(anthropic_api_key=self._encrypt(api_key))
        log.info("settings.anthropic_key_saved")

    def delete_anthropic_api_key(self) -> None:
        self._save(anthropic_api_key=None)
        log.info("settings.anthropic_key_deleted")

    def anthropic_api_key(self) -> Optional[str]:
        settings = self._load()
        if settings.anthropic_api_key is None:
            return None
        return self._decrypt(settings.anthropic_api_key)

    # GitHub OAuth app

    def save_github_credentials(
        self, client_id: Optional[str], client_secret: Optional[str]
    ) -> None:
        """
        Raises:
            SettingsValidationError: If either value is blank
        """
        client_id = (client_id or "").strip()
        client_secret = (client_secret or "").strip()
        if not client_id or not client_secret:
            raise SettingsValidationError("Both Client ID and Client Secret are required")

        self._save(
            github_client_id=self._encrypt(client_id),
            github_client_secret=self._encrypt(client_secret),
        )
        log.info("settings.github_credentials_saved")

    def delete_github_credentials(self) -> None:
        self._save(github_client_id=None, github_client_secret=None)
        log.info("settings.github_credentials_deleted")

    def github_credentials(self) -> Optional[GitHubAppCredentials]:
        """
        Returns:
            Decrypted client id and secret, or None if not configured

        Raises:
            DecryptionError: If the stored values cannot be decrypted
        """
        settings = self._load()
        if settings.github_client_id is None or settings.github_client_secret is None:
            return None
        return GitHubAppCredentials(
            client_id=self._decrypt(settings.github_client_id),
            client_secret=self._decrypt(settings.github_client_secret),
        )

    # Owner email

    def save_email_config(
        self,
        provider: Optional[EmailProvider],
        api_key: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        """
        Store the owner's email provider secrets.

        Resend needs an API key; IMAP providers need an address and an app
        password. Fields belonging to the other kind of provider are cleared.

        Raises:
            SettingsValidationError: If the provider or a required field is missing
        """
        if provider is None:
            raise SettingsValidationError("Please select an email provider")
        try:
            provider = EmailProvider(provider)
        except ValueError:
            raise SettingsValidationError(f"Unknown email provider: {provider}")

        if provider is EmailProvider.RESEND:
            api_key = (api_key or "").strip()
            if not api_key:
                raise SettingsValidationError("API Key is required")
            self._save(
                email_provider=provider,
                resend_api_key=self._encrypt(api_key),
                imap_email=None,
                imap_password=None,
            )
        else:
            email = (email or "").strip()
            password = (password or "").strip()
            if not email or not password:
                raise SettingsValidationError("Email and App Password are required")
            self._save(
                email_provider=provider,
                imap_email=self._encrypt(email),
                imap_password=self._encrypt(password),
                resend_api_key=None,
            )

        log.info("settings.email_config_saved", provider=provider.value)

    def delete_email_config(self) -> None:
        self._save(
            email_provider=None,
            resend_api_key=None,
            imap_email=None,
            imap_password=None,
        )
        log.info("settings.email_config_deleted")

    def email_config(self) -> Optional[EmailConfig]:
        """
        Returns:
            Decrypted email configuration, or None if it is missing,
            incomplete or cannot be decrypted
        """
        settings = self._load()
        if settings.email_provider is None:
            return None

        try:
            if settings.email_provider is EmailProvider.RESEND:
                if settings.resend_api_key is None:
                    return None
                return EmailConfig(
                    provider=settings.email_provider,
                    resend_api_key=self._decrypt(settings.resend_api_key),
                )

            if settings.imap_email is None or settings.imap_password is None:
                return None
            return EmailConfig(
                provider=settings.email_provider,
                imap_email=self._decrypt(settings.imap_email),
                imap_password=self._decrypt(settings.imap_password),
            )
        except DecryptionError as e:
            log.warning("settings.email_config_unreadable", error_type=type(e).__name__)
            return None

    def clear(self) -> None:
        self._store.clear()

    def _load(self) -> SiteSettings:
        return self._store.get("default") or SiteSettings()

    def _save(self, **changes) -> SiteSettings:
        settings = SiteSettings.model_validate({**self._load().model_dump(), **changes})
        return self._store.put(settings)

    def _encrypt(self, plaintext: str) -> str:
        ciphertext = self._cipher.encrypt(plaintext)
        self._record("encrypt", "success")
        return ciphertext

    def _decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._cipher.decrypt(ciphertext)
        except DecryptionError:
            self._record("decrypt", "failure")
            raise
        self._record("decrypt", "success")
        return plaintext

    def _record(self, operation: str, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_secret_operation(operation, outcome)
