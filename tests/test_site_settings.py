"""
Tests for SiteSettingsService
"""

import pytest
from pydantic import ValidationError

from orbita.services.crypto import SecretCipher
from orbita.services.errors import SettingsValidationError
from orbita.services.models import EmailProvider
from orbita.services.site_settings import SiteSettingsService


@pytest.fixture
def service(key_bytes):
    return SiteSettingsService(SecretCipher(key_bytes))


def _stored(service):
    return service._load()


class TestStatus:
    def test_empty(self, service):
        status = service.status()

        assert not status.has_api_key
        assert not status.has_github_credentials
        assert not status.has_email_config
        assert status.email_provider is None

    def test_all_configured(self, service):
        service.save_anthropic_api_key("sk-ant-abc123")
        service.save_github_credentials("client-id", "client-secret")
        service.save_email_config(EmailProvider.GMAIL, email="me@gmail.com", password="app-pass")

        status = service.status()
        assert status.has_api_key
        assert status.has_github_credentials
        assert status.has_email_config
        assert status.email_provider == "GMAIL"


class TestAnthropicKey:
    def test_saved_encrypted(self, service):
        service.save_anthropic_api_key("  sk-ant-abc123  ")

        stored = _stored(service).anthropic_api_key
        assert SecretCipher.is_ciphertext(stored)
        assert "sk-ant" not in stored
        assert service.anthropic_api_key() == "sk-ant-abc123"

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_required(self, service, key):
        with pytest.raises(SettingsValidationError, match="required"):
            service.save_anthropic_api_key(key)

    def test_prefix_checked(self, service):
        with pytest.raises(SettingsValidationError, match="Invalid Anthropic API key format"):
            service.save_anthropic_api_key("sk-openai-123")

    def test_delete(self, service):
        service.save_anthropic_api_key("sk-ant-abc123")
        service.delete_anthropic_api_key()

        assert service.anthropic_api_key() is None


class TestGitHubCredentials:
    def test_round_trip(self, service):
        service.save_github_credentials(" Iv1.abc ", " shh ")

        credentials = service.github_credentials()
        assert credentials.client_id == "Iv1.abc"
        assert credentials.client_secret == "shh"
        assert SecretCipher.is_ciphertext(_stored(service).github_client_secret)

    def test_both_required(self, service):
        with pytest.raises(SettingsValidationError):
            service.save_github_credentials("id", "")

    def test_delete(self, service):
        service.save_github_credentials("id", "secret")
        service.delete_github_credentials()

        assert service.github_credentials() is None


class TestEmailConfig:
    def test_resend(self, service):
        service.save_email_config(EmailProvider.RESEND, api_key="re_123")

        config = service.email_config()
        assert config.provider is EmailProvider.RESEND
        assert config.resend_api_key == "re_123"

    def test_switching_to_imap_clears_resend_key(self, service):
        service.save_email_config(EmailProvider.RESEND, api_key="re_123")
        service.save_email_config("ICLOUD", email="me@icloud.com", password="app-pass")

        stored = _stored(service)
        assert stored.resend_api_key is None
        assert SecretCipher.is_ciphertext(stored.imap_email)
        assert service.email_config().imap_password == "app-pass"

    def test_imap_requires_email_and_password(self, service):
        with pytest.raises(SettingsValidationError, match="Email and App Password"):
            service.save_email_config(EmailProvider.GMAIL, email="me@gmail.com")

    def test_provider_required(self, service):
        with pytest.raises(SettingsValidationError):
            service.save_email_config(None)

    def test_unknown_provider(self, service):
        with pytest.raises(SettingsValidationError):
            service.save_email_config("YAHOO", email="a", password="b")

    def test_undecryptable_config_reads_as_missing(self, service):
        service.save_email_config(EmailProvider.RESEND, api_key="re_123")

        rotated = SiteSettingsService(SecretCipher(b"\x07" * 32), store=service._store)

        assert rotated.email_config() is None
        assert rotated.status().has_email_config

    def test_delete(self, service):
        service.save_email_config(EmailProvider.RESEND, api_key="re_123")
        service.delete_email_config()

        assert service.email_config() is None
        assert service.status().email_provider is None


class TestStoredRecord:
    def test_plaintext_refused_on_update(self, service):
        service.save_anthropic_api_key("sk-ant-abc123")

        with pytest.raises(ValidationError):
            service._save(anthropic_api_key="sk-ant-plaintext")

        assert service.anthropic_api_key() == "sk-ant-abc123"

    def test_update_keeps_other_secrets(self, service):
        service.save_github_credentials("client-id", "client-secret")
        service.save_anthropic_api_key("sk-ant-abc123")

        assert service.github_credentials().client_secret == "client-secret"
        assert SecretCipher.is_ciphertext(_stored(service).github_client_secret)
