"""
Records persisted by the Orbita secrets service

Secret fields always hold ciphertext in iv:tag:data hex form; plaintext only
exists for the duration of a single service call.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field

from .crypto import SecretCipher


CredentialCategory = Literal[
    "hosting", "cms", "ftp", "email", "database", "social", "api", "other"
]


class EmailProvider(str, Enum):
    RESEND = "RESEND"
    GMAIL = "GMAIL"
    ICLOUD = "ICLOUD"

    @property
    def uses_imap(self) -> bool:
        return self is not EmailProvider.RESEND


def _new_id() -> str:
    return uuid.uuid4().hex


def _require_ciphertext(value: Optional[str]) -> Optional[str]:
    if value is not None and not SecretCipher.is_ciphertext(value):
        raise ValueError("Secret fields must hold ciphertext")
    return value


# Refuses plaintext where ciphertext is expected
EncryptedStr = Annotated[Optional[str], AfterValidator(_require_ciphertext)]


class Credential(BaseModel):
    """
    Project credential (hosting, CMS, FTP, ...) with an encrypted password
    """
    id: str = Field(default_factory=_new_id)
    project_id: str
    label: str = Field(..., min_length=1)
    category: CredentialCategory = "other"
    username: Optional[str] = None
    password: EncryptedStr = None
    url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def has_password(self) -> bool:
        return self.password is not None


class SiteSettings(BaseModel):
    """
    Singleton settings record holding provider secrets
    """
    id: str = "default"
    anthropic_api_key: EncryptedStr = None
    github_client_id: EncryptedStr = None
    github_client_secret: EncryptedStr = None
    email_provider: Optional[EmailProvider] = None
    resend_api_key: EncryptedStr = None
    imap_email: EncryptedStr = None
    imap_password: EncryptedStr = None


class GitHubConfig(BaseModel):
    """
    Per-project GitHub connection; the access token is encrypted
    """
    id: str = Field(default_factory=_new_id)
    project_id: str
    access_token: EncryptedStr
    repo_owner: Optional[str] = None
    repo_name: Optional[str] = None
    repo_full_name: Optional[str] = None
