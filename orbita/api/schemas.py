from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from ..services.models import Credential, CredentialCategory, EmailProvider, GitHubConfig


class CredentialIn(BaseModel):
    label: str
    category: CredentialCategory = "other"
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None


class CredentialUpdate(CredentialIn):
    keep_password: bool = False


class CredentialOut(BaseModel):
    """Credential as shown in listings; the password never leaves the vault here."""
    id: str
    project_id: str
    label: str
    category: CredentialCategory
    username: Optional[str] = None
    has_password: bool
    url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, credential: Credential) -> "CredentialOut":
        return cls(
            has_password=credential.has_password,
            **credential.model_dump(exclude={"password"}),
        )


class CredentialListResponse(BaseModel):
    total: int
    credentials: List[CredentialOut]


class RevealedPassword(BaseModel):
    password: str


class SettingsStatusOut(BaseModel):
    has_api_key: bool
    has_github_credentials: bool
    has_email_config: bool
    email_provider: Optional[str] = None


class AnthropicKeyIn(BaseModel):
    api_key: str


class GitHubCredentialsIn(BaseModel):
    client_id: str
    client_secret: str


class EmailConfigIn(BaseModel):
    provider: EmailProvider
    api_key: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class ActionResult(BaseModel):
    success: bool
    message: Optional[str] = None


class AuthorizeUrlOut(BaseModel):
    authorize_url: str


class GitHubConfigOut(BaseModel):
    """GitHub connection without its access token."""
    id: str
    project_id: str
    repo_owner: Optional[str] = None
    repo_name: Optional[str] = None
    repo_full_name: Optional[str] = None

    @classmethod
    def from_record(cls, config: GitHubConfig) -> "GitHubConfigOut":
        return cls(**config.model_dump(exclude={"access_token"}))


class GitHubRepoIn(BaseModel):
    owner: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1)


class GitHubRepoOut(BaseModel):
    owner: str
    name: str
    full_name: str
    private: bool = False
    html_url: Optional[str] = None
    description: Optional[str] = None


class GitHubRepoListOut(BaseModel):
    """Repositories reachable with the project's token."""
    repos: List[GitHubRepoOut] = []
    error: Optional[str] = None
    needs_reconnect: bool = False
