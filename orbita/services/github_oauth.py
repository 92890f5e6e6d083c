"""
GitHub OAuth connection flow for projects

Flow:
1. authorization_url() signs the project id into the OAuth state
2. GitHub redirects back with ?code=...&state=...
3. handle_callback() verifies the state before trusting the code, exchanges
   the code for an access token and stores the token encrypted
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from urllib.parse import quote, urlencode

import httpx
import structlog

from .crypto import DecryptionError, OAuthStateSigner, SecretCipher
from .errors import GitHubNotConfiguredError, GitHubOAuthError
from .models import GitHubConfig
from .site_settings import SiteSettingsService
from .store import InMemoryRecordStore

log = structlog.get_logger()

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"
GITHUB_SCOPE = "repo"


def _default_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=10.0)


@dataclass(frozen=True)
class CallbackOutcome:
    """Where to send the browser after the OAuth callback."""
    redirect_path: str
    project_id: Optional[str] = None
    connected: bool = False


@dataclass(frozen=True)
class ConnectionTestResult:
    success: bool
    message: str


@dataclass(frozen=True)
class GitHubRepo:
    owner: str
    name: str
    full_name: str
    private: bool = False
    html_url: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class RepoListResult:
    """Repositories reachable with a project's token, or why they are not."""
    repos: List[GitHubRepo] = field(default_factory=list)
    error: Optional[str] = None
    needs_reconnect: bool = False


class GitHubOAuthService:
    """
    Connects projects to GitHub and keeps their access tokens encrypted
    """

    def __init__(
        self,
        cipher: SecretCipher,
        signer: OAuthStateSigner,
        site_settings: SiteSettingsService,
        store: InMemoryRecordStore[GitHubConfig] | None = None,
        http_client_factory: Callable[[], httpx.AsyncClient] = _default_http_client,
        redirect_uri: Optional[str] = None,
        metrics=None,
    ):
        self._cipher = cipher
        self._signer = signer
        self._site_settings = site_settings
        self._store = store if store is not None else InMemoryRecordStore("github_config")
        self._http_client_factory = http_client_factory
        self._redirect_uri = redirect_uri
        self._metrics = metrics

    def authorization_url(self, project_id: str) -> str:
        """
        Build the GitHub authorization URL for a project.

        Raises:
            GitHubNotConfiguredError: If the OAuth app credentials are not set
            ValueError: If the project id cannot be carried in the state
        """
        credentials = self._app_credentials()

        params = {
            "client_id": credentials.client_id,
            "scope": GITHUB_SCOPE,
            "state": self._signer.issue(project_id),
        }
        if self._redirect_uri:
            params["redirect_uri"] = self._redirect_uri

        self._record_state("issued")
        log.info("github.authorize_url_issued", project_id=project_id)
        return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Raises:
            GitHubNotConfiguredError: If the OAuth app credentials are not set
            GitHubOAuthError: If GitHub rejects the exchange
        """
        credentials = self._app_credentials()
        payload = {
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "code": code,
        }

        async with self._http_client_factory() as http:
            resp = await http.post(
                GITHUB_TOKEN_URL,
                json=payload,
                headers={"Accept": "application/json"},
            )

        if resp.status_code >= 400:
            raise GitHubOAuthError(f"GitHub token exchange failed: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            raise GitHubOAuthError("GitHub token exchange returned an unreadable response")
        if not isinstance(data, dict):
            raise GitHubOAuthError("GitHub token exchange returned an unexpected response")
        if data.get("error") or not data.get("access_token"):
            raise GitHubOAuthError(f"GitHub OAuth error: {data.get('error') or 'no access_token'}")

        return data["access_token"]

    async def handle_callback(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
    ) -> CallbackOutcome:
        """
        Complete the OAuth flow.

        The state is verified before the code is used; a failed verification
        never reaches GitHub.
        """
        if error:
            log.info("github.callback_denied", error=error)
            return CallbackOutcome("/projects?error=github_denied")

        if not code or not state:
            return CallbackOutcome("/projects?error=github_missing_params")

        project_id = self._signer.verify(state)
        if project_id is None:
            self._record_state("rejected")
            log.warning("github.callback_invalid_state")
            return CallbackOutcome("/projects?error=github_invalid_state")
        self._record_state("accepted")

        try:
            access_token = await self.exchange_code(code)
        except (GitHubOAuthError, GitHubNotConfiguredError, DecryptionError, httpx.HTTPError) as e:
            message = str(e) or type(e).__name__
            log.error("github.callback_failed", project_id=project_id, error=message)
            return CallbackOutcome(
                f"/projects/{project_id}/github?error={quote(message, safe='')}",
                project_id=project_id,
            )

        self._save_token(project_id, access_token)
        log.info("github.connected", project_id=project_id)
        return CallbackOutcome(
            f"/projects/{project_id}/github",
            project_id=project_id,
            connected=True,
        )

    def get_config(self, project_id: str) -> Optional[GitHubConfig]:
        return self._store.find_one(lambda c: c.project_id == project_id)

    def save_repo(self, project_id: str, owner: str, name: str, full_name: str) -> GitHubConfig:
        """
        Link a repository to a connected project.

        Raises:
            GitHubNotConfiguredError: If the project has no GitHub connection
        """
        config = self._require_config(project_id)
        updated = GitHubConfig.model_validate({
            **config.model_dump(),
            "repo_owner": owner,
            "repo_name": name,
            "repo_full_name": full_name,
        })
        self._store.put(updated)
        log.info("github.repo_linked", project_id=project_id, repo=full_name)
        return updated

    def disconnect(self, project_id: str) -> None:
        """
        Raises:
            GitHubNotConfiguredError: If the project has no GitHub connection
        """
        config = self._require_config(project_id)
        self._store.remove(config.id)
        log.info("github.disconnected", project_id=project_id)

    def access_token(self, project_id: str) -> str:
        """
        Decrypt a project's access token at the point of use.

        Raises:
            GitHubNotConfiguredError: If the project has no GitHub connection
            DecryptionError: If the stored token cannot be decrypted
        """
        config = self._require_config(project_id)
        try:
            token = self._cipher.decrypt(config.access_token)
        except DecryptionError:
            self._record_secret("decrypt", "failure")
            raise
        self._record_secret("decrypt", "success")
        return token

    async def test_connection(self, project_id: str) -> ConnectionTestResult:
        """Check that the stored token is still accepted by the GitHub API."""
        if self.get_config(project_id) is None:
            return ConnectionTestResult(False, "No GitHub configuration found")

        try:
            token = self.access_token(project_id)
            async with self._http_client_factory() as http:
                resp = await http.get(
                    f"{GITHUB_API_URL}/user",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/vnd.github+json",
                    },
                )
        except (DecryptionError, httpx.HTTPError) as e:
            log.warning("github.connection_test_error", project_id=project_id,
                        error_type=type(e).__name__)
            return ConnectionTestResult(False, "Connection test failed. Token may be invalid.")

        if resp.status_code >= 400:
            return ConnectionTestResult(
                False, f"Connection failed ({resp.status_code}). Please reconnect."
            )
        return ConnectionTestResult(True, "GitHub connection is working")

    async def list_repos(self, project_id: str) -> RepoListResult:
        """
        List the repositories the project's token can reach.

        A 401 from GitHub means the token was revoked or expired and the
        project has to go through the OAuth flow again.
        """
        if self.get_config(project_id) is None:
            return RepoListResult(error="No GitHub configuration found")

        try:
            token = self.access_token(project_id)
            async with self._http_client_factory() as http:
                resp = await http.get(
                    f"{GITHUB_API_URL}/user/repos",
                    params={
                        "per_page": 100,
                        "sort": "updated",
                        "affiliation": "owner,collaborator,organization_member",
                    },
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/vnd.github+json",
                    },
                )
        except DecryptionError:
            log.warning("github.repos_token_unreadable", project_id=project_id)
            return RepoListResult(error="Stored token could not be read", needs_reconnect=True)
        except httpx.HTTPError as e:
            log.warning("github.repos_request_failed", project_id=project_id,
                        error_type=type(e).__name__)
            return RepoListResult(error="Could not reach GitHub")

        if resp.status_code == 401:
            log.info("github.token_revoked", project_id=project_id)
            return RepoListResult(error="Token expired or revoked", needs_reconnect=True)
        if resp.status_code >= 400:
            return RepoListResult(error=f"GitHub API error: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, list):
            return RepoListResult(error="GitHub returned an unexpected response")

        repos = [
            GitHubRepo(
                owner=(item.get("owner") or {}).get("login") or item["full_name"].split("/")[0],
                name=item["name"],
                full_name=item["full_name"],
                private=bool(item.get("private", False)),
                html_url=item.get("html_url"),
                description=item.get("description"),
            )
            for item in data
            if isinstance(item, dict) and item.get("name") and item.get("full_name")
        ]
        log.debug("github.repos_listed", project_id=project_id, count=len(repos))
        return RepoListResult(repos=repos)

    def clear(self) -> None:
        self._store.clear()

    def _app_credentials(self):
        credentials = self._site_settings.github_credentials()
        if credentials is None:
            raise GitHubNotConfiguredError(
                "GitHub OAuth credentials not configured. Go to Settings to add them."
            )
        return credentials

    def _require_config(self, project_id: str) -> GitHubConfig:
        config = self.get_config(project_id)
        if config is None:
            raise GitHubNotConfiguredError("No GitHub configuration found")
        return config

    def _save_token(self, project_id: str, access_token: str) -> GitHubConfig:
        encrypted = self._cipher.encrypt(access_token)
        self._record_secret("encrypt", "success")

        existing = self.get_config(project_id)
        if existing is None:
            config = GitHubConfig(project_id=project_id, access_token=encrypted)
        else:
            # Reconnecting drops the previous repository link
            config = GitHubConfig.model_validate({
                **existing.model_dump(),
                "access_token": encrypted,
                "repo_owner": None,
                "repo_name": None,
                "repo_full_name": None,
            })
        return self._store.put(config)

    def _record_secret(self, operation: str, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_secret_operation(operation, outcome)

    def _record_state(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_oauth_state(outcome)
