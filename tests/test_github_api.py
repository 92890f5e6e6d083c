"""
API endpoint tests for the GitHub OAuth connect flow
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from fastapi.testclient import TestClient

from orbita.dependencies import (
    get_cipher,
    get_github_oauth,
    get_site_settings,
    get_state_signer,
)
from orbita.main import app
from orbita.services.github_oauth import GitHubOAuthService


def _github_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/login/oauth/access_token":
        return httpx.Response(200, json={"access_token": "gho_api_token"})
    if request.url.path == "/user/repos":
        return httpx.Response(200, json=[
            {"name": "hello", "full_name": "octocat/hello", "owner": {"login": "octocat"}},
        ])
    if request.url.path == "/user":
        return httpx.Response(200, json={"login": "octocat"})
    return httpx.Response(404)


@pytest.fixture
def github_service():
    get_site_settings().save_github_credentials("client-123", "secret-456")
    return GitHubOAuthService(
        get_cipher(),
        get_state_signer(),
        get_site_settings(),
        http_client_factory=lambda: httpx.AsyncClient(
            transport=httpx.MockTransport(_github_handler)
        ),
    )


@pytest.fixture
def client(github_service):
    app.dependency_overrides[get_github_oauth] = lambda: github_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _state_for(client, project_id):
    response = client.get(f"/v1/projects/{project_id}/github/authorize")
    assert response.status_code == 200
    return parse_qs(urlparse(response.json()["authorize_url"]).query)["state"][0]


def test_authorize_url(client):
    state = _state_for(client, "proj-1")
    assert get_state_signer().verify(state) == "proj-1"


def test_authorize_without_app_credentials():
    get_site_settings().delete_github_credentials()
    client = TestClient(app)

    response = client.get("/v1/projects/proj-1/github/authorize")

    assert response.status_code == 409


def test_callback_connects_project(client, github_service):
    state = _state_for(client, "proj-1")

    response = client.get(
        "/github/callback",
        params={"code": "code-abc", "state": state},
        follow_redirects=False,
    )

    assert response.status_code == 307
    assert response.headers["location"] == "/projects/proj-1/github"
    assert github_service.access_token("proj-1") == "gho_api_token"

    config = client.get("/v1/projects/proj-1/github").json()
    assert "access_token" not in config
    assert config["project_id"] == "proj-1"


def test_callback_rejects_forged_state(client):
    response = client.get(
        "/github/callback",
        params={"code": "code-abc", "state": "proj-1:1760000000000:deadbeef"},
        follow_redirects=False,
    )

    assert response.status_code == 307
    assert response.headers["location"] == "/projects?error=github_invalid_state"
    assert client.get("/v1/projects/proj-1/github").status_code == 404


def test_callback_denied(client):
    response = client.get("/github/callback", params={"error": "access_denied"},
                          follow_redirects=False)
    assert response.headers["location"] == "/projects?error=github_denied"


def test_repo_link_test_and_disconnect(client):
    state = _state_for(client, "proj-1")
    client.get("/github/callback", params={"code": "c", "state": state}, follow_redirects=False)

    response = client.put(
        "/v1/projects/proj-1/github/repo",
        json={"owner": "octocat", "name": "hello", "full_name": "octocat/hello"},
    )
    assert response.status_code == 200
    assert response.json()["repo_full_name"] == "octocat/hello"

    response = client.post("/v1/projects/proj-1/github/test")
    assert response.json() == {"success": True, "message": "GitHub connection is working"}

    response = client.delete("/v1/projects/proj-1/github")
    assert response.json()["success"] is True
    assert client.get("/v1/projects/proj-1/github").status_code == 404


def test_list_repos(client):
    state = _state_for(client, "proj-1")
    client.get("/github/callback", params={"code": "c", "state": state}, follow_redirects=False)

    response = client.get("/v1/projects/proj-1/github/repos")

    assert response.status_code == 200
    data = response.json()
    assert data["needs_reconnect"] is False
    assert data["error"] is None
    assert data["repos"] == [{
        "owner": "octocat",
        "name": "hello",
        "full_name": "octocat/hello",
        "private": False,
        "html_url": None,
        "description": None,
    }]


def test_list_repos_without_connection(client):
    response = client.get("/v1/projects/proj-1/github/repos")
    assert response.status_code == 404
