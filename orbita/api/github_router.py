"""
API Router for the GitHub OAuth connection flow
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from ..auth.api_key import verify_api_key
from ..dependencies import get_github_oauth
from ..services.errors import GitHubNotConfiguredError
from ..services.github_oauth import GitHubOAuthService
from .schemas import (
    ActionResult,
    AuthorizeUrlOut,
    GitHubConfigOut,
    GitHubRepoIn,
    GitHubRepoListOut,
    GitHubRepoOut,
)

router = APIRouter(prefix="/v1/projects/{project_id}/github", tags=["github"],
                   dependencies=[Depends(verify_api_key)])

# GitHub redirects the browser here, so no API key is expected
callback_router = APIRouter(tags=["github"])


@router.get("/authorize", response_model=AuthorizeUrlOut, summary="GitHub authorization URL")
async def authorize_url(
    project_id: str,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> AuthorizeUrlOut:
    try:
        url = service.authorization_url(project_id)
    except GitHubNotConfiguredError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AuthorizeUrlOut(authorize_url=url)


@router.get("", response_model=GitHubConfigOut)
async def get_config(
    project_id: str,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> GitHubConfigOut:
    config = service.get_config(project_id)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No GitHub configuration found")
    return GitHubConfigOut.from_record(config)


@router.get("/repos", response_model=GitHubRepoListOut, summary="List reachable repositories")
async def list_repos(
    project_id: str,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> GitHubRepoListOut:
    """
    Repositories the stored token can reach.

    - **needs_reconnect**: the token was revoked or expired
    """
    if service.get_config(project_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No GitHub configuration found")
    result = await service.list_repos(project_id)
    return GitHubRepoListOut(
        repos=[GitHubRepoOut(**vars(repo)) for repo in result.repos],
        error=result.error,
        needs_reconnect=result.needs_reconnect,
    )


@router.put("/repo", response_model=GitHubConfigOut)
async def save_repo(
    project_id: str,
    body: GitHubRepoIn,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> GitHubConfigOut:
    try:
        config = service.save_repo(project_id, body.owner, body.name, body.full_name)
    except GitHubNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No GitHub configuration found")
    return GitHubConfigOut.from_record(config)


@router.delete("", response_model=ActionResult)
async def disconnect(
    project_id: str,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> ActionResult:
    try:
        service.disconnect(project_id)
    except GitHubNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No GitHub configuration found")
    return ActionResult(success=True, message="GitHub disconnected")


@router.post("/test", response_model=ActionResult)
async def test_connection(
    project_id: str,
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> ActionResult:
    result = await service.test_connection(project_id)
    return ActionResult(success=result.success, message=result.message)


@callback_router.get("/github/callback", include_in_schema=False)
async def oauth_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    service: GitHubOAuthService = Depends(get_github_oauth),
) -> RedirectResponse:
    outcome = await service.handle_callback(code, state, error)
    return RedirectResponse(outcome.redirect_path, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
