"""
API Router for site-wide provider secrets
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.api_key import verify_api_key
from ..dependencies import get_site_settings
from ..services.errors import SettingsValidationError
from ..services.site_settings import SiteSettingsService
from .schemas import (
    ActionResult,
    AnthropicKeyIn,
    EmailConfigIn,
    GitHubCredentialsIn,
    SettingsStatusOut,
)

router = APIRouter(prefix="/v1/settings", tags=["settings"], dependencies=[Depends(verify_api_key)])


def _bad_request(e: SettingsValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("", response_model=SettingsStatusOut, summary="Which secrets are configured")
async def get_status(
    service: SiteSettingsService = Depends(get_site_settings),
) -> SettingsStatusOut:
    return SettingsStatusOut(**asdict(service.status()))


@router.put("/anthropic-key", response_model=ActionResult)
async def save_anthropic_key(
    body: AnthropicKeyIn,
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    try:
        service.save_anthropic_api_key(body.api_key)
    except SettingsValidationError as e:
        raise _bad_request(e)
    return ActionResult(success=True)


@router.delete("/anthropic-key", response_model=ActionResult)
async def delete_anthropic_key(
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    service.delete_anthropic_api_key()
    return ActionResult(success=True)


@router.put("/github", response_model=ActionResult)
async def save_github_credentials(
    body: GitHubCredentialsIn,
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    try:
        service.save_github_credentials(body.client_id, body.client_secret)
    except SettingsValidationError as e:
        raise _bad_request(e)
    return ActionResult(success=True)


@router.delete("/github", response_model=ActionResult)
async def delete_github_credentials(
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    service.delete_github_credentials()
    return ActionResult(success=True)


@router.put("/email", response_model=ActionResult)
async def save_email_config(
    body: EmailConfigIn,
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    try:
        service.save_email_config(body.provider, body.api_key, body.email, body.password)
    except SettingsValidationError as e:
        raise _bad_request(e)
    return ActionResult(success=True, message="Email configuration saved successfully")


@router.delete("/email", response_model=ActionResult)
async def delete_email_config(
    service: SiteSettingsService = Depends(get_site_settings),
) -> ActionResult:
    service.delete_email_config()
    return ActionResult(success=True)
