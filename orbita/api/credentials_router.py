"""
API Router for the project credential vault
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..auth.api_key import verify_api_key
from ..dependencies import get_vault
from ..services.crypto import DecryptionError
from ..services.errors import CredentialNotFoundError
from ..services.vault import CredentialVault
from .schemas import (
    CredentialIn,
    CredentialListResponse,
    CredentialOut,
    CredentialUpdate,
    RevealedPassword,
)

router = APIRouter(prefix="/v1", tags=["credentials"], dependencies=[Depends(verify_api_key)])


@router.post(
    "/projects/{project_id}/credentials",
    response_model=CredentialOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create credential",
)
async def create_credential(
    project_id: str,
    body: CredentialIn,
    vault: CredentialVault = Depends(get_vault),
) -> CredentialOut:
    """
    Store a credential; the password is encrypted before it is persisted.
    """
    try:
        credential = vault.create(project_id, **body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return CredentialOut.from_record(credential)


@router.get(
    "/projects/{project_id}/credentials",
    response_model=CredentialListResponse,
    summary="List credentials",
)
async def list_credentials(
    project_id: str,
    vault: CredentialVault = Depends(get_vault),
) -> CredentialListResponse:
    credentials = [CredentialOut.from_record(c) for c in vault.list(project_id)]
    return CredentialListResponse(total=len(credentials), credentials=credentials)


@router.put(
    "/projects/{project_id}/credentials/{credential_id}",
    response_model=CredentialOut,
    summary="Update credential",
)
async def update_credential(
    project_id: str,
    credential_id: str,
    body: CredentialUpdate,
    vault: CredentialVault = Depends(get_vault),
) -> CredentialOut:
    """
    Update a credential.

    - **keep_password**: leave the stored password untouched
    """
    try:
        credential = vault.update(credential_id, project_id, **body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CredentialNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Credential not found")
    return CredentialOut.from_record(credential)


@router.delete(
    "/projects/{project_id}/credentials/{credential_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete credential",
)
async def delete_credential(
    project_id: str,
    credential_id: str,
    vault: CredentialVault = Depends(get_vault),
) -> None:
    try:
        vault.delete(credential_id, project_id)
    except CredentialNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Credential not found")


@router.post(
    "/credentials/{credential_id}/reveal",
    response_model=RevealedPassword,
    summary="Reveal password",
    description="Decrypt and return a credential's password",
)
async def reveal_password(
    credential_id: str,
    vault: CredentialVault = Depends(get_vault),
) -> RevealedPassword:
    try:
        return RevealedPassword(password=vault.reveal_password(credential_id))
    except CredentialNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No password found")
    except DecryptionError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error decrypting password",
        )
