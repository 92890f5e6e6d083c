"""Credential vault: per-project credentials with encrypted passwords."""
from datetime import datetime
from typing import List, Optional

import structlog

from .crypto import DecryptionError, SecretCipher
from .errors import CredentialNotFoundError
from .models import Credential, CredentialCategory
from .store import InMemoryRecordStore

log = structlog.get_logger()


def _clean(value: Optional[str]) -> Optional[str]:
    """Trim optional text fields; blank values are stored as None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class CredentialVault:
    """
    Stores project credentials, encrypting passwords on the way in and
    decrypting them only when a caller explicitly asks to reveal one.
    """

    def __init__(
        self,
        cipher: SecretCipher,
        store: InMemoryRecordStore[Credential] | None = None,
        metrics=None,
    ):
        self._cipher = cipher
        self._store = store if store is not None else InMemoryRecordStore("credential")
        self._metrics = metrics

    def create(
        self,
        project_id: str,
        label: str,
        category: CredentialCategory = "other",
        username: Optional[str] = None,
        password: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Credential:
        """
        Create a credential.

        Raises:
            ValueError: If the label is blank
        """
        label = _clean(label)
        if not label:
            raise ValueError("Label is required")

        credential = Credential(
            project_id=project_id,
            label=label,
            category=category or "other",
            username=_clean(username),
            password=self._encrypt(password) if password else None,
            url=_clean(url),
            notes=_clean(notes),
        )
        self._store.put(credential)
        log.info("credential.created", credential_id=credential.id, project_id=project_id)
        return credential

    def update(
        self,
        credential_id: str,
        project_id: str,
        label: str,
        category: CredentialCategory = "other",
        username: Optional[str] = None,
        password: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        keep_password: bool = False,
    ) -> Credential:
        """
        Update a credential.

        The stored password is replaced unless keep_password is set; an empty
        password with keep_password unset clears it.

        Raises:
            ValueError: If the label is blank
            CredentialNotFoundError: If the credential does not exist in the project
        """
        label = _clean(label)
        if not label:
            raise ValueError("Label is required")

        existing = self._get_in_project(credential_id, project_id)

        changes = {
            "label": label,
            "category": category or "other",
            "username": _clean(username),
            "url": _clean(url),
            "notes": _clean(notes),
            "updated_at": datetime.utcnow(),
        }
        if not keep_password:
            changes["password"] = self._encrypt(password) if password else None

        updated = Credential.model_validate({**existing.model_dump(), **changes})
        self._store.put(updated)
        log.info(
            "credential.updated",
            credential_id=credential_id,
            password_changed=not keep_password,
        )
        return updated

    def delete(self, credential_id: str, project_id: str) -> None:
        """
        Raises:
            CredentialNotFoundError: If the credential does not exist in the project
        """
        self._get_in_project(credential_id, project_id)
        self._store.remove(credential_id)
        log.info("credential.deleted", credential_id=credential_id, project_id=project_id)

    def get(self, credential_id: str) -> Optional[Credential]:
        return self._store.get(credential_id)

    def list(self, project_id: str) -> List[Credential]:
        """List a project's credentials, oldest first."""
        credentials = self._store.find(lambda c: c.project_id == project_id)
        return sorted(credentials, key=lambda c: c.created_at)

    def reveal_password(self, credential_id: str) -> str:
        """
        Decrypt a credential's password.

        Raises:
            CredentialNotFoundError: If there is no credential or no password
            DecryptionError: If the stored ciphertext is corrupt or was
                encrypted under another key
        """
        credential = self._store.get(credential_id)
        if credential is None or credential.password is None:
            raise CredentialNotFoundError("No password found")

        try:
            password = self._cipher.decrypt(credential.password)
        except DecryptionError as e:
            self._record("decrypt", "failure")
            log.error(
                "credential.decrypt_failed",
                credential_id=credential_id,
                error_type=type(e).__name__,
            )
            raise

        self._record("decrypt", "success")
        log.info("credential.revealed", credential_id=credential_id)
        return password

    def clear(self) -> None:
        self._store.clear()

    def _get_in_project(self, credential_id: str, project_id: str) -> Credential:
        credential = self._store.get(credential_id)
        if credential is None or credential.project_id != project_id:
            raise CredentialNotFoundError(f"Credential {credential_id} not found")
        return credential

    def _encrypt(self, plaintext: str) -> str:
        ciphertext = self._cipher.encrypt(plaintext)
        self._record("encrypt", "success")
        return ciphertext

    def _record(self, operation: str, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_secret_operation(operation, outcome)
