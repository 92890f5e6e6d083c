"""
API endpoint tests for the credential vault
"""

import pytest
from fastapi.testclient import TestClient

from orbita.dependencies import get_vault
from orbita.main import app
from orbita.services.crypto import SecretCipher


@pytest.fixture
def client():
    """Create test client"""
    return TestClient(app)


def _create(client, project_id="proj-1", **fields):
    body = {"label": "Hosting", "category": "hosting", "username": "admin",
            "password": "hunter2"}
    body.update(fields)
    return client.post(f"/v1/projects/{project_id}/credentials", json=body)


class TestCredentialsAPI:

    def test_create_hides_password(self, client):
        response = _create(client)

        assert response.status_code == 201
        data = response.json()
        assert data["label"] == "Hosting"
        assert data["has_password"] is True
        assert "password" not in data
        assert "hunter2" not in response.text

    def test_stored_as_ciphertext(self, client):
        credential_id = _create(client).json()["id"]

        stored = get_vault().get(credential_id)
        assert SecretCipher.is_ciphertext(stored.password)

    def test_reveal(self, client):
        credential_id = _create(client).json()["id"]

        response = client.post(f"/v1/credentials/{credential_id}/reveal")

        assert response.status_code == 200
        assert response.json() == {"password": "hunter2"}

    def test_reveal_without_password(self, client):
        credential_id = _create(client, password=None).json()["id"]

        response = client.post(f"/v1/credentials/{credential_id}/reveal")

        assert response.status_code == 404
        assert response.json()["detail"] == "No password found"

    def test_reveal_corrupted_ciphertext_is_generic(self, client):
        credential_id = _create(client).json()["id"]
        vault = get_vault()
        record = vault.get(credential_id)
        iv_hex, tag_hex, data_hex = record.password.split(":")
        tag_hex = ("0" if tag_hex[0] != "0" else "1") + tag_hex[1:]
        vault._store.put(record.model_copy(update={"password": f"{iv_hex}:{tag_hex}:{data_hex}"}))

        response = client.post(f"/v1/credentials/{credential_id}/reveal")

        assert response.status_code == 500
        assert response.json()["detail"] == "Error decrypting password"

    def test_blank_label_rejected(self, client):
        response = _create(client, label="  ")

        assert response.status_code == 400
        assert response.json()["detail"] == "Label is required"

    def test_unknown_category_rejected(self, client):
        assert _create(client, category="crypto-wallet").status_code == 422

    def test_list(self, client):
        _create(client, label="A")
        _create(client, label="B")
        _create(client, project_id="proj-2", label="C")

        data = client.get("/v1/projects/proj-1/credentials").json()

        assert data["total"] == 2
        assert [c["label"] for c in data["credentials"]] == ["A", "B"]

    def test_update_keep_password(self, client):
        credential_id = _create(client).json()["id"]

        response = client.put(
            f"/v1/projects/proj-1/credentials/{credential_id}",
            json={"label": "Hosting (prod)", "category": "hosting", "keep_password": True},
        )

        assert response.status_code == 200
        assert response.json()["has_password"] is True
        reveal = client.post(f"/v1/credentials/{credential_id}/reveal")
        assert reveal.json()["password"] == "hunter2"

    def test_update_unknown(self, client):
        response = client.put("/v1/projects/proj-1/credentials/missing",
                              json={"label": "x"})
        assert response.status_code == 404

    def test_delete(self, client):
        credential_id = _create(client).json()["id"]

        response = client.delete(f"/v1/projects/proj-1/credentials/{credential_id}")
        assert response.status_code == 204

        response = client.delete(f"/v1/projects/proj-1/credentials/{credential_id}")
        assert response.status_code == 404
