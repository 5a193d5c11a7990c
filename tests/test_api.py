"""Tests for the HTTP API"""

import pytest
from fastapi.testclient import TestClient

from leasedocs.api.app import create_app

AUTH = {"Authorization": "Bearer secret-token"}


@pytest.fixture
def client(converter):
    app = create_app(converter=converter)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def contract_payload(manager_form):
    return {"form": manager_form.model_dump(mode="json"), "name": "Sunset management"}


def _create_template(client, **overrides):
    payload = {
        "name": "Standard Lease",
        "type": "lease",
        "description": "Residential lease",
        "body": "Lease for {{TENANT_NAME}} at {{PROPERTY_NAME}}",
    }
    payload.update(overrides)
    return client.post("/api/templates", json=payload, headers=AUTH)


class TestAuth:
    def test_health_is_open(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_missing_token(self, client):
        response = client.get("/api/templates")
        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    def test_unknown_token(self, client):
        response = client.get("/api/documents", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestTemplateRoutes:
    def test_create_and_list(self, client):
        response = _create_template(client)
        assert response.status_code == 201
        template = response.json()
        assert template["variables"] == ["TENANT_NAME", "PROPERTY_NAME"]

        listed = client.get("/api/templates", params={"search_text": "standard"}, headers=AUTH)
        assert [t["id"] for t in listed.json()] == [template["id"]]
        assert client.get("/api/templates", params={"type": "notice"}, headers=AUTH).json() == []

    def test_empty_body_rejected(self, client):
        assert _create_template(client, body="").status_code == 422

    def test_update_duplicate_toggle(self, client):
        template = _create_template(client).json()
        updated = client.patch(
            f"/api/templates/{template['id']}", json={"body": "Hi {{NAME}}"}, headers=AUTH
        ).json()
        assert updated["variables"] == ["NAME"]

        copy = client.post(f"/api/templates/{template['id']}/duplicate", headers=AUTH).json()
        assert copy["name"] == "Standard Lease (Copy)"

        toggled = client.post(f"/api/templates/{template['id']}/toggle", headers=AUTH).json()
        assert toggled["is_active"] is False

        stats = client.get("/api/templates/stats", headers=AUTH).json()
        assert stats["total"] == 2 and stats["active"] == 1

    def test_update_null_rejected(self, client):
        template = _create_template(client).json()
        for payload in ({"is_active": None}, {"type": None}):
            response = client.patch(f"/api/templates/{template['id']}", json=payload, headers=AUTH)
            assert response.status_code == 422
            assert response.json()["field"] == next(iter(payload))

        stored = client.get(f"/api/templates/{template['id']}", headers=AUTH).json()
        assert stored["is_active"] is True
        assert stored["type"] == "lease"

    def test_render(self, client):
        template = _create_template(client).json()
        response = client.post(
            f"/api/templates/{template['id']}/render",
            json={"values": {"TENANT_NAME": "Ada"}},
            headers=AUTH,
        )
        assert response.json()["content"] == "Lease for Ada at {{PROPERTY_NAME}}"

        strict = client.post(
            f"/api/templates/{template['id']}/render",
            json={"values": {}, "strict": True},
            headers=AUTH,
        )
        assert strict.status_code == 422
        assert strict.json()["field"] == "values"

    def test_render_inactive(self, client):
        template = _create_template(client).json()
        client.post(f"/api/templates/{template['id']}/toggle", headers=AUTH)
        response = client.post(f"/api/templates/{template['id']}/render", json={}, headers=AUTH)
        assert response.status_code == 409

    def test_missing_template(self, client):
        response = client.get("/api/templates/missing", headers=AUTH)
        assert response.status_code == 404
        assert response.json()["detail"] == "Template not found: missing"

    def test_delete(self, client):
        template = _create_template(client).json()
        assert client.delete(f"/api/templates/{template['id']}", headers=AUTH).status_code == 204
        assert client.get(f"/api/templates/{template['id']}", headers=AUTH).status_code == 404

    def test_variables(self, client):
        response = client.post(
            "/api/variables", json={"body": "{{B}} {{A}} {{B}}"}, headers=AUTH
        )
        assert response.json() == {"variables": ["B", "A"]}


class TestContractRoutes:
    def test_generate_send_and_lock(self, client, contract_payload):
        response = client.post("/api/contracts", json=contract_payload, headers=AUTH)
        assert response.status_code == 201
        document = response.json()
        assert document["status"] == "draft"
        assert document["uploaded_by"] == "owner-1"
        assert "$5000 per month" in document["metadata"]["content"]

        sent = client.post(f"/api/documents/{document['id']}/send", headers=AUTH).json()
        assert sent["status"] == "pending"
        assert sent["metadata"]["sent_by"] == "owner-1"

        edit = client.put(
            f"/api/documents/{document['id']}/content", json={"content": "<p>x</p>"}, headers=AUTH
        )
        assert edit.status_code == 409

        signed = client.post(
            f"/api/documents/{document['id']}/signing", json={"accepted": True}, headers=AUTH
        ).json()
        assert signed["status"] == "active"

    def test_invalid_form(self, client, contract_payload):
        contract_payload["form"]["compensation"] = {"kind": "percentage", "percent": "150"}
        assert client.post("/api/contracts", json=contract_payload, headers=AUTH).status_code == 422

    @pytest.mark.parametrize("compensation", [
        {"kind": "percentage", "percent": "NaN"},
        {"kind": "fixed", "amount": "sNaN"},
    ])
    def test_non_finite_compensation(self, client, contract_payload, compensation):
        contract_payload["form"]["compensation"] = compensation
        assert client.post("/api/contracts", json=contract_payload, headers=AUTH).status_code == 422
        assert client.get("/api/documents", headers=AUTH).json() == []

    def test_download_converts(self, client, converter, contract_payload):
        document = client.post("/api/contracts", json=contract_payload, headers=AUTH).json()
        response = client.get(
            f"/api/documents/{document['id']}/download", params={"format": "docx"}, headers=AUTH
        )
        assert response.status_code == 200
        assert response.content == b"docx:Sunset management"
        assert 'filename="sunset_management.docx"' in response.headers["content-disposition"]
        assert converter.calls[0][1].value == "docx"


class TestDocumentRoutes:
    def _upload(self, client, filename="lease.pdf", data=b"%PDF-1.4 original"):
        return client.post(
            "/api/documents/upload",
            files={"file": (filename, data, "application/octet-stream")},
            data={"name": "Signed lease", "type": "lease", "category": "Leases"},
            headers=AUTH,
        )

    def test_upload_and_download_original(self, client, converter):
        response = self._upload(client)
        assert response.status_code == 201
        document = response.json()
        assert document["status"] == "active"
        assert document["file_format"] == "pdf"

        download = client.get(
            f"/api/documents/{document['id']}/download", params={"format": "docx"}, headers=AUTH
        )
        assert download.content == b"%PDF-1.4 original"
        assert download.headers["content-type"] == "application/pdf"
        assert converter.calls == []

    def test_upload_rejects_type(self, client):
        response = self._upload(client, filename="photo.png")
        assert response.status_code == 422
        assert response.json()["field"] == "file"

    def test_list_share_and_stats(self, client, contract_payload):
        self._upload(client)
        draft = client.post("/api/contracts", json=contract_payload, headers=AUTH).json()

        drafts = client.get("/api/documents", params={"status": "draft"}, headers=AUTH).json()
        assert [d["id"] for d in drafts] == [draft["id"]]

        blocked = client.post(
            f"/api/documents/{draft['id']}/share", json={"user_ids": ["ten-1"]}, headers=AUTH
        )
        assert blocked.status_code == 409

        stats = client.get("/api/documents/stats", headers=AUTH).json()
        assert stats["total"] == 2
        assert stats["by_type"] == {"lease": 1, "contract": 1}

    def test_patch_and_delete(self, client):
        document = self._upload(client).json()
        patched = client.patch(
            f"/api/documents/{document['id']}", json={"description": "Countersigned"}, headers=AUTH
        ).json()
        assert patched["description"] == "Countersigned"

        assert client.delete(f"/api/documents/{document['id']}", headers=AUTH).status_code == 204
        assert client.get(f"/api/documents/{document['id']}", headers=AUTH).status_code == 404

    def test_toggle(self, client):
        document = self._upload(client).json()
        toggled = client.post(f"/api/documents/{document['id']}/toggle", headers=AUTH).json()
        assert toggled["status"] == "inactive"
