"""Tests for request parsing in the HTTP routers, with the application facade faked."""

from datetime import UTC, date, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from alsader.core.modules.admin.models import ResetDocumentsResult
from alsader.core.modules.availability.models import AvailabilityStatus, AvailabilityView
from alsader.core.modules.counter.models import SequenceView
from alsader.core.modules.document.models import DocumentView
from alsader.core.modules.reference.models import DocumentType
from alsader.errors import UserError
from alsader.web.error_handlers import user_error_handler
from alsader.web.routers import admin_router, documents_router, references_router
from alsader.web.server import bind_request_id

TOKEN = "good-token"


class FakeApp:
    """Records the arguments the routers hand to the application."""

    def __init__(self):
        self.calls = []

    async def is_auth_token_valid(self, auth_token):
        return auth_token == TOKEN

    async def create_document(self, auth_token, document_type, fields, manual_reference_id, upload):
        self.calls.append(("create_document", document_type, fields, manual_reference_id, upload))
        return DocumentView(
            id=manual_reference_id or "1",
            reference="IN-001",
            document_type=document_type,
            title=fields.title,
            subject=fields.subject,
            sender=fields.sender,
            document_date=fields.document_date,
            uploaded_by="ali",
            uploaded_by_name="علي حسن",
            is_manual_reference=manual_reference_id is not None,
            created_at=datetime(2025, 5, 4, tzinfo=UTC),
        )

    async def check_availability(self, auth_token, document_type, reference_id):
        self.calls.append(("check_availability", document_type, reference_id))
        return AvailabilityView(
            document_type=document_type, reference_id=reference_id, status=AvailabilityStatus.AVAILABLE, available=True
        )

    async def reset_documents(self, auth_token, document_types, archive):
        self.calls.append(("reset_documents", document_types, archive))
        return ResetDocumentsResult(
            archived=archive,
            documents_removed={document_type: 0 for document_type in document_types},
            reservations_removed={document_type: 0 for document_type in document_types},
            sequences=[SequenceView(document_type=document_type, last_value=0, next_value=1) for document_type in document_types],
        )


@pytest.fixture
def fake_app():
    return FakeApp()


@pytest.fixture
def client(fake_app):
    app = FastAPI()
    app.state.app = fake_app
    app.include_router(admin_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(references_router, prefix="/api/v1")
    app.add_exception_handler(UserError, user_error_handler)
    return TestClient(app)


FORM = {
    "document_type": "inbound",
    "title": "طلب صيانة",
    "subject": "صيانة المبنى",
    "sender": "وزارة الأشغال",
    "document_date": "2025-05-04",
}


def auth_headers():
    return {"Authorization": f"Bearer {TOKEN}"}


class TestAuth:
    def test_missing_token(self, client):
        response = client.get("/api/v1/availability", params={"type": "inbound", "ref": "5"})
        assert response.status_code == 401
        assert response.json()["type"] == "authentication_error"

    def test_wrong_token(self, client):
        response = client.get(
            "/api/v1/availability", params={"type": "inbound", "ref": "5"}, headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    def test_cookie_token(self, client):
        client.cookies.set("auth_token", TOKEN)
        response = client.get("/api/v1/availability", params={"type": "inbound", "ref": "5"})
        assert response.status_code == 200


class TestAvailability:
    def test_query_aliases(self, client, fake_app):
        response = client.get("/api/v1/availability", params={"type": "outbound", "ref": "007"}, headers=auth_headers())

        assert response.status_code == 200
        assert fake_app.calls == [("check_availability", DocumentType.OUTBOUND, "007")]
        assert response.json()["available"] is True

    def test_unknown_type_rejected(self, client):
        response = client.get("/api/v1/availability", params={"type": "internal", "ref": "5"}, headers=auth_headers())
        assert response.status_code == 422


class TestCreateDocument:
    def test_automatic_reference(self, client, fake_app):
        response = client.post("/api/v1/documents", data=FORM, headers=auth_headers())

        assert response.status_code == 201
        _, document_type, fields, manual_reference_id, upload = fake_app.calls[0]
        assert document_type == DocumentType.INBOUND
        assert fields.document_date == date(2025, 5, 4)
        assert manual_reference_id is None
        assert upload is None

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_manual_reference_is_automatic(self, client, fake_app, blank):
        client.post("/api/v1/documents", data={**FORM, "reference_id": blank}, headers=auth_headers())
        assert fake_app.calls[0][3] is None

    def test_manual_reference_passed_raw(self, client, fake_app):
        response = client.post("/api/v1/documents", data={**FORM, "reference_id": "010"}, headers=auth_headers())

        assert response.status_code == 201
        assert fake_app.calls[0][3] == "010"
        assert response.json()["is_manual_reference"] is True

    def test_file_upload(self, client, fake_app):
        files = {"file": ("scan.pdf", b"%PDF-1.4 test", "application/pdf")}
        response = client.post("/api/v1/documents", data=FORM, files=files, headers=auth_headers())

        assert response.status_code == 201
        upload = fake_app.calls[0][4]
        assert upload.filename == "scan.pdf"
        assert upload.mime_type == "application/pdf"
        assert upload.content == b"%PDF-1.4 test"

    def test_missing_title_rejected(self, client, fake_app):
        form = {key: value for key, value in FORM.items() if key != "title"}
        response = client.post("/api/v1/documents", data=form, headers=auth_headers())

        assert response.status_code == 422
        assert fake_app.calls == []

    def test_bad_date_rejected(self, client, fake_app):
        response = client.post("/api/v1/documents", data={**FORM, "document_date": "04/05/2025"}, headers=auth_headers())
        assert response.status_code == 422
        assert fake_app.calls == []


class TestResetDocuments:
    def test_defaults_archive_all_types(self, client, fake_app):
        response = client.post("/api/v1/admin/documents/reset", json={}, headers=auth_headers())

        assert response.status_code == 200
        assert fake_app.calls == [("reset_documents", list(DocumentType), True)]
        assert response.json()["archived"] is True

    def test_purge_one_type(self, client, fake_app):
        response = client.post(
            "/api/v1/admin/documents/reset",
            json={"document_types": ["outbound"], "archive": False},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert fake_app.calls == [("reset_documents", [DocumentType.OUTBOUND], False)]
        assert response.json()["documents_removed"] == {"outbound": 0}


class TestRequestId:
    def test_generated_and_echoed(self):
        app = FastAPI()
        app.middleware("http")(bind_request_id)

        @app.get("/ping")
        async def ping() -> dict[str, str]:
            return {"status": "ok"}

        client = TestClient(app)
        assert client.get("/ping").headers["X-Request-ID"]
        assert client.get("/ping", headers={"X-Request-ID": "abc123"}).headers["X-Request-ID"] == "abc123"
