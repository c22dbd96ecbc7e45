"""Tests for domain models and their API views."""

from datetime import UTC, date, datetime
from uuid import uuid4

from alsader.core.modules.availability.models import AvailabilityResult, AvailabilityStatus, AvailabilityView
from alsader.core.modules.document.models import Document, DocumentView, FileMetadata
from alsader.core.modules.reference.models import DocumentType
from alsader.core.modules.reservation.models import Reservation, ReservationView
from alsader.core.pagination import PaginationResult


def make_document(**overrides):
    data = {
        "document_type": DocumentType.INBOUND,
        "reference_id": 7,
        "title": "طلب صيانة",
        "subject": "صيانة",
        "sender": "وزارة الأشغال",
        "document_date": date(2025, 5, 4),
        "uploaded_by": uuid4(),
    }
    data.update(overrides)
    return Document(**data)


class TestDocument:
    def test_reference_display(self):
        assert make_document().reference == "IN-007"

    def test_is_deleted(self):
        assert not make_document().is_deleted
        assert make_document(deleted_at=datetime(2025, 5, 5, tzinfo=UTC)).is_deleted

    def test_to_mongo(self):
        """Test that the id is stored as _id and the date as an ISO string."""
        document = make_document()
        data = document.to_mongo()
        assert data["_id"] == document.id
        assert "id" not in data
        assert data["document_date"] == "2025-05-04"

    def test_round_trip_from_mongo(self):
        document = make_document()
        assert Document.model_validate(document.to_mongo()) == document


class TestDocumentView:
    def test_from_domain(self):
        file = FileMetadata(
            filename="scan.pdf", mime_type="application/pdf", size=10, content_hash="abc", storage_path="2025/05/x.pdf"
        )
        document = make_document(reference_id=12, document_type=DocumentType.OUTBOUND, file=file, is_manual_reference=True)

        view = DocumentView.from_domain(document, "ali", "علي حسن")

        assert view.id == "12"
        assert view.reference == "OUT-012"
        assert view.uploaded_by == "ali"
        assert view.uploaded_by_name == "علي حسن"
        assert view.is_manual_reference
        assert view.file is not None
        assert view.file.filename == "scan.pdf"
        assert "storage_path" not in view.model_dump()["file"]

    def test_without_file(self):
        view = DocumentView.from_domain(make_document(), "ali", "")
        assert view.file is None


class TestReservationView:
    def test_from_domain(self, mock_user):
        reservation = Reservation(document_type=DocumentType.OUTBOUND, reference_id=10, notes="عقد", reserved_by=mock_user.id)

        view = ReservationView.from_domain(reservation, mock_user.username)

        assert view.id == reservation.id
        assert view.reference_id == "10"
        assert view.reference == "OUT-010"
        assert view.reserved_by == "ali"
        assert not view.is_used
        assert view.used_document_id is None


class TestAvailability:
    def test_only_available_status_is_available(self):
        for status in AvailabilityStatus:
            result = AvailabilityResult(document_type=DocumentType.INBOUND, reference_id="5", status=status)
            assert result.available == (status == AvailabilityStatus.AVAILABLE)

    def test_view_carries_reservation(self, mock_user):
        reservation = Reservation(document_type=DocumentType.INBOUND, reference_id=5, reserved_by=mock_user.id)
        result = AvailabilityResult(
            document_type=DocumentType.INBOUND, reference_id="5", status=AvailabilityStatus.RESERVED, reservation=reservation
        )

        view = AvailabilityView.from_domain(result, ReservationView.from_domain(reservation, "ali"))

        assert not view.available
        assert view.reservation is not None
        assert view.reservation.reserved_by == "ali"


class TestPaginationResult:
    def test_has_more(self):
        page = PaginationResult[int](items=[1, 2], total=5, limit=2, offset=0)
        assert page.has_more

    def test_last_page(self):
        page = PaginationResult[int](items=[5], total=5, limit=2, offset=4)
        assert not page.has_more

    def test_map_items_keeps_page(self):
        page = PaginationResult[int](items=[1, 2], total=5, limit=2, offset=2)
        mapped = page.map_items(str)
        assert mapped.items == ["1", "2"]
        assert (mapped.total, mapped.limit, mapped.offset) == (5, 2, 2)
