"""Shared pytest fixtures."""

from datetime import date
from uuid import UUID

import pytest

from alsader.core.modules.document.models import DocumentFields
from alsader.core.modules.user.models import User, UserRole


@pytest.fixture
def mock_user():
    """Create a regular user for testing."""
    return User(
        id=UUID("87654321-4321-8765-4321-876543218765"),
        username="ali",
        full_name="علي حسن",
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def mock_admin():
    """Create an admin user for testing."""
    return User(
        id=UUID("12345678-1234-5678-1234-567812345678"),
        username="admin",
        full_name="مدير النظام",
        role=UserRole.ADMIN,
        password_hash="$2b$12$hashed_password_here",
    )


@pytest.fixture
def document_fields():
    """Descriptive fields for a new document."""
    return DocumentFields(
        title="طلب صيانة",
        subject="صيانة المبنى الرئيسي",
        sender="وزارة الأشغال",
        document_date=date(2025, 5, 4),
    )
