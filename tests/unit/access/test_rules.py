"""Tests for document and reservation ownership rules."""

from uuid import uuid4

from alsader.core.modules.access.rules import can_act_on, owner_scope


class TestCanActOn:
    def test_owner_allowed(self, mock_user):
        assert can_act_on(mock_user, mock_user.id)

    def test_other_user_denied(self, mock_user):
        assert not can_act_on(mock_user, uuid4())

    def test_admin_allowed_on_anything(self, mock_admin):
        assert can_act_on(mock_admin, uuid4())


class TestOwnerScope:
    def test_user_limited_to_own(self, mock_user):
        assert owner_scope(mock_user) == mock_user.id

    def test_admin_unrestricted(self, mock_admin):
        assert owner_scope(mock_admin) is None
