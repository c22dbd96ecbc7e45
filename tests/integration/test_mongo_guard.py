"""Tests for the server check that decides between skipping and failing integration tests."""

import pytest

UNREACHABLE_URL = "mongodb://127.0.0.1:1/alsader_test"


class TestMongoGuard:
    async def test_fails_when_server_configured(self, mongo_guard, monkeypatch):
        """An explicitly configured server that does not answer fails the run."""
        monkeypatch.setenv("ALSADER_TEST_DATABASE_URL", UNREACHABLE_URL)
        with pytest.raises(pytest.fail.Exception, match="not reachable"):
            await mongo_guard(UNREACHABLE_URL)

    async def test_skips_without_configuration(self, mongo_guard, monkeypatch):
        monkeypatch.delenv("ALSADER_TEST_DATABASE_URL", raising=False)
        with pytest.raises(pytest.skip.Exception):
            await mongo_guard(UNREACHABLE_URL)
