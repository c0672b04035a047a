"""Tests for the expired-session cleanup job."""

import pytest
from unittest.mock import AsyncMock
from pymongo.errors import AutoReconnect

from jobs.session_cleanup import SessionCleanupJob
from schoolflow.models.roles import Role
from schoolflow.models.session import SessionRecord, now_ms


@pytest.mark.asyncio
async def test_removes_only_expired_rows(fake_db):
    now = now_ms()
    for token_hash, expires_at in [("live", now + 60_000), ("old", now - 1), ("older", now - 60_000)]:
        fake_db["sessions"].docs.append(SessionRecord(
            tokenHash=token_hash,
            userId="u1",
            email="u1@example.test",
            role=Role.TEACHER,
            schoolId="SCH-001",
            expiresAt=expires_at,
        ).to_document())

    results = await SessionCleanupJob(fake_db).run()

    assert results["sessionsDeleted"] == 2
    assert results["errors"] == []
    assert [d["tokenHash"] for d in fake_db["sessions"].docs] == ["live"]


@pytest.mark.asyncio
async def test_store_errors_are_reported(mock_db, mock_collection):
    mock_collection.delete_many = AsyncMock(side_effect=AutoReconnect("primary stepped down"))

    results = await SessionCleanupJob(mock_db).run()

    assert results["sessionsDeleted"] == 0
    assert results["errors"] == ["primary stepped down"]
