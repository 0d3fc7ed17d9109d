"""Unit tests for SessionSweepJob (purging expired sessions)."""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock

from jobs.session_sweep import SessionSweepJob


class TestSessionSweepJob:
    @pytest.mark.asyncio
    async def test_deletes_only_expired_sessions(
        self, session_manager, auth_repository, user_repository, make_user, fake_clock,
    ):
        user = make_user()
        await user_repository.create(user)
        old = await session_manager.authorize(user, "windows-chrome")
        fake_clock.advance(hours=20)
        fresh = await session_manager.authorize(user, "ios-safari")
        fake_clock.advance(hours=5)

        results = await SessionSweepJob(auth_repository, clock=fake_clock).run()

        assert results["sessionsFound"] == 1
        assert results["sessionsDeleted"] == 1
        assert results["errors"] == []
        assert await auth_repository.get_by_id(old.session.id) is None
        assert await auth_repository.get_by_id(fresh.session.id) is not None

    @pytest.mark.asyncio
    async def test_revoked_sessions_wait_for_expiry(
        self, session_manager, auth_repository, user_repository, make_user, fake_clock,
    ):
        user = make_user()
        await user_repository.create(user)
        issued = await session_manager.authorize(user, "windows-chrome")
        await session_manager.revoke(issued.session.id)

        results = await SessionSweepJob(auth_repository, clock=fake_clock).run()

        assert results["sessionsDeleted"] == 0
        assert await auth_repository.get_by_id(issued.session.id) is not None

    @pytest.mark.asyncio
    async def test_retention_window(
        self, session_manager, auth_repository, user_repository, make_user, fake_clock,
    ):
        user = make_user()
        await user_repository.create(user)
        issued = await session_manager.authorize(user, "windows-chrome")
        fake_clock.advance(hours=30)

        job = SessionSweepJob(auth_repository, retention=timedelta(days=7), clock=fake_clock)
        results = await job.run()

        assert results["sessionsDeleted"] == 0
        assert await auth_repository.get_by_id(issued.session.id) is not None

    @pytest.mark.asyncio
    async def test_delete_failures_are_collected(
        self, session_manager, auth_repository, user_repository, make_user, fake_clock,
    ):
        user = make_user()
        await user_repository.create(user)
        await session_manager.authorize(user, "windows-chrome")
        await session_manager.authorize(user, "ios-safari")
        fake_clock.advance(hours=25)
        auth_repository.delete_item = AsyncMock(side_effect=[RuntimeError("timeout"), None])

        results = await SessionSweepJob(auth_repository, clock=fake_clock).run()

        assert results["sessionsFound"] == 2
        assert results["sessionsDeleted"] == 1
        assert len(results["errors"]) == 1
        assert "timeout" in results["errors"][0]

    @pytest.mark.asyncio
    async def test_listing_failure_reported(self, fake_clock):
        auth_repository = AsyncMock()
        auth_repository.list_expired.side_effect = RuntimeError("unreachable")

        results = await SessionSweepJob(auth_repository, clock=fake_clock).run()

        assert results["sessionsFound"] == 0
        assert results["errors"] == ["Job failed: unreachable"]
