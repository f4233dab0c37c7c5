"""Tests for the guarded settlement pass."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.am_common.errors import SettlementAlreadyRunningError
from src.am_settlement.application import scheduler
from src.am_settlement.domain.models import SettlementResult


def _redis(set_result):
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=set_result)
    redis.eval = AsyncMock(return_value=1)
    return redis


async def test_pass_runs_job_under_lock() -> None:
    job = MagicMock()
    job.process_expired_auctions = AsyncMock(return_value=[SettlementResult(auction_id="a")])
    redis = _redis(True)

    with patch.object(scheduler, "get_redis", AsyncMock(return_value=redis)):
        results = await scheduler.run_settlement_pass(job)

    assert [r.auction_id for r in results] == ["a"]
    assert redis.set.await_args.args[0] == scheduler.RUN_LOCK_KEY
    redis.eval.assert_awaited_once()


async def test_pass_refused_when_lock_held() -> None:
    job = MagicMock()
    job.process_expired_auctions = AsyncMock()

    with patch.object(scheduler, "get_redis", AsyncMock(return_value=_redis(None))):
        with pytest.raises(SettlementAlreadyRunningError):
            await scheduler.run_settlement_pass(job)

    job.process_expired_auctions.assert_not_awaited()


def test_loop_disabled_with_zero_interval() -> None:
    with patch.object(scheduler.settings, "SETTLEMENT_INTERVAL_SECONDS", 0):
        assert scheduler.start_settlement_loop() is None


async def test_close_releases_gateway_and_resets_singleton() -> None:
    job = MagicMock()
    job.aclose = AsyncMock()

    with patch.object(scheduler, "_job", job):
        await scheduler.close_settlement_job()
        assert scheduler._job is None

    job.aclose.assert_awaited_once()
