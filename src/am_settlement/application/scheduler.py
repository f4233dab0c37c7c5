"""Settlement wiring: production job factory, single-pass runner, periodic loop."""

import asyncio
import logging

from config.settings import settings
from src.am_common.database import async_session_factory
from src.am_common.errors import SettlementAlreadyRunningError
from src.am_common.locks import RedisRunLock
from src.am_common.redis_client import get_redis
from src.am_settlement.application.job import SettlementJob
from src.am_settlement.domain.models import SettlementResult
from src.am_settlement.infrastructure.notifications import SqlNotifier
from src.am_settlement.infrastructure.payment_gateway import HttpPaymentSplitGateway

logger = logging.getLogger(__name__)

RUN_LOCK_KEY = "settlement:run-lock"

_job: SettlementJob | None = None


def get_settlement_job() -> SettlementJob:
    global _job  # noqa: PLW0603
    if _job is None:
        _job = SettlementJob(
            session_factory=async_session_factory,
            gateway=HttpPaymentSplitGateway(),
            notifier=SqlNotifier(async_session_factory),
        )
    return _job


async def close_settlement_job() -> None:
    """Release the payment client; the next get_settlement_job() builds a fresh job."""
    global _job  # noqa: PLW0603
    job, _job = _job, None
    if job is not None:
        await job.aclose()


async def run_settlement_pass(job: SettlementJob | None = None) -> list[SettlementResult]:
    """One settlement pass, guarded so only one runs across all processes.

    Raises SettlementAlreadyRunningError if another pass holds the lock.
    """
    job = job or get_settlement_job()
    lock = RedisRunLock(await get_redis(), RUN_LOCK_KEY, settings.SETTLEMENT_RUN_LOCK_TTL_MS)
    async with lock.hold() as acquired:
        if not acquired:
            raise SettlementAlreadyRunningError()
        return await job.process_expired_auctions()


async def settlement_loop(interval_seconds: int) -> None:
    """Run a settlement pass every interval until cancelled."""
    while True:
        try:
            results = await run_settlement_pass()
            failed = sum(1 for r in results if r.error is not None)
            if results:
                logger.info("Settlement pass: %d processed, %d failed", len(results), failed)
        except SettlementAlreadyRunningError:
            logger.debug("Settlement pass skipped, another runner holds the lock")
        except Exception:
            logger.exception("Settlement pass crashed")
        await asyncio.sleep(interval_seconds)


def start_settlement_loop() -> asyncio.Task[None] | None:
    interval = settings.SETTLEMENT_INTERVAL_SECONDS
    if interval <= 0:
        logger.info("Settlement loop disabled")
        return None
    task = asyncio.create_task(settlement_loop(interval), name="settlement-loop")
    logger.info("Settlement loop started, interval=%ss", interval)
    return task
