"""In-process scheduler that runs the sweeps on an interval."""

import asyncio

from ...core.logging import get_logger
from ...database import AsyncSessionLocal
from .services import run_sweeps

logger = get_logger(__name__)


class SweepScheduler:
    """Runs ``run_sweeps`` every ``interval_seconds`` until stopped."""

    def __init__(self, interval_seconds: int, initial_delay: int = 0):
        self.interval_seconds = interval_seconds
        self.initial_delay = initial_delay
        self.run_count = 0
        self.error_count = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> None:
        async with AsyncSessionLocal() as session:
            await run_sweeps(session)
        self.run_count += 1

    async def _loop(self) -> None:
        if self.initial_delay > 0:
            await asyncio.sleep(self.initial_delay)

        while True:
            try:
                await self.run_once()
            except Exception:
                self.error_count += 1
                logger.exception("Scheduled sweep failed")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            logger.warning("Sweep scheduler already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Sweep scheduler started", extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sweep scheduler stopped")
