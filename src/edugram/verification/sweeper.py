"""Background sweep that approves due verifications inside the API process."""

import asyncio

import structlog

from edugram.store import KeyValueStore
from edugram.verification.service import process_due

logger = structlog.get_logger()


class VerificationSweeper:
    """Runs ``process_due`` immediately and then every ``interval`` seconds until stopped."""

    def __init__(self, store: KeyValueStore, interval: float = 1.0) -> None:
        self.store = store
        self.interval = interval
        self._running = False
        self._stopped = asyncio.Event()

    async def start(self) -> None:
        self._running = True
        self._stopped.clear()
        logger.info("verification_sweeper_started", interval=self.interval)

        while self._running:
            await self.sweep_once()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue

        logger.info("verification_sweeper_stopped")

    async def sweep_once(self) -> int:
        """One pass; failures are logged so the loop keeps running."""
        try:
            approved = await process_due(self.store)
        except Exception:
            logger.error("verification_sweep_failed", exc_info=True)
            return 0
        if approved:
            logger.info("verification_sweep_completed", approved=approved)
        return approved

    async def stop(self) -> None:
        self._running = False
        self._stopped.set()
