"""Background task that evicts expired tokens."""

import asyncio
import logging

from parcel_notify.store.token_store import TokenStore

logger = logging.getLogger(__name__)


class TokenSweeper:
    """Periodically purges expired tokens from a TokenStore.

    One task for the whole store instead of a timer per token. Eviction is
    best effort: the store re-checks expiry on every read anyway.
    """

    def __init__(self, store: TokenStore, interval_seconds: float = 60) -> None:
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Run a single sweep pass and return how many tokens were removed."""
        removed = self.store.sweep()
        if removed:
            logger.info(f"Evicted {removed} expired tokens, {len(self.store)} live")
        return removed

    async def _loop(self) -> None:
        logger.info(f"Token sweeper started: every {self.interval_seconds}s")
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                self.run_once()
            except asyncio.CancelledError:
                logger.info("Token sweeper shutting down")
                break
            except Exception as e:
                logger.error(f"Token sweep error: {e}")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
