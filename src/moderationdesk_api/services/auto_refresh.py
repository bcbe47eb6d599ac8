"""Periodic reload of the moderation working set."""

import asyncio
import contextlib
import logging

from moderationdesk_api.config.settings import get_moderation_settings
from moderationdesk_api.services.queue_loader import QueueLoader
from moderationdesk_api.services.queue_loader import get_queue_loader

logger = logging.getLogger(__name__)


class AutoRefresher:
    """Re-runs the queue loader on a fixed interval while enabled."""

    def __init__(self, loader: QueueLoader, interval: float = 30.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.loader = loader
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def enabled(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start refreshing; does nothing if already running."""
        if self.enabled:
            return
        self._task = asyncio.create_task(self._run(), name="moderation-auto-refresh")
        logger.info(f"Auto refresh enabled every {self.interval}s")

    async def stop(self) -> None:
        """Cancel the refresh task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Auto refresh disabled")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.loader.load()
            except Exception as e:
                logger.exception(f"Auto refresh failed: {e}")

    async def __aenter__(self) -> "AutoRefresher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


# Global refresher instance
_auto_refresher: AutoRefresher | None = None


def get_auto_refresher() -> AutoRefresher:
    """Get the shared auto refresher bound to the shared queue loader."""
    global _auto_refresher  # noqa: PLW0603
    if _auto_refresher is None:
        _auto_refresher = AutoRefresher(
            get_queue_loader(), get_moderation_settings().auto_refresh_interval
        )
    return _auto_refresher
