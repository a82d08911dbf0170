"""Status polling watchdog.

Polls the device on a fixed cadence, refreshes the output cache on every good
reply and reports the connection as lost after ``failure_threshold``
consecutive failures. Once it has reported a loss the watchdog stays stopped
until the caller arms it again with ``start()``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from adamctl.core.device import DeviceClient
from adamctl.errors import AdamError
from adamctl.models.device import DeviceTarget, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0
DEFAULT_FAILURE_THRESHOLD = 3


class StatusWatchdog:
    def __init__(
        self,
        device: DeviceClient,
        target: DeviceTarget,
        *,
        interval: float = DEFAULT_INTERVAL,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        on_connection_lost: Callable[[], None] | None = None,
        on_poll: Callable[[Snapshot | None, AdamError | None], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        if failure_threshold < 1:
            raise ValueError(f"Failure threshold must be at least 1, got {failure_threshold}")
        self.device = device
        self.target = target
        self.interval = interval
        self.failure_threshold = failure_threshold
        self.on_connection_lost = on_connection_lost
        self.on_poll = on_poll
        self.consecutive_failures = 0
        self.skipped_ticks = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the watchdog. Must be called from inside a running event loop."""
        if self.running:
            return
        self.consecutive_failures = 0
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Status polling started for %s every %gs", self.target, self.interval)

    def stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("Status polling stopped")
        self._task = None

    async def wait(self) -> None:
        """Block until the polling task ends (connection lost or stopped)."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def poll_once(self) -> bool:
        """Run one tick. Returns False once the connection is declared lost."""
        try:
            snapshot = await self.device.fetch_status(self.target)
        except AdamError as exc:
            self.consecutive_failures += 1
            logger.debug(
                "Status poll of %s failed (%d/%d): %s",
                self.target,
                self.consecutive_failures,
                self.failure_threshold,
                exc,
            )
            if self.on_poll is not None:
                self.on_poll(None, exc)
            if self.consecutive_failures >= self.failure_threshold:
                if self.consecutive_failures == self.failure_threshold:
                    logger.warning(
                        "Connection lost - polling stopped after %d failures",
                        self.failure_threshold,
                    )
                    if self.on_connection_lost is not None:
                        self.on_connection_lost()
                return False
            return True

        self.consecutive_failures = 0
        if self.on_poll is not None:
            self.on_poll(snapshot, None)
        return True

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if not await self.poll_once():
                return
            next_tick += self.interval
            now = loop.time()
            # ticks that fell due while the poll was outstanding are dropped
            while next_tick <= now:
                next_tick += self.interval
                self.skipped_ticks += 1
