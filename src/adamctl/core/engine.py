"""Trigger sequence execution engine."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable, Iterable

from adamctl.core.device import DeviceClient
from adamctl.errors import SequenceAlreadyRunningError
from adamctl.models.device import CommandRecord, DeviceTarget, validate_channel
from adamctl.models.sequence import (
    DelayAction,
    SequenceAction,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
)

logger = logging.getLogger(__name__)

RecordCallback = Callable[[CommandRecord], None]

DELAY_COMMAND = "(delay)"
CANCELLED_COMMAND = "(cancelled)"


class SequenceEngine:
    """Run one trigger sequence at a time against a device.

    Cancellation is cooperative: ``cancel()`` is honoured before every action
    and aborts a running delay at once, but a transport call that is already
    in flight always completes (or times out) first. A cancel issued before a
    scheduled run gets its first step still stops that run.
    """

    def __init__(self, device: DeviceClient, *, on_record: RecordCallback | None = None) -> None:
        self.device = device
        self.on_record = on_record
        self._cancelled = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def cancel(self) -> None:
        if self._running:
            logger.info("Sequence cancellation requested")
        self._cancelled.set()

    async def run(
        self,
        target: DeviceTarget,
        sequence: TriggerSequence,
        *,
        on_record: RecordCallback | None = None,
    ) -> list[CommandRecord]:
        if self._running:
            raise SequenceAlreadyRunningError(
                "A sequence is already running; cancel it before starting another"
            )
        if sequence.loop_count < 0:
            raise ValueError(f"Invalid loop count: {sequence.loop_count}")

        self._running = True
        records: list[CommandRecord] = []
        observers = [cb for cb in (self.on_record, on_record) if cb is not None]

        def emit(record: CommandRecord) -> None:
            records.append(record)
            for observer in observers:
                observer(record)

        actions = list(sequence.actions)
        loops: Iterable[int] = (
            itertools.count() if sequence.loop_count == 0 else range(sequence.loop_count)
        )
        total = "∞" if sequence.loop_count == 0 else str(sequence.loop_count)
        logger.info("Running sequence '%s' on %s (loops: %s)", sequence.name, target, total)

        try:
            if not actions:
                if sequence.loop_count == 0:
                    await self._cancelled.wait()
                    emit(self._cancelled_record(target))
                return records

            for loop in loops:
                logger.debug("Loop %d of %s", loop + 1, total)
                for action in actions:
                    if self._cancelled.is_set():
                        emit(self._cancelled_record(target))
                        return records
                    record = await self._dispatch(target, action)
                    if record is None:
                        emit(self._cancelled_record(target))
                        return records
                    emit(record)
        finally:
            self._running = False
            self._cancelled = asyncio.Event()

        logger.info("Sequence '%s' finished with %d records", sequence.name, len(records))
        return records

    async def _dispatch(
        self, target: DeviceTarget, action: SequenceAction
    ) -> CommandRecord | None:
        if isinstance(action, (SetHighAction, SetLowAction)):
            validate_channel(action.channel)
            return await self.device.set_output(target, action.channel, action.state)
        if isinstance(action, DelayAction):
            if await self._wait(action.duration_ms / 1000):
                return None
            return CommandRecord(
                target=target,
                command=DELAY_COMMAND,
                success=True,
                description=action.description,
            )
        raise TypeError(f"Unsupported sequence action: {action!r}")

    async def _wait(self, seconds: float) -> bool:
        """Sleep for ``seconds``; return True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except (asyncio.TimeoutError, TimeoutError):
            return False
        return True

    @staticmethod
    def _cancelled_record(target: DeviceTarget) -> CommandRecord:
        return CommandRecord(
            target=target,
            command=CANCELLED_COMMAND,
            success=True,
            description="Sequence execution cancelled",
        )
