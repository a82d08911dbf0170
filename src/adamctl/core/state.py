"""In-process cache of the last-known output states."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping

from adamctl.models.device import CHANNELS, OutputState, Snapshot, all_low, validate_channel

logger = logging.getLogger(__name__)


class OutputStateCache:
    """Last-known state of the six outputs.

    Shared by manual commands, the sequence engine and the status watchdog.
    Readers always get a copy. The cache does not know which device it
    mirrors and is only reset by constructing a new one.
    """

    def __init__(self, initial: Mapping[int, OutputState] | None = None) -> None:
        self._lock = threading.Lock()
        self._states = all_low()
        if initial is not None:
            self._states.update(self._checked(initial))

    @staticmethod
    def _checked(snapshot: Mapping[int, OutputState]) -> Snapshot:
        checked: Snapshot = {}
        for channel, state in snapshot.items():
            checked[validate_channel(channel)] = OutputState(state)
        return checked

    def get(self) -> Snapshot:
        with self._lock:
            return dict(self._states)

    def get_channel(self, channel: int) -> OutputState:
        validate_channel(channel)
        with self._lock:
            return self._states[channel]

    def set(self, channel: int, state: OutputState) -> None:
        validate_channel(channel)
        with self._lock:
            self._states[channel] = OutputState(state)

    def set_all(self, state: OutputState) -> None:
        with self._lock:
            for channel in CHANNELS:
                self._states[channel] = OutputState(state)

    def replace(self, snapshot: Mapping[int, OutputState]) -> None:
        """Overwrite the channels present in ``snapshot``."""
        checked = self._checked(snapshot)
        with self._lock:
            self._states.update(checked)
        logger.debug("Output cache refreshed: %s", checked)
