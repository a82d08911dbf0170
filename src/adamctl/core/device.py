"""Manual command path: one-off operations that produce CommandRecords.

The sequence engine and the status watchdog reuse this client so that every
caller shares one transport (one exclusion domain) and one output cache.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from adamctl.core.codec import (
    QUERY_FIRMWARE,
    QUERY_MODEL,
    QUERY_NAME,
    QUERY_STATUS,
    TERMINATOR,
    decode_identity_response,
    decode_status_response,
    encode_set_outputs,
)
from adamctl.core.state import OutputStateCache
from adamctl.core.transport import Transport, UdpTransport
from adamctl.errors import AdamError, TransportError
from adamctl.models.device import (
    CHANNELS,
    CommandRecord,
    DeviceIdentity,
    DeviceTarget,
    OutputState,
    Snapshot,
    validate_channel,
)

logger = logging.getLogger(__name__)


def _describe(snapshot: Mapping[int, OutputState]) -> str:
    return ", ".join(f"DI{channel} → {state}" for channel, state in sorted(snapshot.items()))


def _failed(target: DeviceTarget, command: str, exc: Exception) -> CommandRecord:
    return CommandRecord(
        target=target,
        command=command,
        success=False,
        error=str(exc),
        description="Command failed",
    )


class DeviceClient:
    def __init__(
        self,
        transport: Transport | None = None,
        cache: OutputStateCache | None = None,
    ) -> None:
        self.transport = transport or UdpTransport()
        self.cache = cache or OutputStateCache()

    def snapshot(self) -> Snapshot:
        return self.cache.get()

    async def set_output(
        self, target: DeviceTarget, channel: int, state: OutputState
    ) -> CommandRecord:
        """Drive one output and push the full six-channel command."""
        validate_channel(channel)
        self.cache.set(channel, state)
        return await self._push(target, f"DI{channel} → {OutputState(state)}")

    async def set_outputs(
        self, target: DeviceTarget, overrides: Mapping[int, OutputState]
    ) -> CommandRecord:
        for channel in overrides:
            validate_channel(channel)
        for channel, state in overrides.items():
            self.cache.set(channel, state)
        return await self._push(target, _describe(overrides))

    async def set_all(self, target: DeviceTarget, state: OutputState) -> CommandRecord:
        self.cache.set_all(state)
        return await self._push(target, f"All outputs set to {OutputState(state)}")

    async def _push(self, target: DeviceTarget, description: str) -> CommandRecord:
        command = encode_set_outputs(self.cache.get())
        try:
            await self.transport.send(target, command)
        except TransportError as exc:
            logger.warning("Set command to %s failed: %s", target, exc)
            return _failed(target, command, exc)
        return CommandRecord(
            target=target, command=command, success=True, description=description
        )

    async def fetch_status(self, target: DeviceTarget) -> Snapshot:
        """Query the device and refresh the cache. Raises on failure."""
        response = await self.transport.send_and_receive(target, QUERY_STATUS)
        snapshot = decode_status_response(response)
        self.cache.replace(snapshot)
        return snapshot

    async def read_status(self, target: DeviceTarget) -> CommandRecord:
        try:
            snapshot = await self.fetch_status(target)
        except AdamError as exc:
            return _failed(target, QUERY_STATUS, exc)
        states = ", ".join(f"DI{ch}={snapshot[ch]}" for ch in CHANNELS)
        return CommandRecord(
            target=target,
            command=QUERY_STATUS,
            success=True,
            description=f"Status read: {states}",
        )

    async def _query(self, target: DeviceTarget, command: str) -> str:
        response = await self.transport.send_and_receive(target, command)
        return decode_identity_response(response)

    async def query_identity(self, target: DeviceTarget) -> DeviceIdentity:
        return DeviceIdentity(
            firmware=await self._query(target, QUERY_FIRMWARE),
            model=await self._query(target, QUERY_MODEL),
            name=await self._query(target, QUERY_NAME),
        )

    async def test_connection(self, target: DeviceTarget) -> CommandRecord:
        """Probe the device by reading its firmware, model and name."""
        command = ", ".join(q.rstrip(TERMINATOR) for q in (QUERY_FIRMWARE, QUERY_MODEL, QUERY_NAME))
        try:
            identity = await self.query_identity(target)
        except AdamError as exc:
            return _failed(target, command, exc)
        return CommandRecord(
            target=target,
            command=command,
            response=(
                f"Version: {identity.firmware} | Model: {identity.model} | Name: {identity.name}"
            ),
            success=True,
            description=(
                f"Connected - Version: {identity.firmware}, Model: {identity.model}, "
                f"Name: {identity.name}"
            ),
        )

    async def send_raw(self, target: DeviceTarget, command: str) -> CommandRecord:
        """Send an arbitrary command and wait for the reply."""
        if not command.endswith(TERMINATOR):
            command += TERMINATOR
        try:
            response = await self.transport.send_and_receive(target, command)
        except TransportError as exc:
            return _failed(target, command, exc)
        return CommandRecord(
            target=target,
            command=command,
            response=response,
            success=True,
            description=f"Manual command - Response: {response}",
        )
