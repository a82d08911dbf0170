"""Mock ADAM-6060 style device for development and testing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from adamctl.core.codec import (
    HIGH_FIELD,
    QUERY_FIRMWARE,
    QUERY_MODEL,
    QUERY_NAME,
    QUERY_STATUS,
    REPLY_PREFIX,
    SET_COMMAND_LENGTH,
    SET_OUTPUTS_PREFIX,
    TERMINATOR,
    encode_status_response,
)
from adamctl.models.device import CHANNELS, OutputState, Snapshot, all_low

logger = logging.getLogger(__name__)

UNKNOWN_REPLY = "?01"


@dataclass
class MockAdamDevice:
    """UDP server that speaks the output module protocol."""

    name: str = "mock-adam-1"
    model: str = "6060"
    firmware: str = "A2.03"
    host: str = "127.0.0.1"
    port: int = 1025

    outputs: Snapshot = field(default_factory=all_low)
    received: list[str] = field(default_factory=list)
    silent: bool = False

    _transport: asyncio.DatagramTransport | None = field(default=None, repr=False)

    async def start(self) -> None:
        """Start the mock device server. Port 0 picks a free port."""
        loop = asyncio.get_running_loop()
        transport, _ = await loop.create_datagram_endpoint(
            lambda: _MockProtocol(self), local_addr=(self.host, self.port)
        )
        self._transport = transport
        self.port = transport.get_extra_info("sockname")[1]
        logger.info("Mock device '%s' listening on %s:%d/udp", self.name, self.host, self.port)

    async def stop(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            logger.info("Mock device '%s' stopped", self.name)

    async def run_forever(self) -> None:
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    def handle(self, command: str) -> str | None:
        """Apply ``command`` and return the reply text (None for no reply)."""
        self.received.append(command)
        logger.debug("Received %r", command)

        if command == QUERY_STATUS:
            return encode_status_response(self.outputs)
        if command == QUERY_FIRMWARE:
            return f"{REPLY_PREFIX}{self.firmware}"
        if command == QUERY_MODEL:
            return f"{REPLY_PREFIX}{self.model}"
        if command == QUERY_NAME:
            return f"{REPLY_PREFIX}{self.name}"
        if command.startswith(SET_OUTPUTS_PREFIX) and len(command) == SET_COMMAND_LENGTH:
            fields = command[len(SET_OUTPUTS_PREFIX) :]
            for channel in CHANNELS:
                value = fields[2 * channel : 2 * channel + 2]
                self.outputs[channel] = (
                    OutputState.HIGH if value == HIGH_FIELD else OutputState.LOW
                )
            logger.info(
                "Outputs now: %s",
                " ".join(f"DI{ch}={self.outputs[ch]}" for ch in CHANNELS),
            )
            return None
        return UNKNOWN_REPLY


class _MockProtocol(asyncio.DatagramProtocol):
    def __init__(self, device: MockAdamDevice) -> None:
        self._device = device
        self._transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        reply = self._device.handle(data.decode("ascii", errors="replace"))
        if reply is None or self._device.silent or self._transport is None:
            return
        self._transport.sendto(f"{reply}{TERMINATOR}".encode("ascii"), addr)


async def run_mock_device(
    name: str = "mock-adam-1",
    host: str = "0.0.0.0",
    port: int = 1025,
    model: str = "6060",
) -> None:
    """Run a mock device server until cancelled."""
    device = MockAdamDevice(name=name, host=host, port=port, model=model)
    await device.run_forever()
