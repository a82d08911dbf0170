"""UDP command transport with single-flight serialization.

The device answers without any request id, so two overlapping exchanges could
hand one caller the other's reply. Every call therefore holds one lock per
transport instance, whatever target it addresses. Sockets live for exactly one
call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from adamctl.errors import TransportError, TransportSendError, TransportTimeoutError
from adamctl.models.device import DeviceTarget

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0
ENCODING = "ascii"


class Transport(Protocol):
    async def send(self, target: DeviceTarget, command: str) -> None:
        """Send a command without waiting for a reply."""

    async def send_and_receive(
        self, target: DeviceTarget, command: str, timeout: float | None = None
    ) -> str:
        """Send a command and return the device reply."""


class _ReplyProtocol(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.reply: asyncio.Future[bytes] = asyncio.get_running_loop().create_future()

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if not self.reply.done():
            self.reply.set_result(data)

    def error_received(self, exc: Exception) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None and not self.reply.done():
            self.reply.set_exception(exc)


def _encode(command: str) -> bytes:
    try:
        return command.encode(ENCODING)
    except UnicodeEncodeError as exc:
        raise TransportSendError(f"Command is not ASCII: {command!r}") from exc


class UdpTransport:
    """Exactly one request in flight at a time across all targets."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def send(self, target: DeviceTarget, command: str) -> None:
        payload = _encode(command)
        async with self._lock:
            endpoint, protocol = await self._open(target)
            try:
                self._sendto(endpoint, target, payload)
                # asyncio reports send errors through the protocol
                if protocol.reply.done() and protocol.reply.exception() is not None:
                    error = protocol.reply.exception()
                    raise TransportSendError(f"UDP send to {target} failed: {error}") from error
            finally:
                self._close(endpoint, protocol)

    async def send_and_receive(
        self, target: DeviceTarget, command: str, timeout: float | None = None
    ) -> str:
        wait = self.timeout if timeout is None else timeout
        payload = _encode(command)
        async with self._lock:
            endpoint, protocol = await self._open(target)
            try:
                self._sendto(endpoint, target, payload)
                data = await self._receive(protocol, target, wait)
            finally:
                self._close(endpoint, protocol)
        return data.decode(ENCODING, errors="replace").rstrip("\r\n")

    async def _open(
        self, target: DeviceTarget
    ) -> tuple[asyncio.DatagramTransport, _ReplyProtocol]:
        loop = asyncio.get_running_loop()
        try:
            return await loop.create_datagram_endpoint(
                _ReplyProtocol, remote_addr=(target.host, target.port)
            )
        except (OSError, UnicodeError) as exc:
            # UnicodeError comes from IDNA encoding of unusable host names
            raise TransportError(f"Could not open UDP socket to {target}: {exc}") from exc

    @staticmethod
    def _sendto(endpoint: asyncio.DatagramTransport, target: DeviceTarget, payload: bytes) -> None:
        logger.debug("-> %s %r", target, payload)
        try:
            endpoint.sendto(payload)
        except OSError as exc:
            raise TransportSendError(f"UDP send to {target} failed: {exc}") from exc

    @staticmethod
    async def _receive(protocol: _ReplyProtocol, target: DeviceTarget, timeout: float) -> bytes:
        try:
            data = await asyncio.wait_for(protocol.reply, timeout=timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise TransportTimeoutError(
                f"No response received from {target} within {timeout:g} seconds"
            ) from exc
        except OSError as exc:
            raise TransportSendError(f"UDP receive from {target} failed: {exc}") from exc
        logger.debug("<- %s %r", target, data)
        return data

    @staticmethod
    def _close(endpoint: asyncio.DatagramTransport, protocol: _ReplyProtocol) -> None:
        if not protocol.reply.done():
            protocol.reply.cancel()
        endpoint.close()
