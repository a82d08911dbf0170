"""Device, output and command record models."""

from __future__ import annotations

import ipaddress
import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from adamctl.errors import InvalidChannelError

OUTPUT_COUNT = 6
CHANNELS = tuple(range(OUTPUT_COUNT))
DEFAULT_PORT = 1025


class OutputState(str, Enum):
    """State of one digital output."""

    LOW = "low"
    HIGH = "high"

    def __str__(self) -> str:
        return self.name


Snapshot = dict[int, OutputState]

_HOST_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def validate_channel(channel: int) -> int:
    """Return ``channel`` unchanged or raise InvalidChannelError."""
    if isinstance(channel, bool) or not isinstance(channel, int):
        raise InvalidChannelError(f"Invalid output channel: {channel!r}. Must be 0-5.")
    if channel < 0 or channel >= OUTPUT_COUNT:
        raise InvalidChannelError(f"Invalid output channel: {channel}. Must be 0-5.")
    return channel


def _is_ipv4(host: str) -> bool:
    try:
        ipaddress.IPv4Address(host)
    except ValueError:
        return False
    return True


def validate_host(value: str) -> str:
    """Return the stripped host if it is an IPv4 literal or a DNS host name."""
    host = value.strip()
    if not host:
        raise ValueError("host must not be blank")
    if _is_ipv4(host):
        return host
    labels = host.removesuffix(".").split(".")
    if len(host) > 253 or not all(_HOST_LABEL_RE.match(label) for label in labels):
        raise ValueError(f"invalid host name: {host!r}")
    if all(label.isdigit() for label in labels):
        raise ValueError(f"invalid IPv4 address: {host!r}")
    return host


def all_low() -> Snapshot:
    return {channel: OutputState.LOW for channel in CHANNELS}


class DeviceTarget(BaseModel):
    """Address of one device (IP or hostname plus UDP port)."""

    model_config = {"frozen": True}

    host: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        return validate_host(value)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class DeviceIdentity(BaseModel):
    """Identity strings reported by the device."""

    model_config = {"frozen": True}

    firmware: str
    model: str
    name: str


class CommandRecord(BaseModel):
    """Result of one exchange with the device (or one sequence step)."""

    model_config = {"frozen": True}

    timestamp: datetime = Field(default_factory=datetime.now)
    target: DeviceTarget
    command: str
    response: str | None = None
    success: bool
    error: str | None = None
    description: str = ""

    @property
    def formatted(self) -> str:
        status = "✓ Success" if self.success else f"✗ Failed: {self.error}"
        command = self.command.rstrip("\r")
        return f"[{self.timestamp:%H:%M:%S}] {self.target} → {command} {status}"


class DeviceProfile(BaseModel):
    """Saved device configuration (e.g. "Main Door")."""

    name: str = Field(min_length=1)
    host: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    description: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    modified_at: datetime = Field(default_factory=datetime.now)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        return validate_host(value)

    @property
    def target(self) -> DeviceTarget:
        return DeviceTarget(host=self.host, port=self.port)
