"""adamctl - drive ADAM-6060 style digital output modules over UDP."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import (
    DeviceClient,
    OutputStateCache,
    SequenceEngine,
    StatusWatchdog,
    UdpTransport,
)
from .models import (
    CommandRecord,
    DelayAction,
    DeviceTarget,
    OutputState,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
)
from .storage import Database

__all__ = [
    "CommandRecord",
    "Database",
    "DelayAction",
    "DeviceClient",
    "DeviceTarget",
    "OutputState",
    "OutputStateCache",
    "SequenceEngine",
    "SetHighAction",
    "SetLowAction",
    "Settings",
    "StatusWatchdog",
    "TriggerSequence",
    "UdpTransport",
    "__version__",
    "get_settings",
]

__version__ = version("adamctl")
