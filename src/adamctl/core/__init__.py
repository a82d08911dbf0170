from __future__ import annotations

from .codec import (
    QUERY_FIRMWARE,
    QUERY_MODEL,
    QUERY_NAME,
    QUERY_STATUS,
    decode_identity_response,
    decode_status_response,
    encode_set_outputs,
    encode_status_response,
)
from .device import DeviceClient
from .engine import SequenceEngine
from .mock_device import MockAdamDevice, run_mock_device
from .state import OutputStateCache
from .transport import Transport, UdpTransport
from .watchdog import StatusWatchdog

__all__ = [
    "DeviceClient",
    "MockAdamDevice",
    "OutputStateCache",
    "QUERY_FIRMWARE",
    "QUERY_MODEL",
    "QUERY_NAME",
    "QUERY_STATUS",
    "SequenceEngine",
    "StatusWatchdog",
    "Transport",
    "UdpTransport",
    "decode_identity_response",
    "decode_status_response",
    "encode_set_outputs",
    "encode_status_response",
    "run_mock_device",
]
