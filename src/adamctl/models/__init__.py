"""Data models for adamctl."""

from adamctl.models.device import (
    CHANNELS,
    DEFAULT_PORT,
    OUTPUT_COUNT,
    CommandRecord,
    DeviceIdentity,
    DeviceProfile,
    DeviceTarget,
    OutputState,
    Snapshot,
    all_low,
    validate_channel,
    validate_host,
)
from adamctl.models.sequence import (
    DelayAction,
    SequenceAction,
    SequenceList,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
    example_sequence,
)

__all__ = [
    "CHANNELS",
    "CommandRecord",
    "DEFAULT_PORT",
    "DelayAction",
    "DeviceIdentity",
    "DeviceProfile",
    "DeviceTarget",
    "OUTPUT_COUNT",
    "OutputState",
    "SequenceAction",
    "SequenceList",
    "SetHighAction",
    "SetLowAction",
    "Snapshot",
    "TriggerSequence",
    "all_low",
    "example_sequence",
    "validate_channel",
    "validate_host",
]
