"""ASCII wire codec for ADAM-6060 style digital output modules.

Set command::

    $01C{DI0}{DI1}{DI2}{DI3}{DI4}{DI5}000000000000\\r

Each ``{DIx}`` is two characters, ``80`` for HIGH and ``00`` for LOW, and the
command always carries all six outputs. Status replies mirror the layout:
``!01`` followed by the six two-character fields and trailing padding.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from adamctl.errors import MalformedResponseError, TruncatedResponseError
from adamctl.models.device import CHANNELS, OutputState, Snapshot, validate_channel

COMMAND_PREFIX = "$01"
REPLY_PREFIX = "!01"
TERMINATOR = "\r"

SET_OUTPUTS_PREFIX = "$01C"
OUTPUT_PADDING = "000000000000"

HIGH_FIELD = "80"
LOW_FIELD = "00"

QUERY_FIRMWARE = "$01F\r"
QUERY_MODEL = "$01M\r"
QUERY_NAME = "$01N\r"
QUERY_STATUS = "$01C\r"

STATUS_MIN_LENGTH = len(REPLY_PREFIX) + 2 * len(CHANNELS)
SET_COMMAND_LENGTH = (
    len(SET_OUTPUTS_PREFIX) + 2 * len(CHANNELS) + len(OUTPUT_PADDING) + len(TERMINATOR)
)

_EDGE_JUNK_RE = re.compile(r"^[\s\x00-\x1f\x7f]+|[\s\x00-\x1f\x7f]+$")


def _field(state: OutputState) -> str:
    return HIGH_FIELD if state is OutputState.HIGH else LOW_FIELD


def encode_set_outputs(
    current: Mapping[int, OutputState],
    overrides: Mapping[int, OutputState] | None = None,
) -> str:
    """Build the set command for all six outputs.

    Channels present in ``overrides`` take that state, the rest keep the value
    from ``current``.
    """
    overrides = overrides or {}
    for channel in (*current, *overrides):
        validate_channel(channel)

    fields = []
    for channel in CHANNELS:
        state = overrides.get(channel)
        if state is None:
            state = current.get(channel, OutputState.LOW)
        fields.append(_field(state))

    return f"{SET_OUTPUTS_PREFIX}{''.join(fields)}{OUTPUT_PADDING}{TERMINATOR}"


def encode_status_response(snapshot: Mapping[int, OutputState]) -> str:
    """Build the reply a device sends for a status query."""
    fields = "".join(_field(snapshot.get(ch, OutputState.LOW)) for ch in CHANNELS)
    return f"{REPLY_PREFIX}{fields}{OUTPUT_PADDING}"


def _require_prefix(text: str) -> None:
    if not text.startswith(REPLY_PREFIX):
        raise MalformedResponseError(f"Invalid response: {text!r}")


def decode_status_response(text: str) -> Snapshot:
    """Parse a status reply into a snapshot of all six outputs."""
    _require_prefix(text)
    if len(text) < STATUS_MIN_LENGTH:
        raise TruncatedResponseError(
            f"Status response too short ({len(text)} < {STATUS_MIN_LENGTH}): {text!r}"
        )

    snapshot: Snapshot = {}
    for channel in CHANNELS:
        start = len(REPLY_PREFIX) + 2 * channel
        field = text[start : start + 2]
        snapshot[channel] = OutputState.HIGH if field == HIGH_FIELD else OutputState.LOW
    return snapshot


def decode_identity_response(text: str) -> str:
    """Return the payload of a firmware/model/name reply."""
    _require_prefix(text)
    return _EDGE_JUNK_RE.sub("", text[len(REPLY_PREFIX) :])
