from __future__ import annotations

import itertools

import pytest

from adamctl.core.codec import (
    QUERY_FIRMWARE,
    QUERY_MODEL,
    QUERY_NAME,
    QUERY_STATUS,
    SET_COMMAND_LENGTH,
    decode_identity_response,
    decode_status_response,
    encode_set_outputs,
    encode_status_response,
)
from adamctl.errors import InvalidChannelError, MalformedResponseError, TruncatedResponseError
from adamctl.models import CHANNELS, OutputState, all_low

H = OutputState.HIGH
L = OutputState.LOW


def _snapshot(bits: tuple[int, ...]) -> dict[int, OutputState]:
    return {ch: H if bit else L for ch, bit in zip(CHANNELS, bits)}


def test_query_constants():
    assert QUERY_FIRMWARE == "$01F\r"
    assert QUERY_MODEL == "$01M\r"
    assert QUERY_NAME == "$01N\r"
    assert QUERY_STATUS == "$01C\r"


def test_encode_single_override_on_all_low():
    command = encode_set_outputs(all_low(), {0: H})
    assert command == "$01C" + "80" + "00" * 5 + "000000000000" + "\r"


def test_encode_every_prior_state_with_overrides():
    override_sets = [{}, {0: H}, {5: L}, {2: H, 3: L}, {ch: H for ch in CHANNELS}]
    for bits in itertools.product((0, 1), repeat=6):
        prior = _snapshot(bits)
        for overrides in override_sets:
            command = encode_set_outputs(prior, overrides)
            assert len(command) == SET_COMMAND_LENGTH == 29
            assert command.startswith("$01C")
            assert command.endswith("000000000000\r")
            for ch in CHANNELS:
                expected = overrides.get(ch, prior[ch])
                field = command[4 + 2 * ch : 6 + 2 * ch]
                assert field == ("80" if expected is H else "00")


def test_encode_rejects_out_of_range_override():
    with pytest.raises(InvalidChannelError):
        encode_set_outputs(all_low(), {6: H})
    with pytest.raises(InvalidChannelError):
        encode_set_outputs(all_low(), {-1: H})


def test_encode_rejects_out_of_range_snapshot_key():
    with pytest.raises(InvalidChannelError):
        encode_set_outputs({**all_low(), 7: H})


def test_decode_status_first_channel_high():
    snapshot = decode_status_response("!0180000000000000000000")
    assert snapshot == {0: H, 1: L, 2: L, 3: L, 4: L, 5: L}


def test_decode_status_minimum_length():
    snapshot = decode_status_response("!01000000000080")
    assert snapshot[5] is H
    assert all(snapshot[ch] is L for ch in range(5))


def test_decode_status_unknown_field_is_low():
    snapshot = decode_status_response("!01FF8001XX80000000000000")
    assert snapshot == {0: L, 1: H, 2: L, 3: L, 4: H, 5: L}


@pytest.mark.parametrize("text", ["", "?0180000000000000", "$01C800000000000", " !01800000000000"])
def test_decode_status_malformed(text):
    with pytest.raises(MalformedResponseError):
        decode_status_response(text)


@pytest.mark.parametrize("text", ["!01", "!018000", "!0100000000008"])
def test_decode_status_truncated(text):
    with pytest.raises(TruncatedResponseError):
        decode_status_response(text)


def test_status_round_trip():
    for bits in itertools.product((0, 1), repeat=6):
        snapshot = _snapshot(bits)
        reply = encode_status_response(snapshot)
        assert decode_status_response(reply) == snapshot
        # the set command and the status reply carry identical channel fields
        assert encode_set_outputs(snapshot)[4:16] == reply[3:15]


def test_decode_identity_trims_whitespace_and_control_chars():
    assert decode_identity_response("!01A2.03  ") == "A2.03"
    assert decode_identity_response("!016060") == "6060"
    assert decode_identity_response("!01\x00 Main Door\t\x7f") == "Main Door"
    assert decode_identity_response("!01") == ""


def test_decode_identity_malformed():
    with pytest.raises(MalformedResponseError):
        decode_identity_response("?01")
