from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from adamctl.models import (
    CommandRecord,
    DelayAction,
    DeviceProfile,
    DeviceTarget,
    SequenceList,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
    example_sequence,
)


@pytest.mark.parametrize("channel,expected", [(0, "DI0 → HIGH"), (1, "DI1 → HIGH"), (5, "DI5 → HIGH")])
def test_set_high_description(channel, expected):
    action = SetHighAction(channel=channel)
    assert action.description == expected
    assert action.action_type == "Set HIGH"


@pytest.mark.parametrize("channel,expected", [(0, "DI0 → LOW"), (2, "DI2 → LOW"), (4, "DI4 → LOW")])
def test_set_low_description(channel, expected):
    action = SetLowAction(channel=channel)
    assert action.description == expected
    assert action.action_type == "Set LOW"


@pytest.mark.parametrize(
    "duration_ms,expected",
    [
        (1000, "Delay 1s"),
        (2000, "Delay 2s"),
        (10000, "Delay 10s"),
        (500, "Delay 500ms"),
        (1500, "Delay 1.5s"),
    ],
)
def test_delay_description(duration_ms, expected):
    action = DelayAction(duration_ms=duration_ms)
    assert action.description == expected
    assert action.action_type == "Delay"


def test_actions_validate_channel_and_duration():
    with pytest.raises(ValidationError):
        SetHighAction(channel=6)
    with pytest.raises(ValidationError):
        SetLowAction(channel=-1)
    with pytest.raises(ValidationError):
        DelayAction(duration_ms=-5)


def test_actions_have_distinct_ids():
    first = SetHighAction(channel=0)
    second = SetHighAction(channel=0)
    assert first.id != second.id


def test_sequence_defaults():
    sequence = TriggerSequence()
    assert sequence.name == "New Sequence"
    assert sequence.actions == []
    assert sequence.loop_count == 1
    assert sequence.action_count == 0
    assert sequence.total_delay_ms == 0


def test_sequence_rejects_negative_loop_count():
    with pytest.raises(ValidationError):
        TriggerSequence(loop_count=-1)
    sequence = TriggerSequence()
    with pytest.raises(ValidationError):
        sequence.loop_count = -3


def test_edits_are_identity_based():
    twin_a = SetHighAction(channel=0)
    twin_b = SetHighAction(channel=0)
    delay = DelayAction(duration_ms=250)
    sequence = TriggerSequence(actions=[twin_a, delay, twin_b])
    before = sequence.modified_at

    assert sequence.remove_action(twin_b.id) is True
    assert [a.id for a in sequence.actions] == [twin_a.id, delay.id]
    assert sequence.remove_action(twin_b.id) is False
    assert sequence.modified_at >= before

    assert sequence.move_action(delay.id, -1) is True
    assert [a.id for a in sequence.actions] == [delay.id, twin_a.id]
    assert sequence.move_action(delay.id, -1) is False

    sequence.add_action(DelayAction(duration_ms=750))
    assert sequence.action_count == 3
    assert sequence.total_delay_ms == 1000


def test_sequence_json_keeps_action_variants():
    original = example_sequence()
    restored = SequenceList.validate_json(SequenceList.dump_json([original]))[0]

    assert restored.id == original.id
    assert [type(a) for a in restored.actions] == [
        SetHighAction,
        DelayAction,
        SetLowAction,
        DelayAction,
    ]
    assert [a.id for a in restored.actions] == [a.id for a in original.actions]
    assert restored.total_delay_ms == 3000


def test_device_target_validation():
    target = DeviceTarget(host=" 192.168.1.50 ", port=1025)
    assert target.host == "192.168.1.50"
    assert str(target) == "192.168.1.50:1025"
    for port in (0, 65536):
        with pytest.raises(ValidationError):
            DeviceTarget(host="10.0.0.1", port=port)
    with pytest.raises(ValidationError):
        DeviceTarget(host="   ", port=1025)


@pytest.mark.parametrize("host", ["adam-6060", "door.plant.local", "localhost", "10.0.0.255"])
def test_device_target_accepts_hosts(host):
    assert DeviceTarget(host=host).host == host


@pytest.mark.parametrize(
    "host",
    ["a" * 64 + ".example", "bad_host", "-lead.example", "door..local", "300.1.1.1", "10.0.0"],
)
def test_device_target_rejects_unusable_hosts(host):
    with pytest.raises(ValidationError):
        DeviceTarget(host=host)
    with pytest.raises(ValidationError):
        DeviceProfile(name="x", host=host)


def test_command_record_formatting():
    target = DeviceTarget(host="10.0.0.5", port=1025)
    stamp = datetime(2024, 1, 1, 9, 30, 15)
    ok = CommandRecord(timestamp=stamp, target=target, command="$01C\r", success=True)
    failed = CommandRecord(
        timestamp=stamp, target=target, command="$01M\r", success=False, error="timeout"
    )
    assert ok.formatted == "[09:30:15] 10.0.0.5:1025 → $01C ✓ Success"
    assert failed.formatted == "[09:30:15] 10.0.0.5:1025 → $01M ✗ Failed: timeout"
    with pytest.raises(ValidationError):
        ok.success = False  # type: ignore[misc]


def test_profile_target():
    profile = DeviceProfile(name="Main Door", host="192.168.1.100")
    assert profile.target == DeviceTarget(host="192.168.1.100", port=1025)
