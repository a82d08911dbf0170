from __future__ import annotations

import asyncio
import time

import pytest

from adamctl.core import DeviceClient, SequenceEngine
from adamctl.errors import InvalidChannelError, SequenceAlreadyRunningError, TransportSendError
from adamctl.models import (
    CommandRecord,
    DelayAction,
    DeviceTarget,
    OutputState,
    SetHighAction,
    SetLowAction,
    TriggerSequence,
)

TARGET = DeviceTarget(host="192.168.1.100", port=1025)


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[str] = []
        self.fail = False

    async def send(self, target: DeviceTarget, command: str) -> None:
        self.sent.append(command)
        if self.fail:
            raise TransportSendError("host unreachable")

    async def send_and_receive(self, target, command, timeout=None) -> str:
        raise AssertionError("set actions must not wait for a reply")


def _engine(transport: FakeTransport | None = None) -> tuple[SequenceEngine, FakeTransport]:
    transport = transport or FakeTransport()
    return SequenceEngine(DeviceClient(transport)), transport


def test_two_loops_produce_records_in_order():
    engine, transport = _engine()
    sequence = TriggerSequence(
        name="pulse",
        actions=[SetHighAction(channel=0), DelayAction(duration_ms=100), SetLowAction(channel=0)],
        loop_count=2,
    )
    seen: list[CommandRecord] = []

    records = asyncio.run(engine.run(TARGET, sequence, on_record=seen.append))

    assert [r.description for r in records] == [
        "DI0 → HIGH",
        "Delay 100ms",
        "DI0 → LOW",
        "DI0 → HIGH",
        "Delay 100ms",
        "DI0 → LOW",
    ]
    assert [r.command for r in records][1::3] == ["(delay)", "(delay)"]
    assert all(r.success for r in records)
    assert seen == records
    assert transport.sent == [
        "$01C800000000000000000000000\r",
        "$01C000000000000000000000000\r",
    ] * 2
    assert not engine.is_running


def test_cancel_after_first_action_of_infinite_sequence():
    engine, _ = _engine()
    sequence = TriggerSequence(
        actions=[SetHighAction(channel=1), DelayAction(duration_ms=10_000)],
        loop_count=0,
    )

    def cancel_on_first(record: CommandRecord) -> None:
        engine.cancel()

    started = time.monotonic()
    records = asyncio.run(engine.run(TARGET, sequence, on_record=cancel_on_first))

    assert time.monotonic() - started < 1.0
    assert len(records) == 2
    assert records[0].description == "DI1 → HIGH"
    assert records[1].command == "(cancelled)"
    assert records[1].description == "Sequence execution cancelled"


def test_cancel_aborts_delay_promptly():
    engine, _ = _engine()
    sequence = TriggerSequence(actions=[DelayAction(duration_ms=10_000)], loop_count=0)

    async def _run():
        task = asyncio.create_task(engine.run(TARGET, sequence))
        await asyncio.sleep(0.05)
        assert engine.is_running
        started = time.monotonic()
        engine.cancel()
        records = await task
        return records, time.monotonic() - started

    records, elapsed = asyncio.run(_run())

    assert elapsed < 0.5
    assert [r.command for r in records] == ["(cancelled)"]


def test_failed_set_action_does_not_stop_the_run():
    transport = FakeTransport()
    transport.fail = True
    engine, _ = _engine(transport)
    sequence = TriggerSequence(
        actions=[SetHighAction(channel=2), DelayAction(duration_ms=0), SetLowAction(channel=2)],
        loop_count=1,
    )

    records = asyncio.run(engine.run(TARGET, sequence))

    assert [r.success for r in records] == [False, True, False]
    assert records[0].error == "host unreachable"
    assert len(transport.sent) == 2


def test_second_run_while_active_is_rejected():
    engine, _ = _engine()
    long_sequence = TriggerSequence(actions=[DelayAction(duration_ms=10_000)])

    async def _run():
        task = asyncio.create_task(engine.run(TARGET, long_sequence))
        await asyncio.sleep(0.01)
        with pytest.raises(SequenceAlreadyRunningError):
            await engine.run(TARGET, TriggerSequence())
        engine.cancel()
        return await task

    records = asyncio.run(_run())
    assert records[-1].command == "(cancelled)"
    assert not engine.is_running


def test_empty_sequence_produces_no_records():
    engine, transport = _engine()
    records = asyncio.run(engine.run(TARGET, TriggerSequence(loop_count=3)))
    assert records == []
    assert transport.sent == []


def test_invalid_channel_raises_before_io():
    engine, transport = _engine()
    bad = SetHighAction.model_construct(channel=6)
    sequence = TriggerSequence.model_construct(actions=[bad], loop_count=1)

    with pytest.raises(InvalidChannelError):
        asyncio.run(engine.run(TARGET, sequence))
    assert transport.sent == []
    assert not engine.is_running


def test_negative_loop_count_is_a_programming_error():
    engine, _ = _engine()
    sequence = TriggerSequence.model_construct(actions=[], loop_count=-1)
    with pytest.raises(ValueError):
        asyncio.run(engine.run(TARGET, sequence))


def test_run_does_not_mutate_sequence_and_updates_cache():
    engine, _ = _engine()
    actions = [SetHighAction(channel=4), SetHighAction(channel=5), SetLowAction(channel=4)]
    sequence = TriggerSequence(actions=actions, loop_count=1)
    ids = [a.id for a in sequence.actions]

    asyncio.run(engine.run(TARGET, sequence))

    assert [a.id for a in sequence.actions] == ids
    snapshot = engine.device.snapshot()
    assert snapshot[4] is OutputState.LOW
    assert snapshot[5] is OutputState.HIGH


def test_cancel_before_first_step_stops_infinite_run():
    engine, transport = _engine()
    sequence = TriggerSequence(
        actions=[SetHighAction(channel=0), DelayAction(duration_ms=50)], loop_count=0
    )

    async def _run():
        task = asyncio.create_task(engine.run(TARGET, sequence))
        engine.cancel()
        return await asyncio.wait_for(task, timeout=1.0)

    records = asyncio.run(_run())

    assert [r.command for r in records] == ["(cancelled)"]
    assert transport.sent == []
    assert not engine.is_running


def test_cancel_from_finished_run_does_not_leak_into_next():
    engine, transport = _engine()
    sequence = TriggerSequence(actions=[SetHighAction(channel=0)], loop_count=1)

    def cancel_after(record: CommandRecord) -> None:
        engine.cancel()

    first = asyncio.run(engine.run(TARGET, sequence, on_record=cancel_after))
    second = asyncio.run(engine.run(TARGET, sequence))

    assert [r.description for r in first] == ["DI0 → HIGH"]
    assert [r.description for r in second] == ["DI0 → HIGH"]
    assert len(transport.sent) == 2
