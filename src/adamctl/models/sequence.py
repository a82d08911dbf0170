"""Trigger sequence models.

Actions form a closed, tagged union keyed on ``type``. Actions are immutable
and carry a stable ``id`` so editors can reorder or remove them by identity.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, ClassVar, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, TypeAdapter

from adamctl.models.device import OUTPUT_COUNT, OutputState


class _BaseAction(BaseModel):
    model_config = {"frozen": True}

    id: UUID = Field(default_factory=uuid4)


class SetHighAction(_BaseAction):
    type: Literal["set_high"] = "set_high"
    channel: int = Field(ge=0, lt=OUTPUT_COUNT)

    action_type: ClassVar[str] = "Set HIGH"
    state: ClassVar[OutputState] = OutputState.HIGH

    @property
    def description(self) -> str:
        return f"DI{self.channel} → HIGH"


class SetLowAction(_BaseAction):
    type: Literal["set_low"] = "set_low"
    channel: int = Field(ge=0, lt=OUTPUT_COUNT)

    action_type: ClassVar[str] = "Set LOW"
    state: ClassVar[OutputState] = OutputState.LOW

    @property
    def description(self) -> str:
        return f"DI{self.channel} → LOW"


class DelayAction(_BaseAction):
    type: Literal["delay"] = "delay"
    duration_ms: int = Field(default=1000, ge=0)

    action_type: ClassVar[str] = "Delay"

    @property
    def description(self) -> str:
        if self.duration_ms < 1000:
            return f"Delay {self.duration_ms}ms"
        if self.duration_ms % 1000 == 0:
            return f"Delay {self.duration_ms // 1000}s"
        return f"Delay {self.duration_ms / 1000:.1f}s"


SequenceAction = Annotated[
    Union[SetHighAction, SetLowAction, DelayAction],
    Field(discriminator="type"),
]


class TriggerSequence(BaseModel):
    """Named, ordered, loopable list of actions.

    ``loop_count`` of 0 repeats forever; an empty action list is legal and
    executes nothing.
    """

    model_config = {"validate_assignment": True}

    id: UUID = Field(default_factory=uuid4)
    name: str = "New Sequence"
    description: str = ""
    actions: list[SequenceAction] = Field(default_factory=list)
    loop_count: int = Field(default=1, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)
    modified_at: datetime = Field(default_factory=datetime.now)

    @property
    def action_count(self) -> int:
        return len(self.actions)

    @property
    def total_delay_ms(self) -> int:
        """Sum of all delay durations in one loop."""
        return sum(a.duration_ms for a in self.actions if isinstance(a, DelayAction))

    def touch(self) -> None:
        self.modified_at = datetime.now()

    def add_action(self, action: SequenceAction) -> None:
        self.actions = [*self.actions, action]
        self.touch()

    def remove_action(self, action_id: UUID) -> bool:
        remaining = [a for a in self.actions if a.id != action_id]
        if len(remaining) == len(self.actions):
            return False
        self.actions = remaining
        self.touch()
        return True

    def move_action(self, action_id: UUID, offset: int) -> bool:
        """Move an action by ``offset`` places; out-of-range moves are no-ops."""
        index = self._index_of(action_id)
        if index is None:
            return False
        new_index = index + offset
        if offset == 0 or new_index < 0 or new_index >= len(self.actions):
            return False
        actions = list(self.actions)
        actions.insert(new_index, actions.pop(index))
        self.actions = actions
        self.touch()
        return True

    def _index_of(self, action_id: UUID) -> int | None:
        for index, action in enumerate(self.actions):
            if action.id == action_id:
                return index
        return None


SequenceList = TypeAdapter(list[TriggerSequence])


def example_sequence() -> TriggerSequence:
    """Sequence offered to first-time users."""
    return TriggerSequence(
        name="Example: Door Cycle",
        description="Opens and closes a door with delays",
        actions=[
            SetHighAction(channel=0),
            DelayAction(duration_ms=2000),
            SetLowAction(channel=0),
            DelayAction(duration_ms=1000),
        ],
        loop_count=1,
    )
