"""Engine events: the closed set of outcomes a transition can report.

Events are semantic records. They carry only the payload needed to rebuild a
narrative later and never carry rendered text. On the wire each event is a
dict whose ``type`` field names the kind:

    quest_started         {questId, questType}
    quest_completed       {questId, questType}
    stat_changed          {deltas}              raw requested deltas, not clamped
    flag_changed          {flagsSet?, flagsCleared?}
    quests_unlocked       {questIds}
    time_context_changed  {previousRange, newRange}
    re_entry_suggested    {currentRange}
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from lifegame.models import StatKey, TimeRange, WireModel
from lifegame.quests import QuestType


class EventKind(str, Enum):
    QUEST_STARTED = "quest_started"
    QUEST_COMPLETED = "quest_completed"
    STAT_CHANGED = "stat_changed"
    FLAG_CHANGED = "flag_changed"
    QUESTS_UNLOCKED = "quests_unlocked"
    TIME_CONTEXT_CHANGED = "time_context_changed"
    RE_ENTRY_SUGGESTED = "re_entry_suggested"


class QuestStarted(WireModel):
    type: Literal["quest_started"] = "quest_started"
    quest_id: str
    quest_type: QuestType


class QuestCompleted(WireModel):
    """Consequences were applied. Always the last event of a completion."""

    type: Literal["quest_completed"] = "quest_completed"
    quest_id: str
    quest_type: QuestType


class StatChanged(WireModel):
    type: Literal["stat_changed"] = "stat_changed"
    deltas: dict[StatKey, int]


class FlagChanged(WireModel):
    type: Literal["flag_changed"] = "flag_changed"
    flags_set: tuple[str, ...] | None = None
    flags_cleared: tuple[str, ...] | None = None


class QuestsUnlocked(WireModel):
    """Informational only; lock state is not enforced by the engine."""

    type: Literal["quests_unlocked"] = "quests_unlocked"
    quest_ids: tuple[str, ...]


class TimeContextChanged(WireModel):
    type: Literal["time_context_changed"] = "time_context_changed"
    previous_range: TimeRange
    new_range: TimeRange


class ReEntrySuggested(WireModel):
    """Emitted once on the edge into a gap, never repeated while absent."""

    type: Literal["re_entry_suggested"] = "re_entry_suggested"
    current_range: TimeRange


EngineEvent = Annotated[
    Union[
        QuestStarted,
        QuestCompleted,
        StatChanged,
        FlagChanged,
        QuestsUnlocked,
        TimeContextChanged,
        ReEntrySuggested,
    ],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[EngineEvent] = TypeAdapter(EngineEvent)
_event_list_adapter: TypeAdapter[list[EngineEvent]] = TypeAdapter(list[EngineEvent])


def event_kind(event: EngineEvent) -> EventKind:
    return EventKind(event.type)


def event_to_dict(event: EngineEvent) -> dict[str, Any]:
    return event.to_wire()


def event_from_dict(data: dict[str, Any]) -> EngineEvent:
    """Validate a wire dict into the matching event model."""
    return _event_adapter.validate_python(data)


def events_to_json(events: list[EngineEvent]) -> bytes:
    return _event_list_adapter.dump_json(events, by_alias=True, exclude_none=True)


def events_from_json(data: str | bytes) -> list[EngineEvent]:
    return _event_list_adapter.validate_json(data)
