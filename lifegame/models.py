"""Core state models.

All transitions, rules and the narrative layer operate on these types.
Pydantic is used for validation and serialisation at every data boundary;
models are frozen so a transition always produces a new value.

Wire shapes use camelCase field names (``nowMs``, ``lastMeaningfulActionMs``);
Python attributes stay snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for every frozen, camelCase-on-the-wire model."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StatKey(str, Enum):
    """The three traits. The set is closed."""

    AGENCY = "agency"
    COURAGE = "courage"
    ORDER = "order"


class TimeRange(str, Enum):
    """Coarse recency bucket for the last meaningful action."""

    RECENT = "recent"
    GAP = "gap"
    LONG_GAP = "long_gap"


GAP_RANGES = frozenset({TimeRange.GAP, TimeRange.LONG_GAP})

StatDeltas = dict[StatKey, int]


class Stats(WireModel):
    agency: int = Field(default=0, ge=0)
    courage: int = Field(default=0, ge=0)
    order: int = Field(default=0, ge=0)

    def get(self, key: StatKey) -> int:
        return getattr(self, StatKey(key).value)

    def with_deltas(self, deltas: Mapping[StatKey, int]) -> Stats:
        """Return new stats with each delta applied and floored at zero."""
        update = {}
        for key, delta in deltas.items():
            name = StatKey(key).value
            update[name] = max(0, getattr(self, name) + delta)
        return self.model_copy(update=update)


class TimeContext(WireModel):
    """Recency context. ``now_ms`` is a calculation input only."""

    range: TimeRange
    now_ms: int
    last_meaningful_action_ms: int | None = None


class CharacterState(WireModel):
    """Present-tense player state: stats, flags and time context."""

    stats: Stats
    flags: frozenset[str] = frozenset()
    time_context: TimeContext

    @field_serializer("flags", when_used="json")
    def _sorted_flags(self, flags: frozenset[str]) -> list[str]:
        return sorted(flags)


DEFAULT_STATS = Stats(agency=5, courage=3, order=4)


def new_character_state(now_ms: int, stats: Stats | None = None) -> CharacterState:
    """State for a player seen for the first time: no history means long_gap."""
    return CharacterState(
        stats=stats or DEFAULT_STATS,
        flags=frozenset(),
        time_context=TimeContext(range=TimeRange.LONG_GAP, now_ms=now_ms),
    )
