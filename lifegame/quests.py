"""Quest definitions.

A quest is a real-world action framed by context and a constraint, with a
consequence applied on completion and availability conditions evaluated by
``lifegame.rules``. This module holds the types only; evaluation lives
elsewhere.

Quest files use the camelCase wire names::

    {
      "id": "v1-order-remove-friction",
      "type": "order",
      "context": "...",
      "realWorldAction": "...",
      "constraint": "...",
      "reflection": "...",
      "consequence": {"statChanges": {"order": 1}, "flagsToSet": ["removed-friction"]},
      "availability": {"stats": {"minimum": {"order": 2}},
                       "relevance": {"preferredRanges": ["recent", "gap"]}}
    }
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from lifegame.models import StatKey, TimeRange, WireModel


class QuestType(str, Enum):
    """Quest intent. One per trait."""

    AGENCY = "agency"
    COURAGE = "courage"
    ORDER = "order"


class Consequence(WireModel):
    """State changes applied when a quest is completed."""

    stat_changes: dict[StatKey, int] | None = None
    flags_to_set: tuple[str, ...] | None = None
    flags_to_clear: tuple[str, ...] | None = None
    unlocks_quests: tuple[str, ...] | None = None

    def is_empty(self) -> bool:
        return not (
            self.stat_changes
            or self.flags_to_set
            or self.flags_to_clear
            or self.unlocks_quests
        )


class StatRequirement(WireModel):
    minimum: dict[StatKey, int] | None = None


class FlagRequirement(WireModel):
    required: tuple[str, ...] | None = None
    blocked: tuple[str, ...] | None = None


class Relevance(WireModel):
    """Ranking hint only; never used to hide a quest."""

    preferred_ranges: tuple[TimeRange, ...] | None = None


class Availability(WireModel):
    stats: StatRequirement | None = None
    flags: FlagRequirement | None = None
    relevance: Relevance | None = None


class QuestCard(WireModel):
    """What the player sees: no consequence, no gating."""

    id: str
    type: QuestType
    context: str
    real_world_action: str
    constraint: str
    reflection: str | None = None


class Quest(WireModel):
    id: str = Field(min_length=1)
    type: QuestType
    context: str
    real_world_action: str
    constraint: str
    reflection: str | None = None
    consequence: Consequence = Consequence()
    availability: Availability = Availability()

    def preferred_ranges(self) -> tuple[TimeRange, ...]:
        relevance = self.availability.relevance
        if relevance is None or not relevance.preferred_ranges:
            return ()
        return relevance.preferred_ranges

    def to_card(self) -> QuestCard:
        return QuestCard(
            id=self.id,
            type=self.type,
            context=self.context,
            real_world_action=self.real_world_action,
            constraint=self.constraint,
            reflection=self.reflection,
        )
