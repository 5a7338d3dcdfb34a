"""Pure state transitions.

Each function takes a ``CharacterState`` and returns a ``Transition``: the new
state plus the ordered events describing what changed. Nothing here performs
IO, logs, or mutates its input.

Time:
  The range is derived from the last meaningful action (starting or completing
  a quest), never from the last visit. Inactivity only moves the range; stats
  are never reduced by the passage of time.

Completion event order is fixed and consumers rely on it:
  stat_changed -> flag_changed -> quests_unlocked -> time_context_changed
  -> quest_completed (always last)
"""

from __future__ import annotations

from typing import NamedTuple

from lifegame.events import (
    EngineEvent,
    FlagChanged,
    QuestCompleted,
    QuestStarted,
    QuestsUnlocked,
    ReEntrySuggested,
    StatChanged,
    TimeContextChanged,
)
from lifegame.models import GAP_RANGES, CharacterState, TimeContext, TimeRange
from lifegame.quests import Quest, QuestType

DAY_MS = 24 * 60 * 60 * 1000


class TimeThresholds(NamedTuple):
    """Coarse boundaries between ranges, in milliseconds."""

    recent_ms: int = 2 * DAY_MS
    long_gap_ms: int = 7 * DAY_MS


DEFAULT_THRESHOLDS = TimeThresholds()


class Transition(NamedTuple):
    state: CharacterState
    events: list[EngineEvent]


def compute_time_range(
    last_meaningful_action_ms: int | None,
    now_ms: int,
    thresholds: TimeThresholds = DEFAULT_THRESHOLDS,
) -> TimeRange:
    """Classify elapsed time since the last meaningful action."""
    if last_meaningful_action_ms is None:
        return TimeRange.LONG_GAP

    elapsed = max(0, now_ms - last_meaningful_action_ms)
    if elapsed < thresholds.recent_ms:
        return TimeRange.RECENT
    if elapsed < thresholds.long_gap_ms:
        return TimeRange.GAP
    return TimeRange.LONG_GAP


def _range_change(previous: TimeRange, new: TimeRange) -> list[EngineEvent]:
    if previous == new:
        return []
    return [TimeContextChanged(previous_range=previous, new_range=new)]


def _meaningful_action(state: CharacterState, now_ms: int) -> tuple[TimeContext, list[EngineEvent]]:
    """Starting or completing a quest resets the range to recent."""
    events = _range_change(state.time_context.range, TimeRange.RECENT)
    context = TimeContext(
        range=TimeRange.RECENT,
        now_ms=now_ms,
        last_meaningful_action_ms=now_ms,
    )
    return context, events


def apply_time_tick(
    state: CharacterState,
    now_ms: int,
    thresholds: TimeThresholds = DEFAULT_THRESHOLDS,
) -> Transition:
    """Advance the clock. Stats and flags are left untouched."""
    previous = state.time_context.range
    new = compute_time_range(state.time_context.last_meaningful_action_ms, now_ms, thresholds)

    events = _range_change(previous, new)
    # Edge-triggered: only on the step from non-gap into a gap range.
    if new in GAP_RANGES and previous not in GAP_RANGES:
        events.append(ReEntrySuggested(current_range=new))

    context = state.time_context.model_copy(update={"range": new, "now_ms": now_ms})
    return Transition(state.model_copy(update={"time_context": context}), events)


def apply_quest_started(
    state: CharacterState,
    quest_id: str,
    quest_type: QuestType,
    now_ms: int,
) -> Transition:
    """Record the start of a quest. The consequence is not applied."""
    context, events = _meaningful_action(state, now_ms)
    events.append(QuestStarted(quest_id=quest_id, quest_type=quest_type))
    return Transition(state.model_copy(update={"time_context": context}), events)


def apply_quest_completed(
    state: CharacterState,
    quest: Quest,
    now_ms: int,
) -> Transition:
    """Apply the quest consequence and mark the completion as meaningful."""
    consequence = quest.consequence
    events: list[EngineEvent] = []

    stats = state.stats
    if consequence.stat_changes:
        stats = stats.with_deltas(consequence.stat_changes)
        events.append(StatChanged(deltas=dict(consequence.stat_changes)))

    flags = state.flags
    if consequence.flags_to_set or consequence.flags_to_clear:
        flags = (flags | frozenset(consequence.flags_to_set or ())) - frozenset(
            consequence.flags_to_clear or ()
        )
        events.append(
            FlagChanged(
                flags_set=consequence.flags_to_set or None,
                flags_cleared=consequence.flags_to_clear or None,
            )
        )

    if consequence.unlocks_quests:
        events.append(QuestsUnlocked(quest_ids=consequence.unlocks_quests))

    context, time_events = _meaningful_action(state, now_ms)
    events.extend(time_events)

    events.append(QuestCompleted(quest_id=quest.id, quest_type=quest.type))

    new_state = state.model_copy(
        update={"stats": stats, "flags": flags, "time_context": context}
    )
    return Transition(new_state, events)
