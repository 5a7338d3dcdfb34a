"""Tests for lifegame.transitions: time ranges, ticks, quest start and completion."""

from lifegame.events import (
    FlagChanged,
    QuestCompleted,
    QuestStarted,
    QuestsUnlocked,
    ReEntrySuggested,
    StatChanged,
    TimeContextChanged,
)
from lifegame.models import StatKey, Stats, TimeRange
from lifegame.quests import QuestType
from lifegame.transitions import (
    DAY_MS,
    TimeThresholds,
    apply_quest_completed,
    apply_quest_started,
    apply_time_tick,
    compute_time_range,
)

T0 = 1_767_225_600_000  # 2026-01-01T00:00:00Z, the make_state default clock


# ── compute_time_range ──────────────────────────────────────


def test_no_history_is_long_gap():
    assert compute_time_range(None, T0) == TimeRange.LONG_GAP


def test_range_boundaries():
    assert compute_time_range(T0, T0) == TimeRange.RECENT
    assert compute_time_range(T0, T0 + 2 * DAY_MS - 1) == TimeRange.RECENT
    assert compute_time_range(T0, T0 + 2 * DAY_MS) == TimeRange.GAP
    assert compute_time_range(T0, T0 + 7 * DAY_MS - 1) == TimeRange.GAP
    assert compute_time_range(T0, T0 + 7 * DAY_MS) == TimeRange.LONG_GAP


def test_clock_going_backwards_counts_as_recent():
    assert compute_time_range(T0, T0 - DAY_MS) == TimeRange.RECENT


def test_custom_thresholds():
    thresholds = TimeThresholds(recent_ms=1000, long_gap_ms=5000)
    assert compute_time_range(0, 999, thresholds) == TimeRange.RECENT
    assert compute_time_range(0, 1000, thresholds) == TimeRange.GAP
    assert compute_time_range(0, 5000, thresholds) == TimeRange.LONG_GAP


# ── apply_time_tick ─────────────────────────────────────────


def test_tick_recent_to_gap(make_state):
    state = make_state(range=TimeRange.RECENT, last_action_ms=T0)
    result = apply_time_tick(state, T0 + 3 * DAY_MS)
    assert result.state.time_context.range == TimeRange.GAP
    assert result.events == [
        TimeContextChanged(previous_range=TimeRange.RECENT, new_range=TimeRange.GAP),
        ReEntrySuggested(current_range=TimeRange.GAP),
    ]


def test_tick_recent_to_long_gap(make_state):
    state = make_state(range=TimeRange.RECENT, last_action_ms=T0)
    result = apply_time_tick(state, T0 + 8 * DAY_MS)
    assert result.state.time_context.range == TimeRange.LONG_GAP
    assert result.events == [
        TimeContextChanged(previous_range=TimeRange.RECENT, new_range=TimeRange.LONG_GAP),
        ReEntrySuggested(current_range=TimeRange.LONG_GAP),
    ]


def test_re_entry_not_repeated_while_absent(make_state):
    state = make_state(range=TimeRange.RECENT, last_action_ms=T0)
    first = apply_time_tick(state, T0 + 3 * DAY_MS)
    second = apply_time_tick(first.state, T0 + 4 * DAY_MS)
    assert second.events == []

    third = apply_time_tick(second.state, T0 + 9 * DAY_MS)
    assert third.events == [
        TimeContextChanged(previous_range=TimeRange.GAP, new_range=TimeRange.LONG_GAP),
    ]


def test_tick_without_change_emits_nothing(make_state):
    state = make_state(range=TimeRange.RECENT, last_action_ms=T0)
    result = apply_time_tick(state, T0 + DAY_MS)
    assert result.events == []
    assert result.state.time_context.now_ms == T0 + DAY_MS
    assert result.state.time_context.last_meaningful_action_ms == T0


def test_tick_never_changes_stats(make_state):
    state = make_state(agency=9, courage=1, order=0, flags={"x"})
    for days in (1, 3, 8, 30, 365):
        result = apply_time_tick(state, T0 + days * DAY_MS)
        assert result.state.stats == state.stats
        assert result.state.flags == state.flags


def test_tick_new_player_stays_long_gap(make_state):
    state = make_state(range=TimeRange.LONG_GAP, last_action_ms=None)
    result = apply_time_tick(state, T0 + DAY_MS)
    assert result.events == []
    assert result.state.time_context.range == TimeRange.LONG_GAP


def test_tick_does_not_mutate_input(make_state):
    state = make_state(range=TimeRange.RECENT, last_action_ms=T0)
    apply_time_tick(state, T0 + 10 * DAY_MS)
    assert state.time_context.range == TimeRange.RECENT
    assert state.time_context.now_ms == T0


# ── apply_quest_started ─────────────────────────────────────


def test_start_from_gap_forces_recent(make_state):
    state = make_state(range=TimeRange.LONG_GAP, last_action_ms=None)
    result = apply_quest_started(state, "q1", QuestType.AGENCY, T0 + 5)
    assert result.events == [
        TimeContextChanged(previous_range=TimeRange.LONG_GAP, new_range=TimeRange.RECENT),
        QuestStarted(quest_id="q1", quest_type=QuestType.AGENCY),
    ]
    assert result.state.time_context.range == TimeRange.RECENT
    assert result.state.time_context.last_meaningful_action_ms == T0 + 5


def test_start_while_recent_emits_only_started(make_state):
    state = make_state(range=TimeRange.RECENT)
    result = apply_quest_started(state, "q1", QuestType.ORDER, T0 + 10)
    assert result.events == [QuestStarted(quest_id="q1", quest_type=QuestType.ORDER)]


def test_start_does_not_apply_consequence(make_state):
    state = make_state()
    result = apply_quest_started(state, "q1", QuestType.COURAGE, T0)
    assert result.state.stats == state.stats
    assert result.state.flags == state.flags


# ── apply_quest_completed ───────────────────────────────────


def test_completion_clamps_stats(make_state, make_quest):
    state = make_state(agency=5, courage=2, order=3)
    quest = make_quest("q1", consequence={"statChanges": {"agency": 2, "courage": -5}})
    result = apply_quest_completed(state, quest, T0)
    assert result.state.stats == Stats(agency=7, courage=0, order=3)


def test_stat_changed_carries_raw_deltas(make_state, make_quest):
    state = make_state(courage=2)
    quest = make_quest("q1", consequence={"statChanges": {"courage": -5}})
    result = apply_quest_completed(state, quest, T0)
    assert result.events[0] == StatChanged(deltas={StatKey.COURAGE: -5})


def test_completion_event_order(make_state, make_quest):
    state = make_state(range=TimeRange.GAP, flags={"old"}, last_action_ms=T0 - 3 * DAY_MS)
    quest = make_quest(
        "q1",
        type="courage",
        consequence={
            "statChanges": {"courage": 1},
            "flagsToSet": ["new"],
            "flagsToClear": ["old"],
            "unlocksQuests": ["q2"],
        },
    )
    result = apply_quest_completed(state, quest, T0)
    assert [e.type for e in result.events] == [
        "stat_changed",
        "flag_changed",
        "quests_unlocked",
        "time_context_changed",
        "quest_completed",
    ]
    assert result.events[1] == FlagChanged(flags_set=("new",), flags_cleared=("old",))
    assert result.events[2] == QuestsUnlocked(quest_ids=("q2",))
    assert result.events[-1] == QuestCompleted(quest_id="q1", quest_type=QuestType.COURAGE)
    assert result.state.flags == frozenset({"new"})


def test_completion_skips_empty_steps(make_state, make_quest):
    state = make_state(range=TimeRange.RECENT)
    quest = make_quest("q1", consequence={"statChanges": {}, "flagsToSet": [], "unlocksQuests": []})
    result = apply_quest_completed(state, quest, T0 + 1)
    assert result.events == [QuestCompleted(quest_id="q1", quest_type=QuestType.AGENCY)]


def test_setting_present_flag_is_noop(make_state, make_quest):
    state = make_state(flags={"a"})
    quest = make_quest("q1", consequence={"flagsToSet": ["a"], "flagsToClear": ["missing"]})
    result = apply_quest_completed(state, quest, T0)
    assert result.state.flags == frozenset({"a"})


def test_completion_marks_meaningful_action(make_state, make_quest):
    state = make_state(range=TimeRange.LONG_GAP, last_action_ms=None)
    quest = make_quest("q1", consequence={"statChanges": {"agency": 1}})
    result = apply_quest_completed(state, quest, T0 + 42)
    assert result.state.time_context.range == TimeRange.RECENT
    assert result.state.time_context.last_meaningful_action_ms == T0 + 42
    assert TimeContextChanged(previous_range=TimeRange.LONG_GAP, new_range=TimeRange.RECENT) in result.events


def test_completion_does_not_mutate_input(make_state, make_quest):
    state = make_state(agency=1, flags={"a"})
    quest = make_quest("q1", consequence={"statChanges": {"agency": 3}, "flagsToClear": ["a"]})
    apply_quest_completed(state, quest, T0)
    assert state.stats.agency == 1
    assert state.flags == frozenset({"a"})
