"""Tests for lifegame.session: load, tick, act, summarize, persist."""

import pytest

from lifegame import session
from lifegame.catalog import InMemoryQuestCatalog, default_catalog
from lifegame.models import TimeRange
from lifegame.transitions import DAY_MS

T0 = 1_767_225_600_000  # 2026-01-01T00:00:00Z, the make_state default clock


@pytest.fixture
def catalog(make_quest):
    return InMemoryQuestCatalog([
        make_quest("a1", type="agency", consequence={"statChanges": {"agency": 1}}),
        make_quest("o1", type="order", consequence={"flagsToSet": ["tidy"]}),
    ])


def _ctx(storage, settings, now_ms=T0, player_id="p"):
    return {"storage": storage, "player_id": player_id, "now_ms": now_ms, "settings": settings}


def test_first_contact_creates_player(storage, settings):
    result = session.tick_player(**_ctx(storage, settings))
    assert result.events == []
    assert result.summary is None
    assert result.state.time_context.range == TimeRange.LONG_GAP
    assert storage.get_snapshot("p") is not None


def test_list_quests_returns_cards(storage, settings):
    result = session.list_player_quests(catalog=default_catalog(), **_ctx(storage, settings))
    assert len(result.quests) == settings.max_choices
    assert result.quests[0].id == "v1-reentry-agency-1"
    assert "consequence" not in result.quests[0].to_wire()


def test_start_persists_recent_range(storage, settings, catalog):
    result = session.start_player_quest(catalog=catalog, quest_id="a1", **_ctx(storage, settings))
    assert result.summary.title == "Quest started"
    stored = storage.get_snapshot("p")
    assert stored.time_context.range == TimeRange.RECENT
    assert stored.time_context.last_meaningful_action_ms == T0


def test_complete_records_receipt_and_action(storage, settings, catalog):
    result = session.complete_player_quest(
        catalog=catalog, quest_id="a1", action="Sent the email.", **_ctx(storage, settings)
    )
    assert result.state.stats.agency == 6
    assert result.receipt is not None
    assert result.receipt.title == result.summary.title
    assert storage.get_receipts("p") == [result.receipt]
    assert [a.action for a in storage.get_quest_actions("p")] == ["Sent the email."]

    stored = storage.get_snapshot("p")
    assert stored.completed_quest_ids == ["a1"]
    assert stored.completed_at_by_quest_id == {"a1": T0}


def test_blank_action_not_recorded(storage, settings, catalog):
    session.complete_player_quest(catalog=catalog, quest_id="a1", action="   ", **_ctx(storage, settings))
    assert storage.get_quest_actions("p") == []


def test_repeat_completion_inside_cooldown_is_noop(storage, settings, catalog):
    session.complete_player_quest(catalog=catalog, quest_id="a1", **_ctx(storage, settings))
    again = session.complete_player_quest(
        catalog=catalog, quest_id="a1", **_ctx(storage, settings, now_ms=T0 + 60_000)
    )
    assert again.events == []
    assert again.receipt is None
    assert again.state.stats.agency == 6
    assert len(storage.get_receipts("p")) == 1


def test_repeat_completion_after_cooldown(storage, settings, catalog):
    session.complete_player_quest(catalog=catalog, quest_id="a1", **_ctx(storage, settings))
    later = session.complete_player_quest(
        catalog=catalog, quest_id="a1", **_ctx(storage, settings, now_ms=T0 + DAY_MS)
    )
    assert later.state.stats.agency == 7
    assert len(storage.get_receipts("p")) == 2


def test_complete_unknown_quest_is_noop(storage, settings, catalog):
    result = session.complete_player_quest(catalog=catalog, quest_id="ghost", **_ctx(storage, settings))
    assert result.events == []
    assert result.receipt is None
    assert storage.get_receipts("p") == []


def test_return_after_absence(storage, settings, catalog):
    session.complete_player_quest(catalog=catalog, quest_id="o1", **_ctx(storage, settings))
    result = session.tick_player(**_ctx(storage, settings, now_ms=T0 + 3 * DAY_MS))
    assert [e.type for e in result.events] == ["time_context_changed", "re_entry_suggested"]
    assert result.summary.title == "Return to action"
    assert result.state.flags == frozenset({"tidy"})

    quiet = session.tick_player(**_ctx(storage, settings, now_ms=T0 + 4 * DAY_MS))
    assert quiet.events == []


def test_completion_after_gap_combines_events(storage, settings, catalog):
    session.start_player_quest(catalog=catalog, quest_id="a1", **_ctx(storage, settings))
    result = session.complete_player_quest(
        catalog=catalog, quest_id="a1", **_ctx(storage, settings, now_ms=T0 + 10 * DAY_MS)
    )
    types = [e.type for e in result.events]
    assert types[:2] == ["time_context_changed", "re_entry_suggested"]
    assert types[-1] == "quest_completed"
    assert result.summary.title == "Action completed"
    assert result.state.time_context.range == TimeRange.RECENT
