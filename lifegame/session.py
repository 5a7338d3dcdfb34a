"""Player session: one action end-to-end against stored state.

Action flow:
  1. Load the player's snapshot (or create a default one on first contact).
  2. Tick to ``now_ms`` so the time range is current.
  3. Run the engine operation (start, complete, or nothing).
  4. Summarize the combined tick + action events.
  5. Persist the new snapshot, plus a receipt and optional quest action on
     an accepted completion.

Completion policy lives here, outside the pure engine: completing the same
quest again inside ``completion_cooldown_ms`` is a silent no-op, exactly
like an unknown quest id.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from lifegame import engine
from lifegame.catalog import QuestCatalog
from lifegame.config import Settings
from lifegame.events import EngineEvent, QuestCompleted
from lifegame.models import CharacterState, new_character_state
from lifegame.narrative import NarrativeSummary, summarize
from lifegame.quests import QuestCard
from lifegame.receipts import Receipt, new_quest_action, new_receipt
from lifegame.snapshot import PlayerSnapshot, serialize_state
from lifegame.storage import Storage
from lifegame.transitions import Transition

logger = logging.getLogger(__name__)


class ActionResult(NamedTuple):
    state: CharacterState
    events: list[EngineEvent]
    summary: NarrativeSummary | None
    receipt: Receipt | None = None
    quests: tuple[QuestCard, ...] = ()


def load_player(storage: Storage, player_id: str, now_ms: int) -> PlayerSnapshot:
    """Stored snapshot, or a fresh default one saved on first contact."""
    snapshot = storage.get_snapshot(player_id)
    if snapshot is None:
        snapshot = serialize_state(new_character_state(now_ms))
        storage.save_snapshot(player_id, snapshot)
        logger.debug("created player=%s", player_id)
    return snapshot


def completion_allowed(snapshot: PlayerSnapshot, quest_id: str, now_ms: int, cooldown_ms: int) -> bool:
    last = snapshot.completed_at_by_quest_id.get(quest_id)
    if last is None:
        return True
    return now_ms - last >= cooldown_ms


def _ticked(storage: Storage, player_id: str, now_ms: int, settings: Settings) -> tuple[PlayerSnapshot, Transition]:
    snapshot = load_player(storage, player_id, now_ms)
    return snapshot, engine.tick(snapshot.state(), now_ms, settings.thresholds())


def _finish(
    storage: Storage,
    player_id: str,
    snapshot: PlayerSnapshot,
    state: CharacterState,
    events: list[EngineEvent],
) -> ActionResult:
    storage.save_snapshot(player_id, snapshot.with_state(state))
    return ActionResult(state, events, summarize(events, state))


def tick_player(*, storage: Storage, player_id: str, now_ms: int, settings: Settings) -> ActionResult:
    snapshot, ticked = _ticked(storage, player_id, now_ms, settings)
    return _finish(storage, player_id, snapshot, ticked.state, ticked.events)


def list_player_quests(
    *, storage: Storage, catalog: QuestCatalog, player_id: str, now_ms: int, settings: Settings
) -> ActionResult:
    """Tick, then choose the quests to show."""
    snapshot, ticked = _ticked(storage, player_id, now_ms, settings)
    result = _finish(storage, player_id, snapshot, ticked.state, ticked.events)
    quests = engine.get_available_quests(ticked.state, catalog, now_ms, settings.max_choices)
    return result._replace(quests=tuple(q.to_card() for q in quests))


def start_player_quest(
    *,
    storage: Storage,
    catalog: QuestCatalog,
    player_id: str,
    quest_id: str,
    now_ms: int,
    settings: Settings,
) -> ActionResult:
    snapshot, ticked = _ticked(storage, player_id, now_ms, settings)
    started = engine.start_quest(ticked.state, quest_id, catalog, now_ms)
    return _finish(storage, player_id, snapshot, started.state, ticked.events + started.events)


def complete_player_quest(
    *,
    storage: Storage,
    catalog: QuestCatalog,
    player_id: str,
    quest_id: str,
    now_ms: int,
    settings: Settings,
    action: str | None = None,
) -> ActionResult:
    """Complete a quest, subject to the per-quest cooldown."""
    snapshot, ticked = _ticked(storage, player_id, now_ms, settings)

    if not completion_allowed(snapshot, quest_id, now_ms, settings.completion_cooldown_ms):
        logger.info("completion of %r inside cooldown for player=%s, nothing to do", quest_id, player_id)
        return _finish(storage, player_id, snapshot, ticked.state, ticked.events)

    completed = engine.complete_quest(ticked.state, quest_id, catalog, now_ms)
    events = ticked.events + completed.events
    summary = summarize(events, completed.state)

    done = [e for e in completed.events if isinstance(e, QuestCompleted)]
    if not done or summary is None:
        storage.save_snapshot(player_id, snapshot.with_state(completed.state))
        return ActionResult(completed.state, events, summary)

    storage.save_snapshot(
        player_id, snapshot.with_state(completed.state).with_completion(quest_id, now_ms)
    )
    receipt = new_receipt(summary, quest_id, done[0].quest_type, now_ms)
    storage.append_receipt(player_id, receipt)
    if action and action.strip():
        storage.append_quest_action(player_id, new_quest_action(quest_id, action, now_ms))

    return ActionResult(completed.state, events, summary, receipt)
