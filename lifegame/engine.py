"""Engine facade: transitions plus catalog lookups.

Unknown quest ids are a silent no-op (unchanged state, no events). The
system never fails loudly on player input.
"""

from __future__ import annotations

import logging

from lifegame.catalog import QuestCatalog
from lifegame.models import CharacterState
from lifegame.quests import Quest
from lifegame.rules import DEFAULT_MAX_CHOICES, choose_quests
from lifegame.transitions import (
    DEFAULT_THRESHOLDS,
    TimeThresholds,
    Transition,
    apply_quest_completed,
    apply_quest_started,
    apply_time_tick,
)

logger = logging.getLogger(__name__)


def tick(
    state: CharacterState,
    now_ms: int,
    thresholds: TimeThresholds = DEFAULT_THRESHOLDS,
) -> Transition:
    return apply_time_tick(state, now_ms, thresholds)


def start_quest(
    state: CharacterState, quest_id: str, catalog: QuestCatalog, now_ms: int
) -> Transition:
    quest = catalog.get_quest_by_id(quest_id)
    if quest is None:
        logger.debug("start_quest: unknown quest %r, nothing to do", quest_id)
        return Transition(state, [])
    return apply_quest_started(state, quest.id, quest.type, now_ms)


def complete_quest(
    state: CharacterState, quest_id: str, catalog: QuestCatalog, now_ms: int
) -> Transition:
    quest = catalog.get_quest_by_id(quest_id)
    if quest is None:
        logger.debug("complete_quest: unknown quest %r, nothing to do", quest_id)
        return Transition(state, [])
    return apply_quest_completed(state, quest, now_ms)


def get_available_quests(
    state: CharacterState,
    catalog: QuestCatalog,
    now_ms: int,
    max_choices: int = DEFAULT_MAX_CHOICES,
) -> list[Quest]:
    """The small set of quests to show right now."""
    return choose_quests(state, catalog.list_all(), now_ms, max_choices)
