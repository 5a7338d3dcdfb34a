"""Quest availability, ranking and selection.

Pipeline (use ``choose_quests``):
  1. filter  - stat minimums and flag gates decide what may be shown.
  2. rank    - quests preferring the current time range move to the front.
               Time is a ranking hint only; it never hides a quest.
  3. select  - at most ``max_choices`` quests, one of each type first so a
               single easy type cannot crowd out the others.

Every step preserves catalog order as the tie-break.
"""

from __future__ import annotations

from collections.abc import Sequence

from lifegame.models import CharacterState
from lifegame.quests import FlagRequirement, Quest, QuestType, StatRequirement

DEFAULT_MAX_CHOICES = 3


def _meets_stat_requirement(state: CharacterState, requirement: StatRequirement | None) -> bool:
    if requirement is None or not requirement.minimum:
        return True
    return all(state.stats.get(key) >= minimum for key, minimum in requirement.minimum.items())


def _meets_flag_requirement(state: CharacterState, requirement: FlagRequirement | None) -> bool:
    if requirement is None:
        return True
    if any(flag not in state.flags for flag in requirement.required or ()):
        return False
    if any(flag in state.flags for flag in requirement.blocked or ()):
        return False
    return True


def is_quest_available(state: CharacterState, quest: Quest) -> bool:
    """Stat gate AND flag gate. Relevance is deliberately not consulted."""
    availability = quest.availability
    return _meets_stat_requirement(state, availability.stats) and _meets_flag_requirement(
        state, availability.flags
    )


def filter_available_quests(
    state: CharacterState, quests: Sequence[Quest], now_ms: int
) -> list[Quest]:
    return [quest for quest in quests if is_quest_available(state, quest)]


def rank_quests(state: CharacterState, quests: Sequence[Quest], now_ms: int) -> list[Quest]:
    """Stable partition: range-matched quests first, then everything else."""
    current = state.time_context.range
    matched: list[Quest] = []
    unmatched: list[Quest] = []
    for quest in quests:
        if current in quest.preferred_ranges():
            matched.append(quest)
        else:
            unmatched.append(quest)
    return matched + unmatched


def select_quest_choices(
    quests: Sequence[Quest], max_choices: int = DEFAULT_MAX_CHOICES
) -> list[Quest]:
    """Pick up to ``max_choices`` from an already-ranked sequence.

    Pass 1 takes the first quest of each type not yet seen, in rank order.
    Pass 2 fills any remaining slots in rank order, repeating types only when
    there is no other way to reach the quota.
    """
    if len(quests) <= max_choices:
        return list(quests)

    selected: list[Quest] = []
    used_types: set[QuestType] = set()
    for quest in quests:
        if len(selected) >= max_choices:
            break
        if quest.type not in used_types:
            selected.append(quest)
            used_types.add(quest.type)

    chosen_ids = {id(quest) for quest in selected}
    for quest in quests:
        if len(selected) >= max_choices:
            break
        if id(quest) not in chosen_ids:
            selected.append(quest)
            chosen_ids.add(id(quest))

    return selected


def choose_quests(
    state: CharacterState,
    quests: Sequence[Quest],
    now_ms: int,
    max_choices: int = DEFAULT_MAX_CHOICES,
) -> list[Quest]:
    """filter -> rank -> select. The entry point callers should use."""
    available = filter_available_quests(state, quests, now_ms)
    ranked = rank_quests(state, available, now_ms)
    return select_quest_choices(ranked, max_choices)
