"""Persisted player snapshot.

The storage-friendly form of a ``CharacterState``: flags become a sorted
list, and two caller-owned fields ride along for completion policy:

    {
      "stats": {"agency": 5, "courage": 3, "order": 4},
      "flags": ["returned-to-action"],
      "timeContext": {"range": "recent", "nowMs": ..., "lastMeaningfulActionMs": ...},
      "completedQuestIds": ["v1-reentry-agency-1"],
      "completedAtByQuestId": {"v1-reentry-agency-1": 1767225600000}
    }

Flag order carries no meaning; ``deserialize_state`` restores a set.

``deserialize_state`` returns the character state only; completion history
stays on the snapshot. The lossless round trip for a stored snapshot is

    snapshot.with_state(deserialize_state(snapshot)) == snapshot

and ``serialize_state`` is for building a snapshot from a bare state (a new
player, or history passed in explicitly).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import Field, field_validator

from lifegame.models import CharacterState, Stats, TimeContext, WireModel


class PlayerSnapshot(WireModel):
    stats: Stats
    flags: list[str] = Field(default_factory=list)
    time_context: TimeContext
    completed_quest_ids: list[str] = Field(default_factory=list)
    completed_at_by_quest_id: dict[str, int] = Field(default_factory=dict)

    @field_validator("flags")
    @classmethod
    def _normalize_flags(cls, flags: list[str]) -> list[str]:
        return sorted(set(flags))

    def state(self) -> CharacterState:
        return deserialize_state(self)

    def with_state(self, state: CharacterState) -> PlayerSnapshot:
        """Same completion history, new character state."""
        return serialize_state(
            state,
            completed_quest_ids=self.completed_quest_ids,
            completed_at_by_quest_id=self.completed_at_by_quest_id,
        )

    def with_completion(self, quest_id: str, now_ms: int) -> PlayerSnapshot:
        completed = list(self.completed_quest_ids)
        if quest_id not in completed:
            completed.append(quest_id)
        completed_at = dict(self.completed_at_by_quest_id)
        completed_at[quest_id] = now_ms
        return self.model_copy(
            update={"completed_quest_ids": completed, "completed_at_by_quest_id": completed_at}
        )


def serialize_state(
    state: CharacterState,
    completed_quest_ids: Iterable[str] = (),
    completed_at_by_quest_id: Mapping[str, int] | None = None,
) -> PlayerSnapshot:
    return PlayerSnapshot(
        stats=state.stats,
        flags=sorted(state.flags),
        time_context=state.time_context,
        completed_quest_ids=list(completed_quest_ids),
        completed_at_by_quest_id=dict(completed_at_by_quest_id or {}),
    )


def deserialize_state(snapshot: PlayerSnapshot) -> CharacterState:
    """Character state only; pair with ``PlayerSnapshot.with_state`` to keep history."""
    return CharacterState(
        stats=snapshot.stats,
        flags=frozenset(snapshot.flags),
        time_context=snapshot.time_context,
    )


def snapshot_to_json(snapshot: PlayerSnapshot) -> str:
    return snapshot.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def snapshot_from_json(data: str | bytes) -> PlayerSnapshot:
    return PlayerSnapshot.model_validate_json(data)


def snapshot_from_dict(data: dict) -> PlayerSnapshot:
    return PlayerSnapshot.model_validate(data)
