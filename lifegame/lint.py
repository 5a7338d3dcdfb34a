"""Quest authoring checks.

The ``Quest`` schema already guarantees types (closed quest type and stat
keys, string fields). These checks cover the authoring rules a schema cannot
express:

  context-non-empty, real-world-action-non-empty, constraint-non-empty
  reflection-non-empty         reflection, when present, is not blank
  consequence-changes-something
  constraint-punctuation       constraint ends with . ! or ?
  *-length                     context <= 360, realWorldAction <= 240,
                               constraint <= 240, reflection <= 140
  no-guilt-shame               no phrase from GUILT_SHAME_PHRASES

``lint_quests`` adds cross-quest checks: duplicate-id and unknown-unlock.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel

from lifegame.quests import Quest

GUILT_SHAME_PHRASES = (
    "should have",
    "lazy",
    "failed",
    "make up for",
    "no excuses",
)

LENGTH_CAPS = {
    "context": 360,
    "real_world_action": 240,
    "constraint": 240,
    "reflection": 140,
}

_RULE_NAMES = {
    "context": "context",
    "real_world_action": "real-world-action",
    "constraint": "constraint",
    "reflection": "reflection",
}


class LintIssue(BaseModel):
    quest_id: str
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.quest_id}: [{self.rule}] {self.message}"


def contains_guilt_shame(text: str) -> bool:
    lower = text.lower()
    return any(phrase in lower for phrase in GUILT_SHAME_PHRASES)


def lint_quest(quest: Quest) -> list[LintIssue]:
    """Return every authoring problem found in a single quest."""
    issues: list[LintIssue] = []

    def issue(rule: str, message: str) -> None:
        issues.append(LintIssue(quest_id=quest.id, rule=rule, message=message))

    for field in ("context", "real_world_action", "constraint"):
        if not getattr(quest, field).strip():
            issue(f"{_RULE_NAMES[field]}-non-empty", f"{field} must be a non-empty string")

    if quest.reflection is not None and not quest.reflection.strip():
        issue("reflection-non-empty", "reflection must be a non-empty string if provided")

    if quest.consequence.is_empty():
        issue(
            "consequence-changes-something",
            "consequence must change something (statChanges, flagsToSet, flagsToClear or unlocksQuests)",
        )

    constraint = quest.constraint.strip()
    if constraint and constraint[-1] not in ".!?":
        issue("constraint-punctuation", "constraint must end with punctuation (. ! or ?)")

    for field, cap in LENGTH_CAPS.items():
        value = getattr(quest, field)
        if value is not None and len(value) > cap:
            issue(f"{_RULE_NAMES[field]}-length", f"{field} must be <= {cap} chars, got {len(value)}")

    for field in LENGTH_CAPS:
        value = getattr(quest, field)
        if value and contains_guilt_shame(value):
            issue("no-guilt-shame", f"{field} contains guilt/shame language")

    return issues


def lint_quests(quests: Sequence[Quest]) -> list[LintIssue]:
    """Lint each quest, then check ids and unlock targets across the set."""
    issues: list[LintIssue] = []
    seen: set[str] = set()
    for quest in quests:
        if quest.id in seen:
            issues.append(LintIssue(quest_id=quest.id, rule="duplicate-id", message="quest id is defined more than once"))
        seen.add(quest.id)
        issues.extend(lint_quest(quest))

    for quest in quests:
        for target in quest.consequence.unlocks_quests or ():
            if target not in seen:
                issues.append(
                    LintIssue(
                        quest_id=quest.id,
                        rule="unknown-unlock",
                        message=f"unlocksQuests references unknown quest {target!r}",
                    )
                )
    return issues
