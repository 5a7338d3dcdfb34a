"""Receipts and recorded quest actions.

A receipt is a small shareable record created when a completion is accepted.
A quest action is the player's own note about what they did.
"""

from __future__ import annotations

import uuid

from pydantic import Field

from lifegame.models import WireModel
from lifegame.narrative import SHARE_TEXT_MAX, NarrativeSummary, NarrativeTone, default_share_text
from lifegame.quests import QuestType


class Receipt(WireModel):
    id: str
    created_at_ms: int
    quest_id: str
    quest_type: QuestType
    tone: NarrativeTone
    title: str
    line: str
    share_text: str = Field(max_length=SHARE_TEXT_MAX)


class QuestAction(WireModel):
    id: str
    quest_id: str
    action: str = Field(min_length=1)
    created_at_ms: int


def new_receipt(
    summary: NarrativeSummary, quest_id: str, quest_type: QuestType, now_ms: int
) -> Receipt:
    return Receipt(
        id=str(uuid.uuid4()),
        created_at_ms=now_ms,
        quest_id=quest_id,
        quest_type=quest_type,
        tone=summary.tone,
        title=summary.title,
        line=summary.line,
        share_text=summary.share_text or default_share_text(quest_type),
    )


def new_quest_action(quest_id: str, action: str, now_ms: int) -> QuestAction:
    return QuestAction(
        id=str(uuid.uuid4()),
        quest_id=quest_id,
        action=action.strip(),
        created_at_ms=now_ms,
    )
