"""Narrative layer: turns engine events into one short player-facing summary.

Only one event is voiced per call, chosen by fixed priority regardless of the
order events arrive in:

  1. quest_completed
  2. quest_started
  3. re_entry_suggested
  4. time_context_changed
  5. stat_changed
  6. flag_changed

quests_unlocked is never voiced on its own. An empty event list yields None;
silence is a valid answer.

Text comes only from the closed template table below (Handlebars, rendered
with pybars). Templates are keyed by event kind and, where it matters, by
quest type, time range or stat direction. Nothing is interpolated except the
fixed trait labels, so the wording stays observational by construction.

Limits: title <= 32 chars, line <= 140 chars, shareText <= 180 chars
(quest_completed only). NarrativeSummary validates them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from enum import Enum
from typing import Any, NamedTuple, assert_never

import pybars
from pydantic import Field

from lifegame.events import (
    EngineEvent,
    EventKind,
    FlagChanged,
    QuestCompleted,
    QuestStarted,
    QuestsUnlocked,
    ReEntrySuggested,
    StatChanged,
    TimeContextChanged,
)
from lifegame.models import CharacterState, StatKey, TimeRange, WireModel
from lifegame.quests import QuestType

TITLE_MAX = 32
LINE_MAX = 140
SHARE_TEXT_MAX = 180


class NarrativeTone(str, Enum):
    WARM = "warm"
    CALM = "calm"


class NarrativeSummary(WireModel):
    tone: NarrativeTone
    title: str = Field(max_length=TITLE_MAX)
    line: str = Field(max_length=LINE_MAX)
    share_text: str | None = Field(default=None, max_length=SHARE_TEXT_MAX)


class NarrativeTemplateError(Exception):
    """Raised when a narrative template fails to compile or render."""


class Template(NamedTuple):
    tone: NarrativeTone
    title: str
    line: str
    share_text: str | None = None


PRIORITY: tuple[EventKind, ...] = (
    EventKind.QUEST_COMPLETED,
    EventKind.QUEST_STARTED,
    EventKind.RE_ENTRY_SUGGESTED,
    EventKind.TIME_CONTEXT_CHANGED,
    EventKind.STAT_CHANGED,
    EventKind.FLAG_CHANGED,
)

LABELS: dict[str, str] = {
    StatKey.AGENCY.value: "Agency",
    StatKey.COURAGE.value: "Courage",
    StatKey.ORDER.value: "Order",
}

# ── Template table ──────────────────────────────────────────

COMPLETED: dict[QuestType, Template] = {
    QuestType.AGENCY: Template(
        NarrativeTone.WARM,
        "Action completed",
        "You took a step. {{{label}}} grows through action, not planning.",
        "Took a step forward. {{{label}}} grows through action. Small steps compound.",
    ),
    QuestType.COURAGE: Template(
        NarrativeTone.WARM,
        "Truth spoken",
        "You said the thing. {{{label}}} builds each time you stay with it.",
        "Spoke a truth. {{{label}}} builds through practice. Small steps compound.",
    ),
    QuestType.ORDER: Template(
        NarrativeTone.WARM,
        "Friction removed",
        "One obstacle is gone. {{{label}}} makes room for what comes next.",
        "Removed one obstacle. {{{label}}} creates space for action. Small steps compound.",
    ),
}

STARTED = Template(
    NarrativeTone.CALM,
    "Quest started",
    "You began. For {{{label}}}, starting is enough. The rest can follow.",
)

RE_ENTRY: dict[TimeRange, Template] = {
    TimeRange.RECENT: Template(
        NarrativeTone.CALM,
        "Welcome back",
        "Your next step remains available whenever it suits you.",
    ),
    TimeRange.GAP: Template(
        NarrativeTone.CALM,
        "Return to action",
        "Time away is information, not judgment. A small step is here when you're ready.",
    ),
    TimeRange.LONG_GAP: Template(
        NarrativeTone.CALM,
        "Return to action",
        "Some time has passed. Whenever you like, one small step is enough.",
    ),
}

TIME_CHANGED: dict[TimeRange, Template] = {
    TimeRange.RECENT: Template(
        NarrativeTone.CALM,
        "Momentum building",
        "Recent action shifts context. The path forward feels clearer.",
    ),
    TimeRange.GAP: Template(
        NarrativeTone.CALM,
        "Time passed",
        "Context shifted. When you return, a small step will be waiting.",
    ),
    TimeRange.LONG_GAP: Template(
        NarrativeTone.CALM,
        "Time passed",
        "Time moves forward. Your next step remains available.",
    ),
}

STAT_GROWTH = Template(
    NarrativeTone.WARM,
    "Growth noticed",
    "{{{labels}}} shifts through action. Patterns emerge over time.",
)

STAT_SETTLED = Template(
    NarrativeTone.CALM,
    "Traits settling",
    "{{{labels}}} settles. Traits move slowly and patterns emerge over time.",
)

FLAGS_SET = Template(
    NarrativeTone.CALM,
    "Path opened",
    "Your choices shape what becomes available next.",
)

FLAGS_CLEARED = Template(
    NarrativeTone.CALM,
    "State updated",
    "Something shifted. The path forward adjusts.",
)


def iter_templates() -> Iterator[Template]:
    """Every template in the table, for review and tests."""
    yield from COMPLETED.values()
    yield STARTED
    yield from RE_ENTRY.values()
    yield from TIME_CHANGED.values()
    yield from (STAT_GROWTH, STAT_SETTLED, FLAGS_SET, FLAGS_CLEARED)


# ── Rendering ───────────────────────────────────────────────

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


def _render(source: str, context: dict[str, Any]) -> str:
    """Compile (cached by source) and render one Handlebars string."""
    try:
        compiled = _cache.get(source)
        if compiled is None:
            compiled = _compiler.compile(source)
            _cache[source] = compiled
        return str(compiled(context))
    except Exception as e:
        raise NarrativeTemplateError(f"Template error in {source!r}: {e}") from e


def render_template(template: Template, context: dict[str, Any]) -> NarrativeSummary:
    title = _render(template.title, context)
    line = _render(template.line, context)
    if not title.strip() or not line.strip():
        raise NarrativeTemplateError(f"Template rendered an empty title or line: {template.title!r}")
    share_text = None
    if template.share_text is not None:
        share_text = _render(template.share_text, context)
    return NarrativeSummary(
        tone=template.tone,
        title=title,
        line=line,
        share_text=share_text,
    )


def _join_labels(keys: Sequence[str]) -> str:
    return " and ".join(LABELS[StatKey(key).value] for key in keys)


def _summarize_event(event: EngineEvent) -> NarrativeSummary | None:
    if isinstance(event, QuestCompleted):
        return render_template(COMPLETED[event.quest_type], {"label": LABELS[event.quest_type.value]})
    elif isinstance(event, QuestStarted):
        return render_template(STARTED, {"label": LABELS[event.quest_type.value]})
    elif isinstance(event, ReEntrySuggested):
        return render_template(RE_ENTRY[event.current_range], {})
    elif isinstance(event, TimeContextChanged):
        return render_template(TIME_CHANGED[event.new_range], {})
    elif isinstance(event, StatChanged):
        template = STAT_GROWTH if any(d > 0 for d in event.deltas.values()) else STAT_SETTLED
        return render_template(template, {"labels": _join_labels(list(event.deltas))})
    elif isinstance(event, FlagChanged):
        return render_template(FLAGS_SET if event.flags_set else FLAGS_CLEARED, {})
    elif isinstance(event, QuestsUnlocked):
        return None
    else:
        assert_never(event)


def summarize(events: Sequence[EngineEvent], state: CharacterState) -> NarrativeSummary | None:
    """Voice the highest-priority event, or return None for silence."""
    if not events:
        return None
    for kind in PRIORITY:
        for event in events:
            if event.type == kind.value:
                return _summarize_event(event)
    return None


def default_share_text(quest_type: QuestType) -> str:
    """Share text for a completion when a summary carries none."""
    template = COMPLETED[quest_type]
    assert template.share_text is not None
    return _render(template.share_text, {"label": LABELS[quest_type.value]})
