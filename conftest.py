import pytest

from lifegame.config import Settings
from lifegame.models import CharacterState, Stats, TimeContext, TimeRange
from lifegame.quests import Quest
from lifegame.storage import Storage

DAY_MS = 24 * 60 * 60 * 1000
T0 = 1_767_225_600_000  # 2026-01-01T00:00:00Z


def build_state(
    agency: int = 5,
    courage: int = 3,
    order: int = 4,
    flags: set[str] | None = None,
    range: TimeRange = TimeRange.RECENT,
    now_ms: int = T0,
    last_action_ms: int | None = T0,
) -> CharacterState:
    return CharacterState(
        stats=Stats(agency=agency, courage=courage, order=order),
        flags=frozenset(flags or ()),
        time_context=TimeContext(range=range, now_ms=now_ms, last_meaningful_action_ms=last_action_ms),
    )


def build_quest(quest_id: str, type: str = "agency", **fields) -> Quest:
    data = {
        "id": quest_id,
        "type": type,
        "context": f"Context for {quest_id}.",
        "realWorldAction": "Do one small thing.",
        "constraint": "Within ten minutes.",
    }
    data.update(fields)
    return Quest.model_validate(data)


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def make_quest():
    return build_quest


@pytest.fixture
def storage(tmp_path):
    """Fresh file storage under pytest's tmp dir for each test."""
    return Storage(tmp_path / "data")


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data")
