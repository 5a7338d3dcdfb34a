"""Quest catalog: lookup and enumeration of quest definitions.

The engine depends on the ``QuestCatalog`` protocol only; callers inject an
implementation so tests can swap in their own quests. The catalog is a dumb
store: no availability logic, no traversal, no side effects.

Quest files are JSON lists of quest definitions, validated through the
``Quest`` schema at load time. The bundled v1 quests live in
``lifegame/presets/quests.json``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from lifegame.quests import Quest

logger = logging.getLogger(__name__)

PRESETS_DIR = Path(__file__).parent / "presets"
DEFAULT_QUESTS_FILE = PRESETS_DIR / "quests.json"


class CatalogError(ValueError):
    """Raised when quest definitions cannot be loaded into a catalog."""


class QuestCatalog(Protocol):
    def get_quest_by_id(self, quest_id: str) -> Quest | None: ...

    def list_all(self) -> list[Quest]: ...


class InMemoryQuestCatalog:
    """Catalog backed by an insertion-ordered dict.

    ``list_all`` returns quests in the order they were given, which is the
    tie-break order for ranking and selection.
    """

    def __init__(self, quests: Iterable[Quest] = ()) -> None:
        self._quests: dict[str, Quest] = {}
        for quest in quests:
            if quest.id in self._quests:
                raise CatalogError(f"Duplicate quest id {quest.id!r}")
            self._quests[quest.id] = quest

    def get_quest_by_id(self, quest_id: str) -> Quest | None:
        return self._quests.get(quest_id)

    def list_all(self) -> list[Quest]:
        return list(self._quests.values())

    def __len__(self) -> int:
        return len(self._quests)

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._quests


def parse_quests(data: object) -> list[Quest]:
    """Validate a decoded JSON list into quests."""
    if not isinstance(data, list):
        raise CatalogError(f"Quest file must contain a JSON array, got {type(data).__name__}")
    return [Quest.model_validate(item) for item in data]


def load_quests(path: Path) -> list[Quest]:
    """Read and validate quest definitions from a JSON file."""
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read quest file {path}: {e}") from e
    try:
        quests = parse_quests(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid quest definition in {path}: {e}") from e
    logger.debug("loaded %d quests from %s", len(quests), path)
    return quests


def load_catalog(path: Path) -> InMemoryQuestCatalog:
    return InMemoryQuestCatalog(load_quests(path))


def default_catalog() -> InMemoryQuestCatalog:
    """Catalog of the bundled v1 quests."""
    return load_catalog(DEFAULT_QUESTS_FILE)
