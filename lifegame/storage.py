"""JSON file storage for player data.

All state is stored in flat JSON files under a configurable base directory.
There is no database or ORM: reads and writes go through plain helper
methods that load and dump JSON.

Directory layout:

    {base}/
      players/
        {player}.json            <- PlayerSnapshot
        {player}/
          receipts.json          <- list of Receipt, append-only
          quest-actions.json     <- list of QuestAction, append-only

Each write replaces a whole file. Callers keep at most one read-modify-write
cycle in flight per player; nothing here locks.

``{player}`` is ``slugify(player_id)``. Ids that slugify alike ("Ada Lovelace",
"ada-lovelace") address the same player. Reads never create directories.
"""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from pathlib import Path
from typing import Any

from lifegame.receipts import QuestAction, Receipt
from lifegame.snapshot import PlayerSnapshot, snapshot_from_json, snapshot_to_json

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    """Convert a player id to a filesystem-safe slug.

    "Ada Lovelace" -> "ada-lovelace"
    """
    text = unicodedata.normalize("NFKD", name)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text or "player"


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._players_root = base_path / "players"
        self._players_root.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _snapshot_file(self, player_id: str) -> Path:
        return self._players_root / f"{slugify(player_id)}.json"

    def _player_dir(self, player_id: str) -> Path:
        return self._players_root / slugify(player_id)

    def _player_file(self, player_id: str, name: str, create: bool = False) -> Path:
        path = self._player_dir(player_id)
        if create:
            path.mkdir(exist_ok=True)
        return path / name

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text())

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2))

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def get_snapshot(self, player_id: str) -> PlayerSnapshot | None:
        path = self._snapshot_file(player_id)
        if not path.exists():
            return None
        return snapshot_from_json(path.read_text())

    def save_snapshot(self, player_id: str, snapshot: PlayerSnapshot) -> None:
        path = self._snapshot_file(player_id)
        path.write_text(snapshot_to_json(snapshot))
        logger.debug("saved snapshot player=%s path=%s", player_id, path)

    def list_players(self) -> list[str]:
        return sorted(p.stem for p in self._players_root.glob("*.json"))

    # ------------------------------------------------------------------
    # Receipts (append-only)
    # ------------------------------------------------------------------

    def get_receipts(self, player_id: str) -> list[Receipt]:
        path = self._player_file(player_id, "receipts.json")
        if not path.exists():
            return []
        return [Receipt.model_validate(r) for r in self._read_json(path)]

    def get_receipt(self, player_id: str, receipt_id: str) -> Receipt | None:
        for receipt in self.get_receipts(player_id):
            if receipt.id == receipt_id:
                return receipt
        return None

    def append_receipt(self, player_id: str, receipt: Receipt) -> None:
        existing = self.get_receipts(player_id)
        existing.append(receipt)
        self._write_json(
            self._player_file(player_id, "receipts.json", create=True),
            [r.to_wire() for r in existing],
        )

    # ------------------------------------------------------------------
    # Quest actions (append-only)
    # ------------------------------------------------------------------

    def get_quest_actions(self, player_id: str) -> list[QuestAction]:
        path = self._player_file(player_id, "quest-actions.json")
        if not path.exists():
            return []
        return [QuestAction.model_validate(a) for a in self._read_json(path)]

    def append_quest_action(self, player_id: str, action: QuestAction) -> None:
        existing = self.get_quest_actions(player_id)
        existing.append(action)
        self._write_json(
            self._player_file(player_id, "quest-actions.json", create=True),
            [a.to_wire() for a in existing],
        )
