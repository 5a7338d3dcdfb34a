"""lifegame command line.

    lifegame state                     current snapshot (after a tick)
    lifegame quests                    quests to show right now
    lifegame tick                      advance the clock
    lifegame start QUEST_ID            start a quest
    lifegame complete QUEST_ID [--action TEXT]
    lifegame receipts                  stored completion receipts
    lifegame lint [FILE]               check quest definitions

Every command prints JSON. Settings come from the environment / .env (see
lifegame.config); --data-dir and --quests override them.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

from lifegame import session
from lifegame.catalog import CatalogError, load_catalog, load_quests
from lifegame.config import Settings, load_settings
from lifegame.events import event_to_dict
from lifegame.lint import lint_quests
from lifegame.storage import Storage

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _result_payload(result: session.ActionResult, include_quests: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "state": result.state.to_wire(),
        "events": [event_to_dict(e) for e in result.events],
        "narrative": result.summary.to_wire() if result.summary else None,
    }
    if result.receipt is not None:
        payload["receipt"] = result.receipt.to_wire()
    if include_quests:
        payload["quests"] = [q.to_wire() for q in result.quests]
    return payload


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=False))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lifegame", description="Behavior-as-a-game rules engine")
    parser.add_argument("--data-dir", type=Path, default=None, help="Storage directory (default: $LIFEGAME_DATA_DIR or ./data)")
    parser.add_argument("--quests", type=Path, default=None, help="Quest definitions file (default: bundled presets)")
    parser.add_argument("--player", default="local", help="Player id (default: local)")
    parser.add_argument("--now-ms", type=int, default=None, help="Override the current time (epoch ms)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("state", help="Show current state")
    sub.add_parser("quests", help="Show quests available now")
    sub.add_parser("tick", help="Advance the clock")
    start = sub.add_parser("start", help="Start a quest")
    start.add_argument("quest_id")
    complete = sub.add_parser("complete", help="Complete a quest")
    complete.add_argument("quest_id")
    complete.add_argument("--action", default=None, help="What you did, in your own words")
    sub.add_parser("receipts", help="List completion receipts")
    lint = sub.add_parser("lint", help="Check quest definitions")
    lint.add_argument("file", nargs="?", type=Path, default=None)
    return parser


def _lint(path: Path) -> int:
    try:
        quests = load_quests(path)
    except CatalogError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    issues = lint_quests(quests)
    if not issues:
        print(f"✓ All {len(quests)} quests valid")
        return 0
    print("✗ Validation failures:\n")
    for issue in issues:
        print(f"  {issue}")
    print(f"\nTotal: {len(issues)} error(s)")
    return 1


def run(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = settings or load_settings()
    update: dict[str, Any] = {}
    if args.data_dir is not None:
        update["data_dir"] = args.data_dir
    if args.quests is not None:
        update["quests_file"] = args.quests
    settings = settings.model_copy(update=update)

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "lint":
        return _lint(args.file or settings.quests_file)

    storage = Storage(settings.data_dir)
    now_ms = args.now_ms if args.now_ms is not None else _now_ms()
    common = {"storage": storage, "player_id": args.player, "now_ms": now_ms, "settings": settings}

    if args.command == "receipts":
        _print([r.to_wire() for r in storage.get_receipts(args.player)])
        return 0

    if args.command in ("state", "tick"):
        _print(_result_payload(session.tick_player(**common)))
        return 0

    catalog = load_catalog(settings.quests_file)
    if args.command == "quests":
        result = session.list_player_quests(catalog=catalog, **common)
        _print(_result_payload(result, include_quests=True))
    elif args.command == "start":
        _print(_result_payload(session.start_player_quest(catalog=catalog, quest_id=args.quest_id, **common)))
    elif args.command == "complete":
        result = session.complete_player_quest(
            catalog=catalog, quest_id=args.quest_id, action=args.action, **common
        )
        _print(_result_payload(result))
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
