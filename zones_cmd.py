#!/usr/bin/env python3
"""
CLI for gym zones: list, add, rename, delete, fav, select.
Usage: python zones_cmd.py list | add <name> [notes] | rename <N> <name> [notes] | delete <N> | fav <N> | select <N>
Uses GYMNOISE_CONFIG or config.yaml for db_path; a relative db_path is taken from the project
directory, as run_web.py does. N is the 1-based position shown by list.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Project root on path
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config import AppConfig, load_config  # noqa: E402
from persistence.database import get_connection, init_database  # noqa: E402
from persistence.settings_repo import SettingsRepo  # noqa: E402
from persistence.zone_store import ZoneStore  # noqa: E402
from run import resolve_db_path  # noqa: E402
from zones import Zone, ZoneRegistry  # noqa: E402

NOTES_PREVIEW_LEN = 50


def _resolve_config() -> AppConfig:
    try:
        raw = load_config()
    except FileNotFoundError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    return AppConfig(raw)


def open_registry(db_path: Path, zones_key: str) -> ZoneRegistry:
    """Initialize the database and return a loaded registry."""
    init_database(str(db_path))

    def conn_factory():
        return get_connection(str(db_path))

    registry = ZoneRegistry(ZoneStore(SettingsRepo(conn_factory), key=zones_key))
    asyncio.run(registry.load())
    return registry


def _zone_at(registry: ZoneRegistry, one_based_index: int) -> Zone:
    zones = registry.ordered_zones
    if one_based_index < 1 or one_based_index > len(zones):
        print(f"No zone at position {one_based_index}.", file=sys.stderr)
        sys.exit(1)
    return zones[one_based_index - 1]


def cmd_list(registry: ZoneRegistry) -> None:
    zones = registry.ordered_zones
    if not zones:
        print("No zones yet. Add your favorite gym spots.")
        return
    for i, zone in enumerate(zones, start=1):
        marker = ">" if zone.id == registry.current_zone_id else " "
        star = "*" if zone.is_favorite else " "
        notes = zone.notes or ""
        if len(notes) > NOTES_PREVIEW_LEN:
            notes = notes[: NOTES_PREVIEW_LEN - 1] + "…"
        print(f"{marker}{i:3} {star} {zone.name}")
        if notes:
            print(f"        {notes}")


def cmd_add(registry: ZoneRegistry, name: str, notes: str | None) -> None:
    zone = registry.add_zone(name, notes)
    if zone is None:
        print("Zone name is required.", file=sys.stderr)
        sys.exit(1)
    print(f"Added {zone.name} (id={zone.id}).")


def cmd_rename(registry: ZoneRegistry, index: int, name: str, notes: str | None) -> None:
    zone = _zone_at(registry, index)
    if not registry.update_zone(zone.id, name, notes):
        print("Zone name is required.", file=sys.stderr)
        sys.exit(1)
    print(f"Updated {registry.get_zone(zone.id).name}.")


def cmd_delete(registry: ZoneRegistry, index: int) -> None:
    zone = _zone_at(registry, index)
    registry.delete_zone(zone.id)
    current = registry.current_zone
    print(f"Deleted {zone.name}. Current zone: {current.name if current else '(none)'}")


def cmd_fav(registry: ZoneRegistry, index: int) -> None:
    zone = _zone_at(registry, index)
    registry.toggle_favorite(zone.id)
    state = "Favorited" if registry.get_zone(zone.id).is_favorite else "Unfavorited"
    print(f"{state} {zone.name}.")


def cmd_select(registry: ZoneRegistry, index: int) -> None:
    zone = _zone_at(registry, index)
    registry.set_current_zone(zone.id)
    print(f"Current zone: {zone.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zones_cmd.py", description="Manage gym zones.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("list", help="List zones (favorites first)")
    p = sub.add_parser("add", help="Add a zone")
    p.add_argument("name")
    p.add_argument("notes", nargs="?")
    p = sub.add_parser("rename", help="Change name and notes of zone N")
    p.add_argument("index", type=int)
    p.add_argument("name")
    p.add_argument("notes", nargs="?")
    for command, text in (
        ("delete", "Delete zone N"),
        ("fav", "Toggle favorite on zone N"),
        ("select", "Make zone N the current zone"),
    ):
        p = sub.add_parser(command, help=text)
        p.add_argument("index", type=int)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = _resolve_config()
    db_path = resolve_db_path(config, _ROOT)
    registry = open_registry(db_path, config.get_zones_key())
    try:
        if args.command == "list":
            cmd_list(registry)
        elif args.command == "add":
            cmd_add(registry, args.name, args.notes)
        elif args.command == "rename":
            cmd_rename(registry, args.index, args.name, args.notes)
        elif args.command == "delete":
            cmd_delete(registry, args.index)
        elif args.command == "fav":
            cmd_fav(registry, args.index)
        elif args.command == "select":
            cmd_select(registry, args.index)
    finally:
        registry.close()


if __name__ == "__main__":
    main()
