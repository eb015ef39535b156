#!/usr/bin/env python3
"""
Print (or save) the registration details text for one player.
Usage: python scripts/export_player.py <player_id|user_id|username> [output_file]
From repo root with PYTHONPATH=. or after `pip install -e .`.
"""
import sys
import os

# Allow running from repo root without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from player_registry.api.database import SessionLocal
from player_registry.api.store import find_player
from player_registry.core.export import render_registration_summary


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python scripts/export_player.py <player_id|user_id|username> [output_file]", file=sys.stderr)
        sys.exit(1)
    ident = sys.argv[1].strip()
    if not ident:
        print("Error: provide a player id, user id or username.", file=sys.stderr)
        sys.exit(1)

    db = SessionLocal()
    try:
        player = find_player(db, ident)
        if not player:
            print(f"No player found for: {ident!r}", file=sys.stderr)
            sys.exit(2)
        text = render_registration_summary(player.registration_summary())
    finally:
        db.close()

    if len(sys.argv) > 2:
        with open(sys.argv[2], "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Wrote details for {player.player_id} to {sys.argv[2]}")
    else:
        print(text, end="")


if __name__ == "__main__":
    main()
