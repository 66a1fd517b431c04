#!/usr/bin/env python3
"""
Print a balanced lineup for one game.

Usage:
    python scripts/generate_teams.py <game_id> [--save]

Reads the game's confirmed players, runs the team generator and prints each
team by position. With --save the lineup replaces the game's saved teams.
Requires DATABASE_URL to be set in .env file.
"""

import logging
import sys

from constants import POSITIONS, POSITION_SLOTS, TEAM_COLORS
from database import get_db
from roster import fetch_confirmed_players, replace_team_assignments
from team_generator import find_unassigned, generate_teams, get_position_counts


def print_lineup(players, assignments):
    names = {p.id: p.full_name for p in players}

    for color in TEAM_COLORS:
        counts = get_position_counts(assignments, color)
        print(f"\n{color.upper()} ({sum(counts.values())} players)")
        for position in POSITIONS:
            members = [
                names[a.player_id] for a in assignments
                if a.team_color == color and a.position_slot == position
            ]
            print(f"  {position:<10} {counts[position]}/{POSITION_SLOTS[position]}  {', '.join(members)}")

    unassigned = find_unassigned(players, assignments)
    if unassigned:
        print(f"\nUnassigned ({len(unassigned)}): {', '.join(p.full_name for p in unassigned)}")


def main():
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    save = "--save" in sys.argv[1:]

    if len(args) != 1:
        print("Usage: python scripts/generate_teams.py <game_id> [--save]")
        sys.exit(1)
    game_id = args[0]

    logging.basicConfig(level=logging.INFO)

    with get_db() as conn:
        cursor = conn.cursor()
        players = fetch_confirmed_players(cursor, game_id)
        print(f"{len(players)} confirmed players")

        assignments = generate_teams(players)
        print_lineup(players, assignments)

        if save:
            replace_team_assignments(cursor, game_id, assignments)
            print("\nLineup saved")


if __name__ == "__main__":
    main()
