#!/usr/bin/env python3
"""
Import seed data into local database for testing.

Usage:
    python scripts/import_seed_data.py

Reads from data/seed_data.json and imports into local database.
Requires DATABASE_URL to be set in .env file.
"""

import json
import sys

from config import DATA_DIR
from database import get_db, init_db


def import_data():
    """Import seed data from JSON file."""
    seed_file = DATA_DIR / "seed_data.json"

    if not seed_file.exists():
        print(f"Error: {seed_file} not found")
        print("Run export_prod_data.py first to create seed data")
        sys.exit(1)

    with open(seed_file) as f:
        data = json.load(f)

    print(f"Loading seed data from {seed_file}")
    print(f"  Profiles: {len(data.get('profiles', []))}")
    print(f"  Games: {len(data.get('games', []))}")
    print(f"  RSVPs: {len(data.get('rsvps', []))}")
    print(f"  Teams: {len(data.get('teams', []))}")
    print(f"  Team assignments: {len(data.get('team_assignments', []))}")

    # Initialize database schema
    print("\nInitializing database schema...")
    init_db()

    with get_db() as conn:
        cursor = conn.cursor()

        # Import profiles
        for profile in data.get("profiles", []):
            cursor.execute("""
                INSERT INTO profiles (id, email, full_name, preferred_position, phone, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET
                    full_name = EXCLUDED.full_name,
                    preferred_position = EXCLUDED.preferred_position
            """, (
                profile["id"],
                profile["email"],
                profile["full_name"],
                profile["preferred_position"],
                profile.get("phone"),
                profile.get("created_at")
            ))
        print(f"Imported {len(data.get('profiles', []))} profiles")

        # Import games
        for game in data.get("games", []):
            cursor.execute("""
                INSERT INTO games (id, date, time, location, status, max_players, notes, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET
                    date = EXCLUDED.date,
                    time = EXCLUDED.time,
                    location = EXCLUDED.location,
                    status = EXCLUDED.status
            """, (
                game["id"],
                game["date"],
                game.get("time", "22:45"),
                game.get("location", "Default Field"),
                game.get("status", "scheduled"),
                game.get("max_players", 40),
                game.get("notes"),
                game.get("created_at")
            ))
        print(f"Imported {len(data.get('games', []))} games")

        # Import RSVPs
        for rsvp in data.get("rsvps", []):
            cursor.execute("""
                INSERT INTO rsvps (id, game_id, player_id, guest_name, guest_phone, guest_position,
                                   status, has_paid, paid_at, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET
                    status = EXCLUDED.status,
                    has_paid = EXCLUDED.has_paid,
                    paid_at = EXCLUDED.paid_at
            """, (
                rsvp["id"],
                rsvp["game_id"],
                rsvp.get("player_id"),
                rsvp.get("guest_name"),
                rsvp.get("guest_phone"),
                rsvp.get("guest_position"),
                rsvp.get("status", "pending"),
                rsvp.get("has_paid", False),
                rsvp.get("paid_at"),
                rsvp.get("created_at")
            ))
        print(f"Imported {len(data.get('rsvps', []))} RSVPs")

        # Import teams and their assignments
        for team in data.get("teams", []):
            cursor.execute("""
                INSERT INTO teams (id, game_id, color, created_at)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
            """, (team["id"], team["game_id"], team["color"], team.get("created_at")))
        print(f"Imported {len(data.get('teams', []))} teams")

        for assignment in data.get("team_assignments", []):
            cursor.execute("""
                INSERT INTO team_assignments (id, team_id, player_id, rsvp_id, position_slot, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (id) DO NOTHING
            """, (
                assignment["id"],
                assignment["team_id"],
                assignment.get("player_id"),
                assignment.get("rsvp_id"),
                assignment["position_slot"],
                assignment.get("created_at")
            ))
        print(f"Imported {len(data.get('team_assignments', []))} team assignments")

    print("\nSeed data imported successfully!")


if __name__ == "__main__":
    import_data()
