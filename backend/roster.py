"""Roster queries: confirmed participants in, team assignments out.

Registered players are identified by their profile id. Guests have no profile,
so their player id is ``guest_<rsvp_id>``; the prefix is stripped again when
assignments are written back.
"""

import logging
from psycopg2.extras import execute_values
from constants import (
    GUEST_ID_PREFIX, GUEST_NAME_DEFAULT, GUEST_POSITION_DEFAULT, TEAM_COLORS
)
from models import (
    GuestParticipant, Participant, Player, RegisteredParticipant, RosterEntry, TeamAssignment
)

logger = logging.getLogger(__name__)

ROSTER_QUERY = """
    SELECT
        r.id AS rsvp_id,
        r.player_id,
        r.guest_name,
        r.guest_position,
        r.status,
        r.has_paid,
        r.paid_at,
        p.full_name,
        p.preferred_position
    FROM rsvps r
    LEFT JOIN profiles p ON r.player_id = p.id
    WHERE r.game_id = %s
"""


def guest_player_id(rsvp_id) -> str:
    return f"{GUEST_ID_PREFIX}{rsvp_id}"


def parse_player_id(player_id: str) -> tuple[str, str]:
    """Split a player id into ("guest", rsvp_id) or ("registered", profile_id)."""
    if player_id.startswith(GUEST_ID_PREFIX):
        return "guest", player_id[len(GUEST_ID_PREFIX):]
    return "registered", player_id


def rsvp_match_clause(game_id: str, player_id: str) -> tuple[str, tuple]:
    """WHERE clause selecting the RSVP behind a player id within one game."""
    kind, value = parse_player_id(player_id)
    if kind == "guest":
        return "game_id = %s AND id = %s AND player_id IS NULL", (game_id, value)
    return "game_id = %s AND player_id = %s", (game_id, value)


def participant_from_rsvp(row) -> Participant:
    """Build a registered or guest participant from a joined RSVP row."""
    if row.get("player_id"):
        return RegisteredParticipant(
            id=str(row["player_id"]),
            name=row["full_name"],
            position=row["preferred_position"],
        )
    return GuestParticipant(
        rsvp_id=str(row["rsvp_id"]),
        name=row.get("guest_name") or GUEST_NAME_DEFAULT,
        position=row.get("guest_position") or GUEST_POSITION_DEFAULT,
    )


def fetch_confirmed_players(cursor, game_id: str) -> list[Player]:
    cursor.execute(
        ROSTER_QUERY + " AND r.status = 'confirmed' ORDER BY r.created_at",
        (game_id,)
    )
    return [participant_from_rsvp(row).to_player() for row in cursor.fetchall()]


def fetch_roster(cursor, game_id: str) -> list[RosterEntry]:
    """Every RSVP for a game, flattened for the admin roster view."""
    cursor.execute(ROSTER_QUERY + " ORDER BY r.created_at", (game_id,))
    entries = []
    for row in cursor.fetchall():
        player = participant_from_rsvp(row).to_player()
        entries.append(RosterEntry(
            rsvp_id=str(row["rsvp_id"]),
            player_id=player.id,
            full_name=player.full_name,
            preferred_position=player.preferred_position,
            status=row["status"],
            has_paid=row["has_paid"],
            paid_at=row.get("paid_at"),
            is_guest=not row.get("player_id"),
        ))
    return entries


def fetch_team_assignments(cursor, game_id: str) -> list[TeamAssignment]:
    cursor.execute("""
        SELECT t.color, ta.player_id, ta.rsvp_id, ta.position_slot
        FROM team_assignments ta
        JOIN teams t ON ta.team_id = t.id
        WHERE t.game_id = %s
        ORDER BY ta.created_at
    """, (game_id,))
    assignments = [
        TeamAssignment(
            team_color=row["color"],
            position_slot=row["position_slot"],
            player_id=str(row["player_id"]) if row["player_id"] else guest_player_id(row["rsvp_id"]),
        )
        for row in cursor.fetchall()
    ]
    assignments.sort(key=lambda a: TEAM_COLORS.index(a.team_color))
    return assignments


def replace_team_assignments(cursor, game_id: str, assignments: list[TeamAssignment]):
    """Replace a game's teams and assignments. Runs in the caller's transaction."""
    # Assignments cascade with their teams
    cursor.execute("DELETE FROM teams WHERE game_id = %s", (game_id,))

    teams = execute_values(
        cursor,
        "INSERT INTO teams (game_id, color) VALUES %s RETURNING id, color",
        [(game_id, color) for color in TEAM_COLORS],
        fetch=True,
    )
    team_map = {team["color"]: team["id"] for team in teams}

    rows = []
    for assignment in assignments:
        kind, value = parse_player_id(assignment.player_id)
        rows.append((
            team_map[assignment.team_color],
            value if kind == "registered" else None,
            value if kind == "guest" else None,
            assignment.position_slot,
        ))

    if rows:
        execute_values(
            cursor,
            "INSERT INTO team_assignments (team_id, player_id, rsvp_id, position_slot) VALUES %s",
            rows,
        )

    logger.info("Saved %d team assignments for game %s", len(rows), game_id)
