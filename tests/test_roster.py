"""Tests for roster flattening and team persistence queries."""

from unittest.mock import patch

import pytest
from pydantic import TypeAdapter

from models import GuestParticipant, Participant, Player, RegisteredParticipant, TeamAssignment
from roster import (
    fetch_confirmed_players, fetch_roster, fetch_team_assignments, guest_player_id,
    parse_player_id, participant_from_rsvp, replace_team_assignments, rsvp_match_clause
)

GAME_ID = "game-1"


def rsvp_row(rsvp_id, player_id=None, full_name=None, preferred_position=None,
             guest_name=None, guest_position=None, status="confirmed", has_paid=False):
    return {
        "rsvp_id": rsvp_id,
        "player_id": player_id,
        "full_name": full_name,
        "preferred_position": preferred_position,
        "guest_name": guest_name,
        "guest_position": guest_position,
        "status": status,
        "has_paid": has_paid,
        "paid_at": None,
    }


class TestPlayerIds:
    def test_guest_ids_are_prefixed(self):
        assert guest_player_id("abc") == "guest_abc"

    @pytest.mark.parametrize("player_id,expected", [
        ("guest_abc", ("guest", "abc")),
        ("7b0e", ("registered", "7b0e")),
    ])
    def test_parse_player_id(self, player_id, expected):
        assert parse_player_id(player_id) == expected

    def test_match_clause_for_guest_uses_rsvp_id(self):
        where, params = rsvp_match_clause(GAME_ID, "guest_r1")
        assert "id = %s" in where and "player_id IS NULL" in where
        assert params == (GAME_ID, "r1")

    def test_match_clause_for_registered_uses_player_id(self):
        where, params = rsvp_match_clause(GAME_ID, "p1")
        assert where == "game_id = %s AND player_id = %s"
        assert params == (GAME_ID, "p1")


class TestParticipants:
    def test_registered_row(self):
        participant = participant_from_rsvp(
            rsvp_row("r1", player_id="p1", full_name="Ana", preferred_position="attacker")
        )
        assert participant == RegisteredParticipant(id="p1", name="Ana", position="attacker")
        assert participant.to_player() == Player(id="p1", full_name="Ana", preferred_position="attacker")

    def test_guest_row(self):
        participant = participant_from_rsvp(rsvp_row("r2", guest_name="Walk-in", guest_position="defender"))
        assert isinstance(participant, GuestParticipant)
        assert participant.to_player() == Player(id="guest_r2", full_name="Walk-in", preferred_position="defender")

    def test_guest_defaults(self):
        player = participant_from_rsvp(rsvp_row("r3")).to_player()
        assert player.full_name == "Guest"
        assert player.preferred_position == "midfielder"

    def test_built_participants_round_trip_through_union(self):
        adapter = TypeAdapter(Participant)
        row = rsvp_row("r4", guest_name="Lee", guest_position="attacker")
        participant = adapter.validate_python(participant_from_rsvp(row).model_dump())
        assert participant == GuestParticipant(rsvp_id="r4", name="Lee", position="attacker")

    def test_participant_union_dispatches_on_kind(self):
        adapter = TypeAdapter(Participant)
        guest = adapter.validate_python({"kind": "guest", "rsvp_id": "r9", "name": "G", "position": "attacker"})
        assert isinstance(guest, GuestParticipant)
        assert guest.player_id == "guest_r9"


class TestRosterQueries:
    def test_fetch_confirmed_players_flattens_both_kinds(self, cursor):
        cursor.fetchall_results.append([
            rsvp_row("r1", player_id="p1", full_name="Ana", preferred_position="attacker"),
            rsvp_row("r2", guest_name="Bo", guest_position="defender"),
        ])

        players = fetch_confirmed_players(cursor, GAME_ID)

        assert [p.id for p in players] == ["p1", "guest_r2"]
        sql, params = cursor.executed[0]
        assert "r.status = 'confirmed'" in sql
        assert params == (GAME_ID,)

    def test_fetch_roster_marks_guests_and_payment(self, cursor):
        cursor.fetchall_results.append([
            rsvp_row("r1", player_id="p1", full_name="Ana", preferred_position="attacker", has_paid=True),
            rsvp_row("r2", guest_name="Bo", guest_position="defender", status="pending"),
        ])

        entries = fetch_roster(cursor, GAME_ID)

        assert [(e.player_id, e.is_guest, e.has_paid, e.status) for e in entries] == [
            ("p1", False, True, "confirmed"),
            ("guest_r2", True, False, "pending"),
        ]

    def test_fetch_team_assignments_restores_guest_ids_in_color_order(self, cursor):
        cursor.fetchall_results.append([
            {"color": "black", "player_id": "p2", "rsvp_id": None, "position_slot": "attacker"},
            {"color": "red", "player_id": None, "rsvp_id": "r1", "position_slot": "defender"},
        ])

        assignments = fetch_team_assignments(cursor, GAME_ID)

        assert assignments == [
            TeamAssignment(team_color="red", position_slot="defender", player_id="guest_r1"),
            TeamAssignment(team_color="black", position_slot="attacker", player_id="p2"),
        ]


class TestReplaceTeamAssignments:
    def test_recreates_teams_and_splits_guest_ids(self, cursor):
        teams = [{"id": f"team-{color}", "color": color} for color in ("red", "white", "blue", "black")]
        assignments = [
            TeamAssignment(team_color="white", position_slot="defender", player_id="p1"),
            TeamAssignment(team_color="black", position_slot="midfielder", player_id="guest_r7"),
        ]

        with patch("roster.execute_values", side_effect=[teams, None]) as execute_values:
            replace_team_assignments(cursor, GAME_ID, assignments)

        assert cursor.executed == [("DELETE FROM teams WHERE game_id = %s", (GAME_ID,))]
        team_call, assignment_call = execute_values.call_args_list
        assert team_call.args[2] == [(GAME_ID, c) for c in ("red", "white", "blue", "black")]
        assert assignment_call.args[2] == [
            ("team-white", "p1", None, "defender"),
            ("team-black", None, "r7", "midfielder"),
        ]

    def test_empty_lineup_only_recreates_teams(self, cursor):
        teams = [{"id": "t", "color": "red"}]
        with patch("roster.execute_values", return_value=teams) as execute_values:
            replace_team_assignments(cursor, GAME_ID, [])
        assert execute_values.call_count == 1
