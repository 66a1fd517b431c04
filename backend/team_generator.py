"""Balanced team generation.

Confirmed players are spread across the four team colors by preferred
position. Phase 1 places each player at their preferred position on the team
with the fewest players already there; phase 2 drops anyone left over into the
first free slot anywhere, regardless of position.
"""

import logging
import random
from typing import Optional
from collections import Counter

from constants import POSITIONS, POSITION_SLOTS, TEAM_COLORS
from models import Player, TeamAssignment

logger = logging.getLogger(__name__)


def _shuffled(players, rng):
    # random.sample returns a new list, leaving the caller's untouched
    return rng.sample(players, len(players))


def generate_teams(players: list[Player], rng: Optional[random.Random] = None) -> list[TeamAssignment]:
    """Assign players to (team, position) slots.

    Never raises for a valid player list. Players that do not fit anywhere are
    left out of the result; compare its length with the input (or use
    ``find_unassigned``) to detect that.
    """
    if rng is None:
        rng = random
    assignments = []
    team_slots = {color: {position: 0 for position in POSITIONS} for color in TEAM_COLORS}

    def team_with_fewest(position):
        # min() keeps the first of equal keys, so TEAM_COLORS order breaks ties
        return min(TEAM_COLORS, key=lambda color: team_slots[color][position])

    def assign(player, color, position):
        if team_slots[color][position] >= POSITION_SLOTS[position]:
            return False
        assignments.append(TeamAssignment(team_color=color, position_slot=position, player_id=player.id))
        team_slots[color][position] += 1
        return True

    def assign_anywhere(player):
        for color in TEAM_COLORS:
            for position in POSITIONS:
                if assign(player, color, position):
                    return True
        return False

    groups = {
        position: _shuffled([p for p in players if p.preferred_position == position], rng)
        for position in POSITIONS
    }

    # Phase 1: preferred positions, round-robin by fewest
    overflow = []
    for position in POSITIONS:
        for player in groups[position]:
            if not assign(player, team_with_fewest(position), position):
                overflow.append(player)

    logger.debug("Placed %d players at preferred positions, %d overflow",
                 len(assignments), len(overflow))

    # Phase 2: first free slot, teams then positions in fixed order
    unplaced = 0
    for player in overflow:
        if not assign_anywhere(player):
            unplaced += 1

    if unplaced:
        logger.warning("Teams are full: %d of %d players left unassigned", unplaced, len(players))

    return assignments


def get_position_counts(assignments: list[TeamAssignment], team_color: str) -> dict[str, int]:
    counts = {position: 0 for position in POSITIONS}
    for assignment in assignments:
        if assignment.team_color == team_color:
            counts[assignment.position_slot] += 1
    return counts


def find_unassigned(players: list[Player], assignments: list[TeamAssignment]) -> list[Player]:
    """Players with no assignment, in input order."""
    assigned = {a.player_id for a in assignments}
    return [p for p in players if p.id not in assigned]


def validate_assignments(assignments: list[TeamAssignment]) -> None:
    """Raise ValueError if a player is placed twice or a slot is over capacity.

    Hand-edited lineups go through this before they are saved.
    """
    seen = set()
    for assignment in assignments:
        if assignment.player_id in seen:
            raise ValueError(f"Player '{assignment.player_id}' is assigned more than once")
        seen.add(assignment.player_id)

    filled = Counter((a.team_color, a.position_slot) for a in assignments)
    for (color, position), count in filled.items():
        if count > POSITION_SLOTS[position]:
            raise ValueError(
                f"Team {color} has {count} {position}s, only {POSITION_SLOTS[position]} allowed"
            )
