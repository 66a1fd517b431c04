# backend/constants.py
"""Application constants - single source of truth for configuration values."""

# Positions in slot-scan order
POSITIONS = ["defender", "midfielder", "attacker"]

# Team colors in tie-break order (first listed wins)
TEAM_COLORS = ["red", "white", "blue", "black"]

# Slots per team for each position: 10 per team, 40 across all teams
POSITION_SLOTS = {
    "defender": 4,
    "midfielder": 3,
    "attacker": 3,
}

PLAYERS_PER_TEAM = sum(POSITION_SLOTS.values())
TOTAL_CAPACITY = PLAYERS_PER_TEAM * len(TEAM_COLORS)

GAME_STATUSES = ["scheduled", "cancelled", "completed"]
RSVP_STATUSES = ["pending", "confirmed", "declined", "waitlist"]

# Statuses a registered player may set on their own RSVP
PLAYER_RSVP_STATUSES = ["confirmed", "declined", "pending"]

GAME_TIME_DEFAULT = "22:45"
GAME_LOCATION_DEFAULT = "Default Field"
MAX_PLAYERS_DEFAULT = TOTAL_CAPACITY
MAX_PLAYERS_MIN = 1
MAX_PLAYERS_MAX = 100

LOCATION_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 500
PLAYER_NAME_MAX_LENGTH = 60

# Guests have no profile; their player id is derived from the RSVP id
GUEST_ID_PREFIX = "guest_"
GUEST_NAME_DEFAULT = "Guest"
GUEST_POSITION_DEFAULT = "midfielder"
