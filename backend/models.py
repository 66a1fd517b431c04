import datetime
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator
from constants import (
    GAME_TIME_DEFAULT, GAME_LOCATION_DEFAULT, GUEST_ID_PREFIX,
    LOCATION_MAX_LENGTH, NOTES_MAX_LENGTH, PLAYER_NAME_MAX_LENGTH,
    MAX_PLAYERS_MIN, MAX_PLAYERS_MAX, MAX_PLAYERS_DEFAULT
)

Position = Literal["defender", "midfielder", "attacker"]
TeamColor = Literal["red", "white", "blue", "black"]
GameStatus = Literal["scheduled", "cancelled", "completed"]
RSVPStatus = Literal["pending", "confirmed", "declined", "waitlist"]


# ============ TEAM ENGINE ============

class Player(BaseModel):
    """A confirmed participant as seen by the team generator."""
    id: str
    full_name: str
    preferred_position: Position


class TeamAssignment(BaseModel):
    team_color: TeamColor
    position_slot: Position
    player_id: str


# ============ PARTICIPANTS ============

class RegisteredParticipant(BaseModel):
    kind: Literal["registered"] = "registered"
    id: str
    name: str
    position: Position

    def to_player(self) -> Player:
        return Player(id=self.id, full_name=self.name, preferred_position=self.position)


class GuestParticipant(BaseModel):
    kind: Literal["guest"] = "guest"
    rsvp_id: str
    name: str
    position: Position

    @property
    def player_id(self) -> str:
        return f"{GUEST_ID_PREFIX}{self.rsvp_id}"

    def to_player(self) -> Player:
        return Player(id=self.player_id, full_name=self.name, preferred_position=self.position)


Participant = Annotated[Union[RegisteredParticipant, GuestParticipant], Field(discriminator="kind")]


# ============ GAMES ============

class GameCreate(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(default=GAME_TIME_DEFAULT, pattern=r"^\d{2}:\d{2}$")
    location: str = Field(default=GAME_LOCATION_DEFAULT, max_length=LOCATION_MAX_LENGTH)
    max_players: int = Field(default=MAX_PLAYERS_DEFAULT, ge=MAX_PLAYERS_MIN, le=MAX_PLAYERS_MAX)
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)

    @field_validator('location')
    @classmethod
    def location_not_empty(cls, v):
        if not v or not v.strip():
            return GAME_LOCATION_DEFAULT
        return v.strip()


class GameUpdate(BaseModel):
    date: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    location: Optional[str] = Field(default=None, min_length=1, max_length=LOCATION_MAX_LENGTH)
    max_players: Optional[int] = Field(default=None, ge=MAX_PLAYERS_MIN, le=MAX_PLAYERS_MAX)
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)
    status: Optional[GameStatus] = None

    # Fields may be omitted, but only notes can be cleared with null
    @field_validator('date', 'time', 'location', 'max_players', 'status')
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class GameResponse(BaseModel):
    id: str
    date: datetime.date
    time: str
    location: str
    status: GameStatus
    max_players: int
    notes: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime


class AdminGameResponse(GameResponse):
    confirmed_count: int = 0
    pending_count: int = 0
    declined_count: int = 0
    waitlist_count: int = 0
    paid_count: int = 0


# ============ RSVPS ============

class RSVPCreate(BaseModel):
    """Either a registered player's status change or a guest sign-up.

    A request carrying all three guest fields is treated as a guest RSVP.
    """
    status: Optional[str] = None
    guest_name: Optional[str] = Field(default=None, max_length=PLAYER_NAME_MAX_LENGTH)
    guest_phone: Optional[str] = Field(default=None, max_length=30)
    guest_position: Optional[str] = None

    @field_validator('guest_name', 'guest_phone')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if v else v

    @property
    def is_guest(self) -> bool:
        return bool(self.guest_name and self.guest_phone and self.guest_position)


class RosterEntry(BaseModel):
    rsvp_id: str
    player_id: str
    full_name: str
    preferred_position: Position
    status: RSVPStatus
    has_paid: bool
    paid_at: Optional[datetime.datetime] = None
    is_guest: bool


class PlayerUpdate(BaseModel):
    status: Optional[RSVPStatus] = None
    has_paid: Optional[bool] = None


# ============ TEAMS ============

class TeamsSave(BaseModel):
    assignments: list[TeamAssignment]


class TeamsResponse(BaseModel):
    success: bool = True
    assignments: list[TeamAssignment]
    unassigned: list[Player]
