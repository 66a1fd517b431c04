import logging
import secrets
import psycopg2.errors
from datetime import datetime, timedelta
from typing import Optional
from fastapi import FastAPI, HTTPException, Request, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from config import ADMIN_TOKEN, CORS_ORIGINS, PORT, HOST, DEBUG, LOG_LEVEL
from database import get_db, init_db
from models import (
    GameCreate, GameUpdate, GameResponse, AdminGameResponse,
    RSVPCreate, RosterEntry, PlayerUpdate,
    TeamsSave, TeamsResponse
)
from constants import (
    POSITIONS, TEAM_COLORS, POSITION_SLOTS, TOTAL_CAPACITY,
    GAME_STATUSES, RSVP_STATUSES, PLAYER_RSVP_STATUSES,
    GAME_TIME_DEFAULT, GAME_LOCATION_DEFAULT, MAX_PLAYERS_DEFAULT, MAX_PLAYERS_MIN, MAX_PLAYERS_MAX
)
from roster import (
    fetch_confirmed_players, fetch_roster, fetch_team_assignments,
    replace_team_assignments, rsvp_match_clause
)
from team_generator import find_unassigned, generate_teams, validate_assignments

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Kickoff API",
    version="1.0.0",
    docs_url="/api/docs" if DEBUG else None,
    redoc_url="/api/redoc" if DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "status_code": exc.status_code, "message": exc.detail, "path": str(request.url.path)}
    )


@app.exception_handler(psycopg2.errors.InvalidTextRepresentation)
async def invalid_id_handler(request: Request, exc: psycopg2.errors.InvalidTextRepresentation):
    # Ids that are not UUIDs cannot match any row
    return JSONResponse(
        status_code=404,
        content={"error": True, "status_code": 404, "message": "Not found", "path": str(request.url.path)}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": True, "status_code": 500, "message": "Internal server error", "path": str(request.url.path)}
    )


@app.on_event("startup")
def startup():
    init_db()


def require_admin(x_admin_token: Optional[str]):
    if not ADMIN_TOKEN or not x_admin_token or not secrets.compare_digest(x_admin_token, ADMIN_TOKEN):
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_game_or_404(cursor, game_id: str) -> dict:
    cursor.execute("SELECT * FROM games WHERE id = %s", (game_id,))
    row = cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Game not found")
    return dict(row)


# ============ PUBLIC GAMES ============

@app.get("/api/games", response_model=list[GameResponse])
def list_games(days: int = 0, limit: int = 20):
    cutoff_date = (datetime.now() - timedelta(days=days)).strftime('%Y-%m-%d')

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT * FROM games
            WHERE date >= %s AND status = 'scheduled'
            ORDER BY date ASC, time ASC
            LIMIT %s
        """, (cutoff_date, limit))
        rows = cursor.fetchall()
        return [GameResponse(**dict(row)) for row in rows]


@app.get("/api/games/{game_id}", response_model=GameResponse)
def get_game(game_id: str):
    with get_db() as conn:
        cursor = conn.cursor()
        return GameResponse(**get_game_or_404(cursor, game_id))


# ============ RSVPS ============

@app.post("/api/games/{game_id}/rsvp")
def submit_rsvp(game_id: str, rsvp: RSVPCreate, x_player_id: Optional[str] = Header(None)):
    if rsvp.is_guest:
        return submit_guest_rsvp(game_id, rsvp)

    if rsvp.status not in PLAYER_RSVP_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    if not x_player_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)

        cursor.execute("""
            INSERT INTO rsvps (game_id, player_id, status)
            VALUES (%s, %s, %s)
            ON CONFLICT (game_id, player_id)
            DO UPDATE SET status = EXCLUDED.status, updated_at = CURRENT_TIMESTAMP
        """, (game_id, x_player_id, rsvp.status))

        return {"success": True}


def submit_guest_rsvp(game_id: str, rsvp: RSVPCreate):
    if rsvp.guest_position not in POSITIONS:
        raise HTTPException(status_code=400, detail="Invalid position")

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)

        cursor.execute("""
            SELECT id FROM rsvps
            WHERE game_id = %s AND guest_phone = %s AND player_id IS NULL
        """, (game_id, rsvp.guest_phone))
        if cursor.fetchone():
            raise HTTPException(status_code=400, detail="This phone number has already RSVPed for this game")

        # Guests start pending until an admin confirms them
        cursor.execute("""
            INSERT INTO rsvps (game_id, player_id, guest_name, guest_phone, guest_position, status)
            VALUES (%s, NULL, %s, %s, %s, 'pending')
        """, (game_id, rsvp.guest_name, rsvp.guest_phone, rsvp.guest_position))

        return {"success": True}


@app.delete("/api/games/{game_id}/rsvp")
def delete_rsvp(game_id: str, x_player_id: Optional[str] = Header(None)):
    if not x_player_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM rsvps WHERE game_id = %s AND player_id = %s", (game_id, x_player_id))
        return {"success": True}


# ============ ADMIN GAMES ============

@app.get("/api/admin/games", response_model=list[AdminGameResponse])
def admin_list_games(x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT
                g.*,
                COUNT(r.id) FILTER (WHERE r.status = 'confirmed') AS confirmed_count,
                COUNT(r.id) FILTER (WHERE r.status = 'pending') AS pending_count,
                COUNT(r.id) FILTER (WHERE r.status = 'declined') AS declined_count,
                COUNT(r.id) FILTER (WHERE r.status = 'waitlist') AS waitlist_count,
                COUNT(r.id) FILTER (WHERE r.has_paid) AS paid_count
            FROM games g
            LEFT JOIN rsvps r ON r.game_id = g.id
            GROUP BY g.id
            ORDER BY g.date DESC
        """)
        rows = cursor.fetchall()
        return [AdminGameResponse(**dict(row)) for row in rows]


@app.post("/api/admin/games", response_model=GameResponse)
def admin_create_game(game: GameCreate, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO games (date, time, location, max_players, notes, status)
            VALUES (%s, %s, %s, %s, %s, 'scheduled')
            RETURNING *
        """, (game.date, game.time, game.location, game.max_players, game.notes))

        row = cursor.fetchone()
        logger.info("Created game %s on %s", row["id"], game.date)
        return GameResponse(**dict(row))


@app.get("/api/admin/games/{game_id}", response_model=GameResponse)
def admin_get_game(game_id: str, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        return GameResponse(**get_game_or_404(cursor, game_id))


@app.patch("/api/admin/games/{game_id}", response_model=GameResponse)
def admin_update_game(game_id: str, update: GameUpdate, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    # Only fields present in the request body are written
    updates = update.model_dump(exclude_unset=True)
    columns = [f"{column} = %s" for column in updates]
    columns.append("updated_at = CURRENT_TIMESTAMP")

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE games SET {', '.join(columns)} WHERE id = %s RETURNING *",
            (*updates.values(), game_id)
        )
        row = cursor.fetchone()
        if not row:
            raise HTTPException(status_code=404, detail="Game not found")
        return GameResponse(**dict(row))


@app.delete("/api/admin/games/{game_id}")
def admin_delete_game(game_id: str, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        # Cascades to rsvps, teams and team assignments
        cursor.execute("DELETE FROM games WHERE id = %s", (game_id,))
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Game not found")
        logger.info("Deleted game %s", game_id)
        return {"success": True}


# ============ ADMIN PLAYERS ============

@app.get("/api/admin/games/{game_id}/players", response_model=list[RosterEntry])
def admin_get_players(game_id: str, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)
        return fetch_roster(cursor, game_id)


@app.patch("/api/admin/games/{game_id}/players/{player_id}")
def admin_update_player(game_id: str, player_id: str, update: PlayerUpdate, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    columns = ["updated_at = CURRENT_TIMESTAMP"]
    params = []
    if update.status is not None:
        columns.append("status = %s")
        params.append(update.status)
    if update.has_paid is not None:
        columns.append("has_paid = %s")
        params.append(update.has_paid)
        columns.append("paid_at = CURRENT_TIMESTAMP" if update.has_paid else "paid_at = NULL")

    where, where_params = rsvp_match_clause(game_id, player_id)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"UPDATE rsvps SET {', '.join(columns)} WHERE {where}",
            (*params, *where_params)
        )
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Player not found")
        return {"success": True}


@app.delete("/api/admin/games/{game_id}/players/{player_id}")
def admin_remove_player(game_id: str, player_id: str, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    where, where_params = rsvp_match_clause(game_id, player_id)

    with get_db() as conn:
        cursor = conn.cursor()
        cursor.execute(f"DELETE FROM rsvps WHERE {where}", where_params)
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Player not found")
        return {"success": True}


# ============ ADMIN TEAMS ============

@app.post("/api/admin/games/{game_id}/teams/auto", response_model=TeamsResponse)
def admin_generate_teams(game_id: str, x_admin_token: Optional[str] = Header(None)):
    """Propose a balanced lineup from confirmed players. Nothing is saved."""
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)
        players = fetch_confirmed_players(cursor, game_id)

    assignments = generate_teams(players)
    unassigned = find_unassigned(players, assignments)
    logger.info("Generated teams for game %s: %d placed, %d unassigned",
                game_id, len(assignments), len(unassigned))
    return TeamsResponse(assignments=assignments, unassigned=unassigned)


@app.get("/api/admin/games/{game_id}/teams", response_model=TeamsResponse)
def admin_get_teams(game_id: str, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)
        assignments = fetch_team_assignments(cursor, game_id)
        players = fetch_confirmed_players(cursor, game_id)

    return TeamsResponse(assignments=assignments, unassigned=find_unassigned(players, assignments))


@app.post("/api/admin/games/{game_id}/teams")
def admin_save_teams(game_id: str, teams: TeamsSave, x_admin_token: Optional[str] = Header(None)):
    require_admin(x_admin_token)

    try:
        validate_assignments(teams.assignments)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    with get_db() as conn:
        cursor = conn.cursor()
        get_game_or_404(cursor, game_id)
        replace_team_assignments(cursor, game_id, teams.assignments)
        return {"success": True}


# ============ CONFIGURATION ============

@app.get("/api/config")
def get_config():
    return {
        "positions": POSITIONS,
        "team_colors": TEAM_COLORS,
        "position_slots": POSITION_SLOTS,
        "total_capacity": TOTAL_CAPACITY,
        "game_statuses": GAME_STATUSES,
        "rsvp_statuses": RSVP_STATUSES,
        "defaults": {"time": GAME_TIME_DEFAULT, "location": GAME_LOCATION_DEFAULT},
        "max_players": {"default": MAX_PLAYERS_DEFAULT, "min": MAX_PLAYERS_MIN, "max": MAX_PLAYERS_MAX},
    }


# ============ HEALTH CHECK ============

@app.get("/api/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT, reload=DEBUG)
