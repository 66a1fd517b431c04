import logging
import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from config import get_db_config

logger = logging.getLogger(__name__)


@contextmanager
def get_db():
    """Get a database connection with automatic commit/rollback."""
    config = get_db_config()
    conn = psycopg2.connect(
        host=config["host"],
        port=config["port"],
        database=config["database"],
        user=config["user"],
        password=config["password"],
        cursor_factory=RealDictCursor
    )
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db():
    """Initialize database schema."""
    with get_db() as conn:
        cursor = conn.cursor()

        # Profiles of registered players
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                id UUID PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                full_name TEXT NOT NULL,
                preferred_position TEXT NOT NULL
                    CHECK(preferred_position IN ('defender', 'midfielder', 'attacker')),
                phone TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Games table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS games (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                date DATE NOT NULL,
                time TEXT NOT NULL DEFAULT '22:45',
                location TEXT NOT NULL DEFAULT 'Default Field',
                status TEXT NOT NULL DEFAULT 'scheduled'
                    CHECK(status IN ('scheduled', 'cancelled', 'completed')),
                max_players INTEGER NOT NULL DEFAULT 40,
                notes TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # RSVPs: player_id for registered players, guest_* columns for walk-ins
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS rsvps (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                game_id UUID NOT NULL REFERENCES games(id) ON DELETE CASCADE,
                player_id UUID REFERENCES profiles(id) ON DELETE CASCADE,
                guest_name TEXT,
                guest_phone TEXT,
                guest_position TEXT
                    CHECK(guest_position IN ('defender', 'midfielder', 'attacker')),
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK(status IN ('pending', 'confirmed', 'declined', 'waitlist')),
                has_paid BOOLEAN NOT NULL DEFAULT FALSE,
                paid_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(game_id, player_id)
            )
        """)

        # Teams table, one row per color per game
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS teams (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                game_id UUID NOT NULL REFERENCES games(id) ON DELETE CASCADE,
                color TEXT NOT NULL CHECK(color IN ('red', 'white', 'blue', 'black')),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(game_id, color)
            )
        """)

        # Team assignments reference either a profile or a guest RSVP
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS team_assignments (
                id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
                team_id UUID NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
                player_id UUID REFERENCES profiles(id) ON DELETE CASCADE,
                rsvp_id UUID REFERENCES rsvps(id) ON DELETE CASCADE,
                position_slot TEXT NOT NULL
                    CHECK(position_slot IN ('defender', 'midfielder', 'attacker')),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                CHECK((player_id IS NULL) <> (rsvp_id IS NULL))
            )
        """)

        conn.commit()
        logger.info("Database schema ready")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    print("Database initialized successfully")
