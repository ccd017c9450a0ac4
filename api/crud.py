# api/crud.py

import logging
from datetime import timezone

from sqlalchemy import select, insert, update, delete, func
from sqlalchemy.engine import Connection

from skill_system.models import ProgressRecord
from skill_system.store import ProgressStore
from . import database, schemas
from .security import get_password_hash

logger = logging.getLogger(__name__)

# We use the SQLAlchemy table objects defined in database.py


def get_user_by_email(conn: Connection, email: str):
    """Fetches a single user by their email address."""
    query = select(database.users).where(database.users.c.email == email)
    return conn.execute(query).first()


def create_user(conn: Connection, user: schemas.UserCreate):
    """
    Creates a new user with a hashed password and returns the stored row.
    The first user to register becomes the catalog admin.
    """
    user_count = conn.execute(select(func.count()).select_from(database.users)).scalar()
    user_data = user.model_dump(exclude={"password"})
    user_data["hashed_password"] = get_password_hash(user.password)
    user_data["is_active"] = True
    user_data["is_admin"] = user_count == 0

    conn.execute(insert(database.users).values(user_data))
    conn.commit()
    return get_user_by_email(conn, user.email)


# --- Progress ---

def _row_to_record(row) -> ProgressRecord:
    last_updated = row.last_updated
    # SQLite hands timestamps back without a zone; they are stored as UTC.
    if last_updated.tzinfo is None:
        last_updated = last_updated.replace(tzinfo=timezone.utc)
    return ProgressRecord(
        skill_id=row.skill_id,
        current_sets=row.current_sets,
        current_reps=row.current_reps,
        completed=row.completed,
        last_updated=last_updated,
    )


def _record_values(user_email: str, record: ProgressRecord) -> dict:
    return {
        "user_email": user_email,
        "skill_id": record.skill_id,
        "current_sets": record.current_sets,
        "current_reps": record.current_reps,
        "completed": record.completed,
        "last_updated": record.last_updated,
    }


def load_progress_store(conn: Connection, user_email: str) -> ProgressStore:
    """Loads every progress row of a user into a fresh ProgressStore."""
    table = database.user_skill_progress
    query = select(table).where(table.c.user_email == user_email).order_by(table.c.id)
    return ProgressStore(_row_to_record(row) for row in conn.execute(query))


def save_progress_record(conn: Connection, user_email: str, record: ProgressRecord):
    """Inserts or updates the row for one (user, skill) pair."""
    table = database.user_skill_progress
    values = _record_values(user_email, record)
    existing = conn.execute(
        select(table.c.id).where(
            (table.c.user_email == user_email) & (table.c.skill_id == record.skill_id)
        )
    ).first()
    if existing:
        conn.execute(update(table).where(table.c.id == existing.id).values(values))
    else:
        conn.execute(insert(table).values(values))
    conn.commit()


def replace_progress(conn: Connection, user_email: str, store: ProgressStore):
    """
    Replaces all of a user's progress rows with the contents of `store` in a
    single transaction. On failure the previous rows are kept.
    """
    table = database.user_skill_progress
    try:
        conn.execute(delete(table).where(table.c.user_email == user_email))
        rows = [_record_values(user_email, record) for _, record in store.items()]
        if rows:
            conn.execute(insert(table), rows)
        conn.commit()
    except Exception:
        conn.rollback()
        logger.exception("Failed to replace progress for %s", user_email)
        raise


def clear_progress(conn: Connection, user_email: str):
    table = database.user_skill_progress
    conn.execute(delete(table).where(table.c.user_email == user_email))
    conn.commit()
