"""
SQLite Database Repository - Learner Profile Persistence
=========================================================

One row per phone number. Topic history is stored as a JSON array so its
insertion order survives round trips.
"""

import json
import sqlite3
import logging
from pathlib import Path
from typing import Optional, Union
from contextlib import contextmanager

from ...domain.learner import LearnerProfile
from ...domain.errors import PersistenceError

logger = logging.getLogger(__name__)

DATABASE_FILE = "absolute_learner.db"


class Database:
    """
    SQLite store for learner profiles.

    Usage:
        db = Database()
        db.init()

        profile = db.find_by_phone("+923001234567")
        if profile is None:
            profile = db.create("+923001234567")

        profile.assign_topic("Git & GitHub")
        db.save(profile)
    """

    def __init__(self, db_path: Union[str, Path] = DATABASE_FILE, timeout: float = 10.0):
        self.db_path = str(db_path)
        # Seconds a statement waits on a locked database before failing
        self.timeout = timeout

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open profile store {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Profile store error: {e}") from e
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS learners (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    phone TEXT UNIQUE NOT NULL,
                    name TEXT DEFAULT '',
                    last_topic TEXT,
                    history TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT NOT NULL
                )
            """)

            self._migrate_learners_table(conn)

            logger.info(f"Database initialized: {self.db_path}")

    def _migrate_learners_table(self, conn):
        """Add missing columns to existing learners table."""
        existing = {row[1] for row in conn.execute("PRAGMA table_info(learners)").fetchall()}

        migrations = {
            "name": "ALTER TABLE learners ADD COLUMN name TEXT DEFAULT ''",
        }

        for col, sql in migrations.items():
            if col not in existing:
                conn.execute(sql)
                logger.info(f"Migrated: added '{col}' column to learners")

    # ── Learner CRUD ───────────────────────────────────────────────

    def find_by_phone(self, phone: str) -> Optional[LearnerProfile]:
        """Get learner by phone number."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM learners WHERE phone = ?", (phone,)
            ).fetchone()
            return self._row_to_profile(row) if row else None

    def create(self, phone: str, name: str = "") -> LearnerProfile:
        """
        Create a learner with empty history.

        Atomic create-if-absent: when another request inserted the same
        phone first, the existing row is returned untouched.
        """
        profile = LearnerProfile(phone=phone, name=name)
        with self._get_connection() as conn:
            cursor = conn.execute(
                """INSERT OR IGNORE INTO learners (phone, name, last_topic, history, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (phone, name, None, "[]", profile.created_at)
            )
            if cursor.rowcount:
                logger.info(f"New learner registered: {phone}")
                return profile

            row = conn.execute(
                "SELECT * FROM learners WHERE phone = ?", (phone,)
            ).fetchone()
            return self._row_to_profile(row)

    def get_or_create(self, phone: str, name: str = "") -> LearnerProfile:
        """Load a learner, creating the record on first contact."""
        profile = self.find_by_phone(phone)
        if profile is None:
            profile = self.create(phone, name=name)
        return profile

    def save(self, profile: LearnerProfile) -> None:
        """Persist name, last topic and history (last write wins)."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """UPDATE learners
                   SET name = ?, last_topic = ?, history = ?
                   WHERE phone = ?""",
                (profile.name, profile.last_topic, json.dumps(profile.history), profile.phone)
            )
            if cursor.rowcount == 0:
                raise PersistenceError(f"Learner {profile.phone} does not exist")

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM learners").fetchone()[0]

    def _row_to_profile(self, row: sqlite3.Row) -> LearnerProfile:
        """Convert database row to LearnerProfile object."""
        try:
            history = json.loads(row["history"] or "[]")
        except json.JSONDecodeError:
            logger.warning(f"Corrupt history for {row['phone']}, treating as empty")
            history = []

        return LearnerProfile(
            phone=row["phone"],
            name=row["name"] or "",
            last_topic=row["last_topic"],
            history=list(history),
            created_at=row["created_at"] or ""
        )


def init_database(db_path: Union[str, Path] = DATABASE_FILE, timeout: float = 10.0) -> Database:
    """Create the store and make sure its tables exist."""
    db = Database(db_path, timeout=timeout)
    db.init()
    return db
