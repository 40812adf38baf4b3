"""SQLite persistence for user voice profiles.

One connection is shared by all callers and guarded by a store-wide lock, so
every statement (reads included) is serialized. Each write is a single
transaction; the recognition counter is bumped in one UPDATE statement so
concurrent hits on the same profile cannot lose an increment.
"""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

import numpy as np

from voiceid.errors import DuplicateUser, StoreError, UserNotFound
from voiceid.speaker.codec import EMBEDDING_DIM, deserialize_embedding, serialize_embedding
from voiceid.speaker.profile import UserProfile, utcnow
from voiceid.utils.logger import get_logger

logger = get_logger(__name__)

_PROFILE_COLUMNS = """
    id, name, voice_print, enrollment_date, last_recognized,
    recognition_count, is_active, created_at, updated_at
"""


class ProfileStore:
    """CRUD operations on the ``user_profiles`` table."""

    def __init__(self, db_path: Union[str, Path] = ":memory:", embedding_dim: int = EMBEDDING_DIM):
        """Open (and if needed create) the profile database.

        Args:
            db_path: SQLite file path, or ``:memory:``
            embedding_dim: Dimension of stored voice prints
        """
        self.db_path = str(db_path)
        self.embedding_dim = embedding_dim
        self._lock = threading.Lock()

        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self._conn = sqlite3.connect(self.db_path, timeout=10.0, check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._ensure_schema()
        except sqlite3.Error as e:
            logger.error(f"Failed to open profile database {self.db_path}: {e}")
            raise StoreError(f"Failed to open {self.db_path}: {e}") from e

        logger.info(f"Profile store ready: {self.db_path}")

    def _ensure_schema(self) -> None:
        with self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS user_profiles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    voice_print BLOB NOT NULL,
                    enrollment_date TEXT NOT NULL,
                    last_recognized TEXT,
                    recognition_count INTEGER NOT NULL DEFAULT 0,
                    is_active BOOLEAN NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            # Names only need to be unique among active profiles.
            self._conn.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS idx_user_profiles_active_name
                ON user_profiles(name) WHERE is_active = 1
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_user_profiles_active ON user_profiles(is_active)"
            )

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as e:
                logger.error(f"Database operation failed: {e}")
                raise StoreError(str(e)) from e

    def _query(self, sql: str, params: tuple = ()) -> list:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                logger.error(f"Database query failed: {e}")
                raise StoreError(str(e)) from e

    def _row_to_profile(self, row: tuple) -> UserProfile:
        (pid, name, blob, enrolled, last_recognized,
         count, is_active, created_at, updated_at) = row
        return UserProfile(
            id=pid,
            name=name,
            voice_print=deserialize_embedding(blob, self.embedding_dim),
            enrollment_date=datetime.fromisoformat(enrolled),
            last_recognized=datetime.fromisoformat(last_recognized) if last_recognized else None,
            recognition_count=count,
            is_active=bool(is_active),
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    def create(self, name: str, voice_print: np.ndarray, enrollment_date: datetime) -> int:
        """Insert a new active profile.

        Args:
            name: Profile name (must not match an active profile)
            voice_print: Unit-length voice print
            enrollment_date: Enrollment timestamp

        Returns:
            Id of the new profile
        """
        blob = serialize_embedding(voice_print, self.embedding_dim)
        now = utcnow().isoformat()

        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        """
                        INSERT INTO user_profiles
                        (name, voice_print, enrollment_date, recognition_count, is_active, created_at, updated_at)
                        VALUES (?, ?, ?, 0, 1, ?, ?)
                        """,
                        (name, blob, enrollment_date.isoformat(), now, now),
                    )
            except sqlite3.IntegrityError as e:
                logger.warning(f"Active profile named '{name}' already exists")
                raise DuplicateUser(name) from e
            except sqlite3.Error as e:
                logger.error(f"Failed to create profile '{name}': {e}")
                raise StoreError(str(e)) from e

        profile_id = int(cursor.lastrowid)
        logger.debug(f"Created profile '{name}' (id={profile_id})")
        return profile_id

    def list_active(self) -> List[UserProfile]:
        """All active profiles, ordered by id."""
        rows = self._query(
            f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE is_active = 1 ORDER BY id"
        )
        return [self._row_to_profile(row) for row in rows]

    def list_all(self) -> List[UserProfile]:
        """All profiles including deactivated ones, ordered by id."""
        rows = self._query(f"SELECT {_PROFILE_COLUMNS} FROM user_profiles ORDER BY id")
        return [self._row_to_profile(row) for row in rows]

    def count_active(self) -> int:
        return int(self._query("SELECT COUNT(*) FROM user_profiles WHERE is_active = 1")[0][0])

    def get(self, profile_id: int) -> UserProfile:
        """Fetch a profile by id, active or not."""
        rows = self._query(
            f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE id = ?", (profile_id,)
        )
        if not rows:
            raise UserNotFound(profile_id)
        return self._row_to_profile(rows[0])

    def find_active_by_name(self, name: str) -> Optional[UserProfile]:
        rows = self._query(
            f"SELECT {_PROFILE_COLUMNS} FROM user_profiles WHERE name = ? AND is_active = 1",
            (name,),
        )
        return self._row_to_profile(rows[0]) if rows else None

    def increment_recognition(self, profile_id: int, at: datetime) -> None:
        """Count one recognition of a profile and record when it happened."""
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE user_profiles
                SET recognition_count = recognition_count + 1,
                    last_recognized = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (at.isoformat(), utcnow().isoformat(), profile_id),
            )
        if cursor.rowcount == 0:
            raise UserNotFound(profile_id)

    def deactivate(self, profile_id: int) -> None:
        """Soft delete: exclude the profile from identification but keep the row."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE user_profiles SET is_active = 0, updated_at = ? WHERE id = ?",
                (utcnow().isoformat(), profile_id),
            )
        if cursor.rowcount == 0:
            raise UserNotFound(profile_id)
        logger.info(f"Profile deactivated (id={profile_id})")

    def delete(self, profile_id: int) -> None:
        """Hard delete a profile."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM user_profiles WHERE id = ?", (profile_id,))
        if cursor.rowcount == 0:
            raise UserNotFound(profile_id)
        logger.info(f"Profile deleted (id={profile_id})")

    def close(self) -> None:
        with self._lock:
            self._conn.close()
