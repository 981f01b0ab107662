"""
SQLite Tracker Store for Sprout.

Persistence collaborator for the practice engine. The core never imports
this module; callers load trackers here, hand them to the engine and save
what comes back.

Provides:
- tracker snapshots per (learner, item)
- stored complexity level per (learner, subject)

Database location: ~/.sprout/state.db
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from sprout.core.identifiers import ItemId, LearnerId
from sprout.core.tracker import ProgressTracker
from sprout.learning.progression import MIN_COMPLEXITY_LEVEL, advance_level


class TrackerStore:
    """
    SQLite-backed persistence for tracker snapshots and learner levels.

    Handles:
    - Snapshot per (learner, item), stored as JSON
    - Current complexity level per (learner, subject)
    - Session boundary cooldown ticks
    """

    DEFAULT_DB_PATH = Path.home() / ".sprout" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the store.

        Args:
            db_path: Custom database path (defaults to ~/.sprout/state.db)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"TrackerStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS trackers (
                learner_id TEXT NOT NULL,
                item_id TEXT NOT NULL,
                snapshot TEXT NOT NULL,
                PRIMARY KEY (learner_id, item_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS learner_levels (
                learner_id TEXT NOT NULL,
                subject TEXT NOT NULL,
                level INTEGER NOT NULL DEFAULT 1,
                PRIMARY KEY (learner_id, subject)
            )
        """)

        self.conn.commit()

    # =========================================================================
    # Tracker Operations
    # =========================================================================

    def load(self, learner_id: LearnerId, item_id: ItemId) -> ProgressTracker | None:
        """
        Load one tracker.

        Returns:
            ProgressTracker, or None if the learner never touched the item
        """
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT snapshot FROM trackers WHERE learner_id = ? AND item_id = ?",
            (str(learner_id), str(item_id)),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return ProgressTracker.from_snapshot(json.loads(row["snapshot"]))

    def load_or_create(self, learner_id: LearnerId, item_id: ItemId) -> ProgressTracker:
        return self.load(learner_id, item_id) or ProgressTracker.create_new(item_id, learner_id)

    def load_many(
        self, learner_id: LearnerId, item_ids: Iterable[str]
    ) -> dict[str, ProgressTracker]:
        """Trackers for the given items, keyed by item id. Missing items are omitted."""
        wanted = set(item_ids)
        return {
            item_id: tracker
            for item_id, tracker in self.load_all(learner_id).items()
            if item_id in wanted
        }

    def load_all(self, learner_id: LearnerId) -> dict[str, ProgressTracker]:
        """All trackers for a learner, keyed by item id."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT item_id, snapshot FROM trackers WHERE learner_id = ? ORDER BY item_id",
            (str(learner_id),),
        )
        return {
            row["item_id"]: ProgressTracker.from_snapshot(json.loads(row["snapshot"]))
            for row in cursor.fetchall()
        }

    def save(self, tracker: ProgressTracker) -> None:
        """Insert or replace a tracker snapshot."""
        self._upsert(tracker)
        self.conn.commit()

    def save_all(self, trackers: Iterable[ProgressTracker]) -> int:
        """Save trackers in one transaction. Returns the number saved."""
        count = 0
        for tracker in trackers:
            self._upsert(tracker)
            count += 1
        self.conn.commit()
        return count

    def _upsert(self, tracker: ProgressTracker) -> None:
        self.conn.execute(
            """
            INSERT INTO trackers (learner_id, item_id, snapshot)
            VALUES (?, ?, ?)
            ON CONFLICT(learner_id, item_id) DO UPDATE SET
                snapshot = excluded.snapshot
        """,
            (
                str(tracker.learner_id),
                str(tracker.item_id),
                json.dumps(tracker.to_snapshot(), ensure_ascii=False),
            ),
        )

    def delete(self, learner_id: LearnerId, item_id: ItemId) -> bool:
        """Explicit reset of one item. Returns True if a row was removed."""
        cursor = self.conn.execute(
            "DELETE FROM trackers WHERE learner_id = ? AND item_id = ?",
            (str(learner_id), str(item_id)),
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def reset_learner(self, learner_id: LearnerId) -> int:
        """
        Delete all progress and levels for a learner.

        Returns:
            Number of trackers removed
        """
        cursor = self.conn.execute(
            "DELETE FROM trackers WHERE learner_id = ?", (str(learner_id),)
        )
        removed = cursor.rowcount
        self.conn.execute("DELETE FROM learner_levels WHERE learner_id = ?", (str(learner_id),))
        self.conn.commit()
        logger.warning(f"Reset {removed} trackers for learner {learner_id}")
        return removed

    def tick_cooldowns(self, learner_id: LearnerId, item_ids: Iterable[str]) -> int:
        """
        Apply one session boundary to the given items.

        Returns:
            Number of trackers whose cooldown went down
        """
        trackers = self.load_many(learner_id, item_ids)
        changed = []
        for tracker in trackers.values():
            before = tracker.cooldown_sessions_left
            tracker.decrement_cooldown()
            if tracker.cooldown_sessions_left != before:
                changed.append(tracker)
        self.save_all(changed)
        logger.debug(f"Cooldown tick for {learner_id}: {len(changed)} trackers changed")
        return len(changed)

    # =========================================================================
    # Level Operations
    # =========================================================================

    def get_level(self, learner_id: LearnerId, subject: str) -> int:
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT level FROM learner_levels WHERE learner_id = ? AND subject = ?",
            (str(learner_id), subject),
        )
        row = cursor.fetchone()
        return row["level"] if row else MIN_COMPLEXITY_LEVEL

    def set_level(self, learner_id: LearnerId, subject: str, level: int) -> None:
        self.conn.execute(
            """
            INSERT INTO learner_levels (learner_id, subject, level)
            VALUES (?, ?, ?)
            ON CONFLICT(learner_id, subject) DO UPDATE SET level = excluded.level
        """,
            (str(learner_id), subject, level),
        )
        self.conn.commit()

    def advance_level(self, learner_id: LearnerId, subject: str) -> int:
        """Move the stored level up by one (capped). Returns the new level."""
        current = self.get_level(learner_id, subject)
        new_level = advance_level(current)
        if new_level != current:
            self.set_level(learner_id, subject, new_level)
            logger.info(f"Learner {learner_id} advanced to {subject} level {new_level}")
        return new_level
