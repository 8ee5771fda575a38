"""
Memory Store — SQLite backing store for governance memory records.

Writes are observational and best-effort: a failed save is logged as a
warning and reported through the return value, never raised.
"""

import logging
import sqlite3
from typing import List, Optional

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.models.config import EngineConfig
from insight_kernel.models.cta import CTAIntent, CTASurface
from insight_kernel.models.governance import MemoryRecord

logger = logging.getLogger(__name__)


class MemoryStore:
    """One row per (user_id, intent, surface)."""

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "MemoryStore":
        return cls(config.memory_db_path)

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS cta_memory (
                user_id TEXT NOT NULL,
                intent TEXT NOT NULL,
                surface TEXT NOT NULL,
                exposure_count INTEGER NOT NULL,
                last_seen_at TEXT NOT NULL,
                record_json TEXT NOT NULL,
                PRIMARY KEY (user_id, intent, surface)
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_cta_memory_last_seen ON cta_memory(last_seen_at)
        """)
        self._conn.commit()

    @diagnostic_entry("memory_store.save")
    def save(self, record: MemoryRecord) -> bool:
        if record.user_id is None:
            logger.warning(f"Skipping memory record without user_id ({record.intent.value}/{record.surface.value})")
            return False
        try:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO cta_memory (
                    user_id, intent, surface, exposure_count, last_seen_at, record_json
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.user_id,
                    record.intent.value,
                    record.surface.value,
                    record.exposure_count,
                    record.last_seen_at.isoformat(),
                    record.model_dump_json(),
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning(f"Memory write failed for {record.user_id}: {e}")
            return False
        return True

    def _deserialize(self, row: sqlite3.Row) -> MemoryRecord:
        return MemoryRecord.model_validate_json(row["record_json"])

    @diagnostic_entry("memory_store.get")
    def get(self, user_id: str, intent: CTAIntent, surface: CTASurface) -> Optional[MemoryRecord]:
        row = self._conn.execute(
            "SELECT record_json FROM cta_memory WHERE user_id = ? AND intent = ? AND surface = ?",
            (user_id, CTAIntent(intent).value, CTASurface(surface).value),
        ).fetchone()
        return self._deserialize(row) if row else None

    @diagnostic_entry("memory_store.list_for_user")
    def list_for_user(self, user_id: str) -> List[MemoryRecord]:
        rows = self._conn.execute(
            "SELECT record_json FROM cta_memory WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        ).fetchall()
        return [self._deserialize(r) for r in rows]

    @diagnostic_entry("memory_store.list_all")
    def list_all(self) -> List[MemoryRecord]:
        rows = self._conn.execute("SELECT record_json FROM cta_memory ORDER BY rowid").fetchall()
        return [self._deserialize(r) for r in rows]

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM cta_memory").fetchone()
        return row["cnt"]

    def close(self) -> None:
        self._conn.close()
