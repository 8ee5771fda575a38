"""
Insight State Store — persisted cooldown records and the insight audit log.

Behavioral Contract:
- One state row per (user_id, insight_id); writes replace the row
- The audit log is append-only; no entry is modified or deleted
- Audit writes are best-effort: a failed write is logged, never raised
"""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from insight_kernel.models.cooldown import AuditEvent, AuditLogEntry, InsightStateRecord
from insight_kernel.models.insight import InsightId

logger = logging.getLogger(__name__)


class InsightStateStore:
    """
    Cooldown / lifecycle state keyed by (user_id, insight_id).
    SQLite; defaults to an in-memory database.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS insight_state (
                user_id TEXT NOT NULL,
                insight_id TEXT NOT NULL,
                status TEXT NOT NULL,
                dismiss_count INTEGER NOT NULL DEFAULT 0,
                cooldown_until TEXT,
                last_seen_at TEXT,
                record_json TEXT NOT NULL,
                PRIMARY KEY (user_id, insight_id)
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_insight_state_status ON insight_state(user_id, status)
        """)
        self._conn.commit()

    def upsert(self, record: InsightStateRecord) -> InsightStateRecord:
        self._conn.execute(
            """
            INSERT OR REPLACE INTO insight_state (
                user_id, insight_id, status, dismiss_count,
                cooldown_until, last_seen_at, record_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.user_id,
                record.insight_id.value,
                record.status.value,
                record.dismiss_count,
                record.cooldown_until.isoformat() if record.cooldown_until else None,
                record.last_seen_at.isoformat() if record.last_seen_at else None,
                record.model_dump_json(),
            ),
        )
        self._conn.commit()
        return record

    def _deserialize(self, row: sqlite3.Row) -> InsightStateRecord:
        return InsightStateRecord.model_validate_json(row["record_json"])

    def get(self, user_id: str, insight_id: InsightId) -> Optional[InsightStateRecord]:
        row = self._conn.execute(
            "SELECT record_json FROM insight_state WHERE user_id = ? AND insight_id = ?",
            (user_id, InsightId(insight_id).value),
        ).fetchone()
        return self._deserialize(row) if row else None

    def list_for_user(self, user_id: str) -> List[InsightStateRecord]:
        rows = self._conn.execute(
            "SELECT record_json FROM insight_state WHERE user_id = ? ORDER BY insight_id",
            (user_id,),
        ).fetchall()
        return [self._deserialize(r) for r in rows]

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM insight_state").fetchone()
        return row["cnt"]

    def close(self) -> None:
        self._conn.close()


class InsightAuditLog:
    """Append-only log of insight state transitions."""

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS insight_audit_log (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                insight_id TEXT NOT NULL,
                event TEXT NOT NULL,
                metadata_json TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_audit_user ON insight_audit_log(user_id, insight_id)
        """)
        self._conn.commit()

    def log_event(
        self,
        user_id: str,
        insight_id: InsightId,
        event: AuditEvent,
        now: datetime,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLogEntry]:
        """Append one event. Returns None when the write failed."""
        entry = AuditLogEntry(
            id=f"aud_{uuid4().hex[:12]}",
            user_id=user_id,
            insight_id=insight_id,
            event=event,
            metadata=metadata or {},
            created_at=now,
        )
        try:
            self._conn.execute(
                """
                INSERT INTO insight_audit_log (
                    id, user_id, insight_id, event, metadata_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.user_id,
                    entry.insight_id.value,
                    entry.event.value,
                    json.dumps(entry.metadata, sort_keys=True, default=str),
                    entry.created_at.isoformat(),
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning(f"Audit write failed for {user_id}/{insight_id} {event.value}: {e}")
            return None
        return entry

    def events_for(self, user_id: str, insight_id: Optional[InsightId] = None) -> List[AuditLogEntry]:
        if insight_id is None:
            rows = self._conn.execute(
                "SELECT * FROM insight_audit_log WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM insight_audit_log WHERE user_id = ? AND insight_id = ? ORDER BY rowid",
                (user_id, InsightId(insight_id).value),
            ).fetchall()
        return [
            AuditLogEntry(
                id=r["id"],
                user_id=r["user_id"],
                insight_id=r["insight_id"],
                event=r["event"],
                metadata=json.loads(r["metadata_json"]),
                created_at=r["created_at"],
            )
            for r in rows
        ]

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM insight_audit_log").fetchone()
        return row["cnt"]

    def close(self) -> None:
        self._conn.close()
