"""Audit storage behind a small repository interface.

SQLite table: audits
- id (integer, primary key)
- url (text)
- overall_score (integer)
- grade (text)
- result_json (text)
- created_at (datetime)

InMemoryAuditRepository keeps the same contract without touching disk.
"""

import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

import config
from models import ComprehensiveAuditResult


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clamp_limit(limit: int) -> int:
    return max(1, min(100, int(limit)))


class AuditRepository:
    """Interface for storing and reading audit results."""

    def save(self, url: str, result: ComprehensiveAuditResult) -> int:
        raise NotImplementedError

    def get(self, audit_id: int) -> dict | None:
        raise NotImplementedError

    def list_recent(self, limit: int = 20) -> list[dict]:
        raise NotImplementedError


class SQLiteAuditRepository(AuditRepository):
    def __init__(self, db_path: Path | str | None = None) -> None:
        self.db_path = Path(db_path or config.DB_PATH)
        self.init_db()

    def get_connection(self) -> sqlite3.Connection:
        """Return a connection to the SQLite database."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the audits table if it does not exist."""
        conn = self.get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS audits (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL,
                    overall_score INTEGER NOT NULL,
                    grade TEXT NOT NULL,
                    result_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def save(self, url: str, result: ComprehensiveAuditResult) -> int:
        """Store a new audit and return its id."""
        conn = self.get_connection()
        try:
            cursor = conn.execute(
                "INSERT INTO audits (url, overall_score, grade, result_json, created_at) VALUES (?, ?, ?, ?, ?)",
                (url, result["overall_score"], result["grade"], json.dumps(result), _now()),
            )
            conn.commit()
            return cursor.lastrowid
        finally:
            conn.close()

    def get(self, audit_id: int) -> dict | None:
        """Fetch an audit by id with its parsed result, or None."""
        conn = self.get_connection()
        try:
            row = conn.execute(
                "SELECT id, url, result_json, created_at FROM audits WHERE id = ?",
                (audit_id,),
            ).fetchone()
            if row is None:
                return None
            return {
                "id": row["id"],
                "url": row["url"],
                "result": json.loads(row["result_json"]),
                "created_at": row["created_at"],
            }
        finally:
            conn.close()

    def list_recent(self, limit: int = 20) -> list[dict]:
        """Return recent audits for the history view."""
        conn = self.get_connection()
        try:
            rows = conn.execute(
                """
                SELECT id, url, overall_score, grade, created_at
                FROM audits
                ORDER BY id DESC
                LIMIT ?
                """,
                (_clamp_limit(limit),),
            ).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()


class InMemoryAuditRepository(AuditRepository):
    def __init__(self) -> None:
        self._rows: dict[int, dict] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, url: str, result: ComprehensiveAuditResult) -> int:
        with self._lock:
            audit_id = self._next_id
            self._next_id += 1
            # Serialized so every read returns a fresh copy
            self._rows[audit_id] = {
                "id": audit_id,
                "url": url,
                "result_json": json.dumps(result),
                "created_at": _now(),
            }
            return audit_id

    def get(self, audit_id: int) -> dict | None:
        with self._lock:
            row = self._rows.get(audit_id)
        if row is None:
            return None
        return {
            "id": row["id"],
            "url": row["url"],
            "result": json.loads(row["result_json"]),
            "created_at": row["created_at"],
        }

    def list_recent(self, limit: int = 20) -> list[dict]:
        with self._lock:
            rows = sorted(self._rows.values(), key=lambda r: r["id"], reverse=True)[: _clamp_limit(limit)]
        out = []
        for row in rows:
            result = json.loads(row["result_json"])
            out.append(
                {
                    "id": row["id"],
                    "url": row["url"],
                    "overall_score": result["overall_score"],
                    "grade": result["grade"],
                    "created_at": row["created_at"],
                }
            )
        return out


def create_repository(store: str | None = None) -> AuditRepository:
    store = (store or config.AUDIT_STORE).lower()
    if store == "memory":
        return InMemoryAuditRepository()
    if store == "sqlite":
        return SQLiteAuditRepository()
    raise ValueError(f"Unknown audit store: {store}")
