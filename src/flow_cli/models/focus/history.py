"""Session history and task list with SQLite storage."""

import json
import sqlite3
import uuid
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

from .snapshot import DailyStats, Task
from .state import SessionState

# Columns that completion artifacts may set after a session has been logged
_ARTIFACT_COLUMNS = (
    "accomplishment",
    "ritual",
    "focus_score",
    "energize_activity",
    "outcome_achieved",
)


class HistoryStore:
    """Finished sessions, their completion artifacts, and recent tasks."""

    def __init__(self, db_path: Path | None = None):
        """Initialize history store."""
        if db_path is None:
            from platformdirs import user_data_dir

            db_path = Path(user_data_dir("flow_cli")) / "flow_history.db"

        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_database(self) -> None:
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    session_type TEXT NOT NULL,
                    methodology TEXT NOT NULL,
                    task_id TEXT,
                    task_title TEXT,
                    intended_outcome TEXT,
                    tags TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    duration_minutes INTEGER NOT NULL,
                    actual_seconds INTEGER NOT NULL,
                    status TEXT NOT NULL,
                    accomplishment TEXT,
                    ritual TEXT,
                    focus_score INTEGER,
                    energize_activity TEXT,
                    outcome_achieved TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS distractions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    text TEXT NOT NULL,
                    category TEXT,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL UNIQUE,
                    highlight_date TEXT,
                    created_at TEXT NOT NULL,
                    last_used_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_sessions_date
                ON sessions(start_time)
                """
            )
            conn.commit()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def log_session(self, session: SessionState, status: str = "completed") -> None:
        """Archive a finished (completed or stopped) session."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO sessions (
                    id, session_type, methodology, task_id, task_title,
                    intended_outcome, tags, start_time, end_time,
                    duration_minutes, actual_seconds, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.session_id,
                    session.session_type,
                    session.methodology,
                    session.task_id,
                    session.task_title,
                    session.intended_outcome,
                    json.dumps(session.tags),
                    session.start_time,
                    datetime.now().astimezone().isoformat(),
                    session.duration_minutes,
                    session.time_elapsed(),
                    status,
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()

    def last_session_id(self, session_type: str = "work") -> str | None:
        """Id of the most recently started session of ``session_type``."""
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id FROM sessions
                WHERE session_type = ?
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (session_type,),
            ).fetchone()
        return row["id"] if row else None

    def update_session(self, session_id: str, **fields: Any) -> None:
        """Attach completion artifacts (accomplishment, ritual, ...) to a session."""
        unknown = set(fields) - set(_ARTIFACT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown session fields: {', '.join(sorted(unknown))}")
        if not fields:
            return
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE sessions SET {assignments} WHERE id = ?",
                (*fields.values(), session_id),
            )
            conn.commit()
        if cursor.rowcount == 0:
            raise ValueError(f"Session {session_id} not found")

    def get_session(self, session_id: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
        return dict(row) if row else None

    def add_distraction(self, session_id: str, text: str, category: str = "") -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO distractions (session_id, text, category, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (session_id, text, category or None, datetime.now().isoformat()),
            )
            conn.commit()

    def get_distractions(self, session_id: str) -> list[dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM distractions WHERE session_id = ? ORDER BY id",
                (session_id,),
            ).fetchall()
        return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @staticmethod
    def _task(row: sqlite3.Row) -> Task:
        highlight = row["highlight_date"]
        return Task(
            task_id=row["id"],
            title=row["title"],
            highlight_date=date.fromisoformat(highlight) if highlight else None,
        )

    def touch_task(self, title: str) -> Task:
        """Return the task named ``title``, creating it, and mark it recently used."""
        now = datetime.now().isoformat()
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE title = ?", (title,)).fetchone()
            if row is None:
                conn.execute(
                    """
                    INSERT INTO tasks (id, title, created_at, last_used_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (str(uuid.uuid4()), title, now, now),
                )
            else:
                conn.execute(
                    "UPDATE tasks SET last_used_at = ? WHERE id = ?", (now, row["id"])
                )
            conn.commit()
            row = conn.execute("SELECT * FROM tasks WHERE title = ?", (title,)).fetchone()
        return self._task(row)

    def set_highlight(self, task_id: str, day: date) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE tasks SET highlight_date = ? WHERE id = ?",
                (day.isoformat(), task_id),
            )
            conn.commit()

    def get_task(self, task_id: str) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._task(row) if row else None

    def recent_tasks(self, limit: int = 3) -> list[Task]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY last_used_at DESC LIMIT ?", (limit,)
            ).fetchall()
        return [self._task(row) for row in rows]

    def highlight_for(self, day: date) -> Task | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE highlight_date = ? LIMIT 1",
                (day.isoformat(),),
            ).fetchone()
        return self._task(row) if row else None

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def daily_stats(self, day: date | None = None) -> DailyStats:
        """Counters for sessions started on ``day`` (default today)."""
        day = day or date.today()
        start = datetime.combine(day, datetime.min.time()).astimezone()
        end = start + timedelta(days=1)
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT
                    SUM(CASE WHEN session_type = 'work' THEN 1 ELSE 0 END) AS work,
                    SUM(CASE WHEN session_type != 'work' THEN 1 ELSE 0 END) AS breaks,
                    SUM(CASE WHEN session_type = 'work' THEN actual_seconds ELSE 0 END)
                        AS work_seconds
                FROM sessions
                WHERE start_time >= ? AND start_time < ?
                """,
                (start.isoformat(), end.isoformat()),
            ).fetchone()
        return DailyStats(
            work_sessions=row["work"] or 0,
            breaks_taken=row["breaks"] or 0,
            total_work_seconds=row["work_seconds"] or 0,
        )

    def weekly_summary(self, days: int = 7) -> list[dict[str, Any]]:
        """Per-day work totals and average focus score for the last ``days`` days."""
        today = date.today()
        summary = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            stats = self.daily_stats(day)
            start = datetime.combine(day, datetime.min.time()).astimezone()
            end = start + timedelta(days=1)
            with self._connect() as conn:
                row = conn.execute(
                    """
                    SELECT AVG(focus_score) AS focus,
                           (SELECT COUNT(*) FROM distractions d
                            WHERE d.session_id IN (
                                SELECT id FROM sessions
                                WHERE start_time >= ?1 AND start_time < ?2
                            )) AS distractions
                    FROM sessions
                    WHERE start_time >= ?1 AND start_time < ?2
                    AND session_type = 'work'
                    """,
                    (start.isoformat(), end.isoformat()),
                ).fetchone()
            summary.append(
                {
                    "date": day,
                    "work_sessions": stats.work_sessions,
                    "work_minutes": stats.total_work_minutes,
                    "avg_focus": row["focus"],
                    "distractions": row["distractions"] or 0,
                }
            )
        return summary
