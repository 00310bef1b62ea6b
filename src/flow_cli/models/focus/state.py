"""Active session state with persistent storage.

At most one session (work or break) is active at a time. It lives in a small
JSON file so that separate ``flow`` invocations (and a crashed UI) see the
same timer.
"""

import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from .snapshot import ActiveSession, SessionStatus, SessionType


@dataclass
class SessionState:
    """Represents the active session."""

    session_id: str
    session_type: SessionType
    methodology: str
    start_time: str  # ISO 8601
    end_time: str  # ISO 8601
    duration_minutes: int
    status: SessionStatus
    task_id: str | None = None
    task_title: str | None = None
    intended_outcome: str = ""
    tags: list[str] = field(default_factory=list)
    pause_time: str | None = None
    accumulated_paused_seconds: int = 0

    @property
    def start_datetime(self) -> datetime:
        """Parse start time as datetime."""
        return datetime.fromisoformat(self.start_time.replace("Z", "+00:00"))

    @property
    def end_datetime(self) -> datetime:
        """Parse end time as datetime."""
        return datetime.fromisoformat(self.end_time.replace("Z", "+00:00"))

    @property
    def pause_datetime(self) -> datetime | None:
        """Parse pause time as datetime."""
        if self.pause_time:
            return datetime.fromisoformat(self.pause_time.replace("Z", "+00:00"))
        return None

    def time_remaining(self) -> int:
        """Calculate seconds remaining in session."""
        now = datetime.now().astimezone()
        end = self.end_datetime

        # If paused, return time remaining at pause
        if self.status == "paused" and self.pause_datetime:
            remaining = (end - self.pause_datetime).total_seconds()
        else:
            remaining = (end - now).total_seconds()

        return max(0, int(remaining))

    def time_elapsed(self) -> int:
        """Calculate seconds elapsed in session (excluding paused time)."""
        now = datetime.now().astimezone()
        start = self.start_datetime

        if self.status == "paused" and self.pause_datetime:
            elapsed = (self.pause_datetime - start).total_seconds()
        else:
            elapsed = (now - start).total_seconds()

        actual_elapsed = elapsed - self.accumulated_paused_seconds
        return max(0, min(int(actual_elapsed), self.duration_minutes * 60))

    def is_expired(self) -> bool:
        """A running session whose end time has passed."""
        return self.status == "running" and self.time_remaining() == 0

    def to_active_session(self) -> ActiveSession:
        """Freeze the current state into a snapshot value."""
        return ActiveSession(
            session_id=self.session_id,
            session_type=self.session_type,
            status=self.status,
            duration_seconds=self.duration_minutes * 60,
            elapsed_seconds=self.time_elapsed(),
            remaining_seconds=self.time_remaining(),
            started_at=self.start_datetime,
            task_title=self.task_title,
            intended_outcome=self.intended_outcome,
            tags=tuple(self.tags),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        """Create from dictionary."""
        return cls(**data)


class SessionStateManager:
    """Manages session state persistence."""

    def __init__(self, state_dir: Path | None = None):
        """Initialize state manager."""
        if state_dir is None:
            from platformdirs import user_data_dir

            state_dir = Path(user_data_dir("flow_cli")) / "state"

        self.state_dir = state_dir
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.state_file = self.state_dir / "current_session.json"

    def save(self, session: SessionState) -> None:
        """Save session state to file."""
        with open(self.state_file, "w") as f:
            json.dump(session.to_dict(), f, indent=2)

        self.state_file.chmod(0o600)

    def load(self) -> SessionState | None:
        """Load session state from file. Returns None if file missing or invalid."""
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file) as f:
                data = json.load(f)
            return SessionState.from_dict(data)
        except (json.JSONDecodeError, TypeError, KeyError):
            return None

    def delete(self) -> None:
        """Delete session state file."""
        if self.state_file.exists():
            self.state_file.unlink()

    def has_active_session(self) -> bool:
        """Check if an active session exists."""
        return self.load() is not None

    @staticmethod
    def create_session(
        session_type: SessionType,
        duration_minutes: int,
        methodology: str = "pomodoro",
        task_id: str | None = None,
        task_title: str | None = None,
        intended_outcome: str = "",
        tags: list[str] | None = None,
    ) -> SessionState:
        """Create a new running session."""
        now = datetime.now().astimezone()
        end = now + timedelta(minutes=duration_minutes)

        return SessionState(
            session_id=str(uuid.uuid4()),
            session_type=session_type,
            methodology=methodology,
            start_time=now.isoformat(),
            end_time=end.isoformat(),
            duration_minutes=duration_minutes,
            status="running",
            task_id=task_id,
            task_title=task_title,
            intended_outcome=intended_outcome,
            tags=list(tags or []),
        )

    def pause_session(self, session: SessionState) -> SessionState:
        """Pause a running session."""
        if session.status != "running":
            raise ValueError("Can only pause running sessions")

        now = datetime.now().astimezone()
        session.status = "paused"
        session.pause_time = now.isoformat()

        self.save(session)
        return session

    def resume_session(self, session: SessionState) -> SessionState:
        """Resume a paused session."""
        if session.status != "paused":
            raise ValueError("Can only resume paused sessions")

        if not session.pause_datetime:
            raise ValueError("Pause time not set")

        now = datetime.now().astimezone()

        paused_duration = (now - session.pause_datetime).total_seconds()
        session.accumulated_paused_seconds += int(paused_duration)

        # Extend end time by paused duration
        end = session.end_datetime + timedelta(seconds=paused_duration)
        session.end_time = end.isoformat()

        session.status = "running"
        session.pause_time = None

        self.save(session)
        return session
