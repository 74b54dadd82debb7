"""Workout plan data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from ..errors import ValidationError
from .identifiers import EntityId, parse_entity_id


class CompletionStatus(str, Enum):
    """Adherence status for a session or meal on a given day."""

    COMPLETED = "completed"
    NOT_COMPLETED = "not_completed"

    @classmethod
    def parse(cls, value: str) -> "CompletionStatus":
        """Parse a status, accepting legacy Spanish spellings."""
        legacy = {"completado": cls.COMPLETED, "no_completado": cls.NOT_COMPLETED}
        if value in legacy:
            return legacy[value]
        return cls(value)


@dataclass
class CompletionRecord:
    """A single day's adherence record attached to a Session or Meal."""

    date: date
    day_of_week: str
    status: CompletionStatus
    completion_time: str | None = None  # "HH:MM"
    notes: str = ""

    @classmethod
    def for_today(
        cls, status: CompletionStatus = CompletionStatus.COMPLETED, notes: str = ""
    ) -> "CompletionRecord":
        """Create a record for the current day."""
        now = datetime.now()
        return cls(
            date=now.date(),
            day_of_week=now.strftime("%A"),
            status=status,
            completion_time=now.strftime("%H:%M"),
            notes=notes,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "status": self.status.value,
            "completion_time": self.completion_time,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompletionRecord":
        """Create from dictionary."""
        return cls(
            date=date.fromisoformat(data["date"][:10]),
            day_of_week=data.get("day_of_week", ""),
            status=CompletionStatus.parse(data["status"]),
            completion_time=data.get("completion_time"),
            notes=data.get("notes") or "",
        )


@dataclass
class WorkoutExercise:
    """An exercise prescribed within a session.

    Interval-based exercises carry duration_seconds and leave reps unset.
    """

    name: str
    sets: int = 3
    reps: int | None = 10
    exercise_id: int | None = None
    duration_seconds: int | None = None
    rest_seconds: int = 60
    notes: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "duration_seconds": self.duration_seconds,
            "rest_seconds": self.rest_seconds,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutExercise":
        """Create from dictionary."""
        return cls(
            name=data.get("name") or data.get("exercise_name") or "",
            sets=data.get("sets") or 3,
            reps=data.get("reps"),
            exercise_id=data.get("exercise_id"),
            duration_seconds=data.get("duration_seconds"),
            rest_seconds=data.get("rest_seconds") or 60,
            notes=data.get("notes") or "",
        )


@dataclass
class Session:
    """A training session within a plan."""

    day_of_week: str  # free text, e.g. "Monday" or "Lunes"
    focus_area: str = "General"
    duration_minutes: int = 60
    exercises: list[WorkoutExercise] = field(default_factory=list)
    completions: list[CompletionRecord] = field(default_factory=list)
    session_id: int | None = None

    def is_completed_on(self, day: date) -> bool:
        """Check whether the session was marked completed on a date."""
        return any(
            c.date == day and c.status == CompletionStatus.COMPLETED
            for c in self.completions
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "session_id": self.session_id,
            "day_of_week": self.day_of_week,
            "focus_area": self.focus_area,
            "duration_minutes": self.duration_minutes,
            "exercises": [ex.to_dict() for ex in self.exercises],
            "completions": [c.to_dict() for c in self.completions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from dictionary."""
        return cls(
            session_id=data.get("session_id"),
            day_of_week=data.get("day_of_week", ""),
            focus_area=data.get("focus_area") or "General",
            duration_minutes=data.get("duration_minutes") or 60,
            exercises=[WorkoutExercise.from_dict(ex) for ex in data.get("exercises", [])],
            completions=[CompletionRecord.from_dict(c) for c in data.get("completions", [])],
        )


@dataclass
class WorkoutPlan:
    """A workout plan owned by a user.

    Plans come from chat-driven generation or manual entry. The id is
    either server-assigned or client-temporary (see identifiers).
    """

    plan_name: str
    user_id: int = 1
    description: str = ""
    is_ai_generated: bool = False
    sessions: list[Session] = field(default_factory=list)
    plan_id: EntityId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if not self.plan_name or not self.plan_name.strip():
            raise ValidationError("Plan name is required", field="plan_name")

    def get_total_exercises(self) -> int:
        """Count prescribed exercises across all sessions."""
        return sum(len(s.exercises) for s in self.sessions)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and the wire."""
        data = {
            "user_id": self.user_id,
            "plan_name": self.plan_name,
            "description": self.description,
            "is_ai_generated": self.is_ai_generated,
            "sessions": [s.to_dict() for s in self.sessions],
        }
        if self.plan_id is not None:
            data["plan_id"] = self.plan_id.to_json()
        if self.created_at:
            data["created_at"] = self.created_at.isoformat()
        if self.updated_at:
            data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutPlan":
        """Create from dictionary."""
        return cls(
            plan_id=parse_entity_id(data.get("plan_id")),
            user_id=data.get("user_id") or 1,
            plan_name=data.get("plan_name") or data.get("name") or "",
            description=data.get("description") or "",
            is_ai_generated=bool(data.get("is_ai_generated", False)),
            sessions=[Session.from_dict(s) for s in data.get("sessions", [])],
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )


def parse_datetime(value) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
