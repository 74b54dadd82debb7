"""Exercise catalog model."""

from dataclasses import dataclass
from enum import Enum


class DifficultyLevel(str, Enum):
    """Difficulty levels used by the catalog."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass
class Exercise:
    """An exercise in the catalog.

    difficulty_level is not strictly enforced: unknown values from the
    backend are kept as free text.
    """

    name: str
    description: str = ""
    muscle_group: str = ""
    equipment_needed: str = ""
    difficulty_level: DifficultyLevel | str = DifficultyLevel.INTERMEDIATE
    exercise_id: int | None = None

    @property
    def difficulty_display(self) -> str:
        if isinstance(self.difficulty_level, DifficultyLevel):
            return self.difficulty_level.value
        return self.difficulty_level

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "name": self.name,
            "description": self.description,
            "muscle_group": self.muscle_group,
            "equipment_needed": self.equipment_needed,
            "difficulty_level": self.difficulty_display,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from dictionary."""
        raw_level = data.get("difficulty_level") or DifficultyLevel.INTERMEDIATE.value
        try:
            level: DifficultyLevel | str = DifficultyLevel(raw_level)
        except ValueError:
            level = raw_level
        return cls(
            exercise_id=data.get("exercise_id"),
            name=data.get("name", ""),
            description=data.get("description") or "",
            muscle_group=data.get("muscle_group") or "",
            equipment_needed=data.get("equipment_needed") or "",
            difficulty_level=level,
        )


def filter_exercises(
    exercises: list[Exercise],
    muscle_group: str | None = None,
    difficulty_level: str | None = None,
) -> list[Exercise]:
    """Filter a catalog by muscle group and difficulty (case-insensitive)."""
    result = exercises
    if muscle_group:
        result = [e for e in result if e.muscle_group.lower() == muscle_group.lower()]
    if difficulty_level:
        result = [
            e for e in result if e.difficulty_display.lower() == difficulty_level.lower()
        ]
    return result
