"""Body progress tracking model."""

from dataclasses import dataclass, field
from datetime import date, datetime

from ..errors import ValidationError
from .identifiers import EntityId, parse_entity_id

MEASUREMENT_FIELDS = ("chest", "waist", "hips", "biceps", "thighs")


@dataclass
class BodyMeasurements:
    """Optional body measurements in centimetres."""

    chest: float | None = None
    waist: float | None = None
    hips: float | None = None
    biceps: float | None = None
    thighs: float | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in MEASUREMENT_FIELDS)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in MEASUREMENT_FIELDS}

    @classmethod
    def from_dict(cls, data: dict | None) -> "BodyMeasurements":
        data = data or {}
        return cls(**{name: data.get(name) for name in MEASUREMENT_FIELDS})


@dataclass
class ProgressEntry:
    """A dated body-weight (and optional composition) record.

    Weight is required; entries without a positive weight are rejected
    before submission.
    """

    weight: float
    tracking_date: date = field(default_factory=date.today)
    user_id: int = 1
    body_fat_percentage: float | None = None
    measurements: BodyMeasurements = field(default_factory=BodyMeasurements)
    notes: str = ""
    progress_id: EntityId | None = None
    created_at: datetime | None = None

    def __post_init__(self):
        if self.weight is None:
            raise ValidationError("Weight is required", field="weight")
        try:
            self.weight = float(self.weight)
        except (TypeError, ValueError) as e:
            raise ValidationError("Weight must be a number", field="weight") from e
        if self.weight <= 0:
            raise ValidationError("Weight must be positive", field="weight")
        if self.body_fat_percentage is not None and not 0 < self.body_fat_percentage < 100:
            raise ValidationError(
                "Body fat percentage must be between 0 and 100",
                field="body_fat_percentage",
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and the wire."""
        data = {
            "user_id": self.user_id,
            "tracking_date": self.tracking_date.isoformat(),
            "weight": self.weight,
            "body_fat_percentage": self.body_fat_percentage,
            "measurements": self.measurements.to_dict(),
            "notes": self.notes,
        }
        if self.progress_id is not None:
            data["progress_id"] = self.progress_id.to_json()
        if self.created_at:
            data["created_at"] = self.created_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressEntry":
        """Create from dictionary."""
        tracking_date = data.get("tracking_date") or data.get("entry_date") or data.get("date")
        created_at = data.get("created_at")
        return cls(
            progress_id=parse_entity_id(data.get("progress_id")),
            user_id=data.get("user_id") or 1,
            tracking_date=(
                date.fromisoformat(str(tracking_date)[:10]) if tracking_date else date.today()
            ),
            weight=data.get("weight", data.get("weight_kg")),
            body_fat_percentage=data.get("body_fat_percentage"),
            measurements=BodyMeasurements.from_dict(data.get("measurements")),
            notes=data.get("notes") or "",
            created_at=(
                datetime.fromisoformat(str(created_at).replace("Z", "+00:00"))
                if created_at
                else None
            ),
        )
