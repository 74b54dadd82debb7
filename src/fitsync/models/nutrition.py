"""Nutrition plan data models."""

from dataclasses import dataclass, field
from datetime import datetime

from ..errors import ValidationError
from .identifiers import EntityId, parse_entity_id
from .workout import CompletionRecord, parse_datetime


@dataclass
class Food:
    """A food item within a meal."""

    name: str
    quantity: str = ""
    calories: float | None = None

    def to_dict(self) -> dict:
        return {"name": self.name, "quantity": self.quantity, "calories": self.calories}

    @classmethod
    def from_dict(cls, data: dict) -> "Food":
        return cls(
            name=data.get("name") or data.get("food_name") or "",
            quantity=data.get("quantity") or "",
            calories=data.get("calories"),
        )


@dataclass
class Meal:
    """A scheduled meal with its macro breakdown."""

    meal_name: str
    meal_time: str = ""  # "HH:MM"
    calories: float = 0
    protein_grams: float = 0
    carbs_grams: float = 0
    fat_grams: float = 0
    foods: list[Food] = field(default_factory=list)
    completions: list[CompletionRecord] = field(default_factory=list)
    meal_id: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "meal_id": self.meal_id,
            "meal_name": self.meal_name,
            "meal_time": self.meal_time,
            "calories": self.calories,
            "protein_grams": self.protein_grams,
            "carbs_grams": self.carbs_grams,
            "fat_grams": self.fat_grams,
            "foods": [f.to_dict() for f in self.foods],
            "completions": [c.to_dict() for c in self.completions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Meal":
        """Create from dictionary."""
        return cls(
            meal_id=data.get("meal_id"),
            meal_name=data.get("meal_name") or data.get("name") or "",
            meal_time=data.get("meal_time") or "",
            calories=data.get("calories") or 0,
            protein_grams=data.get("protein_grams") or 0,
            carbs_grams=data.get("carbs_grams") or 0,
            fat_grams=data.get("fat_grams") or 0,
            foods=[Food.from_dict(f) for f in data.get("foods", [])],
            completions=[CompletionRecord.from_dict(c) for c in data.get("completions", [])],
        )


@dataclass
class NutritionPlan:
    """A nutrition plan with daily macro targets."""

    plan_name: str
    user_id: int = 1
    daily_calories: float = 0
    protein_grams: float = 0
    carbs_grams: float = 0
    fat_grams: float = 0
    meals: list[Meal] = field(default_factory=list)
    nutrition_plan_id: EntityId | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if not self.plan_name or not self.plan_name.strip():
            raise ValidationError("Plan name is required", field="plan_name")

    def planned_calories(self) -> float:
        """Sum of the calories across all meals."""
        return sum(m.calories for m in self.meals)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage and the wire."""
        data = {
            "user_id": self.user_id,
            "plan_name": self.plan_name,
            "daily_calories": self.daily_calories,
            "protein_grams": self.protein_grams,
            "carbs_grams": self.carbs_grams,
            "fat_grams": self.fat_grams,
            "meals": [m.to_dict() for m in self.meals],
        }
        if self.nutrition_plan_id is not None:
            data["nutrition_plan_id"] = self.nutrition_plan_id.to_json()
        if self.created_at:
            data["created_at"] = self.created_at.isoformat()
        if self.updated_at:
            data["updated_at"] = self.updated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "NutritionPlan":
        """Create from dictionary."""
        return cls(
            nutrition_plan_id=parse_entity_id(data.get("nutrition_plan_id")),
            user_id=data.get("user_id") or 1,
            plan_name=data.get("plan_name") or data.get("name") or "",
            daily_calories=data.get("daily_calories") or 0,
            protein_grams=data.get("protein_grams") or 0,
            carbs_grams=data.get("carbs_grams") or 0,
            fat_grams=data.get("fat_grams") or 0,
            meals=[Meal.from_dict(m) for m in data.get("meals", [])],
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )
