"""Chat bridge: sends a message to the agent and applies the actions it returns."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from ..clients.base import ApiResponse
from ..errors import ChatServiceError, ValidationError
from ..models import CompletionRecord, Exercise, NutritionPlan, ProgressEntry, WorkoutPlan
from .parsers import (
    ChatAction,
    extract_actions,
    parse_chat_response,
    strip_actions,
    structured_action,
)
from .transports import ChatTransport

logger = structlog.get_logger(__name__)

APOLOGY = "Lo siento, tuve un problema al procesar tu mensaje. Por favor, inténtalo de nuevo."

# Past-tense tags; the backend chat endpoint has already applied these
SERVER_APPLIED_ACTIONS = frozenset(
    {
        "CREATED_WORKOUT_PLAN",
        "UPDATED_WORKOUT_PLAN",
        "CREATED_NUTRITION_PLAN",
        "UPDATED_NUTRITION_PLAN",
        "LOGGED_PROGRESS",
        "LOGGED_WORKOUT_COMPLETION",
        "LOGGED_MEAL_COMPLETION",
        "SUGGESTED_EXERCISE",
    }
)


@dataclass
class ActionOutcome:
    type: str
    success: bool
    source: str | None = None
    error: str | None = None


@dataclass
class ChatResult:
    """What the user sees after one exchange."""

    message: str
    actions: list[ActionOutcome] = field(default_factory=list)
    failed: bool = False


class ChatBridge:
    """Turns agent replies into calls on the fallback facades.

    Dispatch goes through the facades, so actions requested while the
    backend is down are cached and queued like any other write.
    """

    def __init__(
        self, transport: ChatTransport, workout: Any, nutrition: Any, progress: Any, exercise: Any
    ):
        self.transport = transport
        self.workout = workout
        self.nutrition = nutrition
        self.progress = progress
        self.exercise = exercise
        self._handlers = {}
        for tag in ("CREATE", "CREATED", "UPDATE", "UPDATED"):
            self._handlers[f"{tag}_WORKOUT_PLAN"] = self._save_workout_plan
            self._handlers[f"{tag}_NUTRITION_PLAN"] = self._save_nutrition_plan
        for tag in ("LOG", "LOGGED"):
            self._handlers[f"{tag}_PROGRESS"] = self._log_progress
            self._handlers[f"{tag}_WORKOUT_COMPLETION"] = self._log_workout_completion
            self._handlers[f"{tag}_MEAL_COMPLETION"] = self._log_meal_completion
        self._handlers["SUGGEST_EXERCISE"] = self._suggest_exercise
        self._handlers["SUGGESTED_EXERCISE"] = self._suggest_exercise

    async def send(self, message: str) -> ChatResult:
        """Send a user message and dispatch any requested actions.

        Transport and format failures produce an apology; the message
        itself is never queued.
        """
        try:
            body = await self.transport.send(message)
            reply = parse_chat_response(body)
        except ChatServiceError as e:
            logger.error("chat_exchange_failed", error=str(e))
            return ChatResult(message=APOLOGY, failed=True)

        actions = extract_actions(reply.message)
        extra = structured_action(reply)
        if extra is not None:
            actions.append(extra)

        outcomes = []
        for action in actions:
            outcome = await self.dispatch(action)
            if outcome is not None:
                outcomes.append(outcome)

        text = strip_actions(reply.message)
        notes = [f"(No se pudo completar la acción {o.type}: {o.error})" for o in outcomes if not o.success]
        if notes:
            text = "\n".join([text, *notes]).strip()
        return ChatResult(message=text, actions=outcomes)

    async def dispatch(self, action: ChatAction) -> ActionOutcome | None:
        """Run one action through the matching facade.

        Past-tense tags are dispatched too, unless the transport is the
        backend chat endpoint, which applies them before replying.

        Returns:
            The outcome, or None for skipped and unknown tags
        """
        if action.type in SERVER_APPLIED_ACTIONS and getattr(self.transport, "acts_on_server", False):
            logger.debug("chat_action_applied_by_server", action=action.type)
            return None
        handler = self._handlers.get(action.type)
        if handler is None:
            logger.warning("chat_action_unknown", action=action.type)
            return None

        try:
            response = await handler(action)
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            logger.error("chat_action_failed", action=action.type, error=str(e))
            return ActionOutcome(type=action.type, success=False, error=str(e))

        logger.info("chat_action_dispatched", action=action.type, source=response.source)
        return ActionOutcome(type=action.type, success=True, source=response.source)

    async def _save_workout_plan(self, action: ChatAction) -> ApiResponse:
        plan = WorkoutPlan.from_dict({"plan_name": "Plan de entrenamiento", **_without_nulls(action.data)})
        plan.is_ai_generated = True
        target_id = _target_id(action, "plan_id")
        if target_id is not None:
            plan.plan_id = None
            return await self.workout.update_plan(target_id, plan.to_dict())
        return await self.workout.create_plan(plan.to_dict())

    async def _save_nutrition_plan(self, action: ChatAction) -> ApiResponse:
        plan = NutritionPlan.from_dict({"plan_name": "Plan de nutrición", **_without_nulls(action.data)})
        target_id = _target_id(action, "nutrition_plan_id")
        if target_id is not None:
            plan.nutrition_plan_id = None
            return await self.nutrition.update_plan(target_id, plan.to_dict())
        return await self.nutrition.create_plan(plan.to_dict())

    async def _log_progress(self, action: ChatAction) -> ApiResponse:
        entry = ProgressEntry.from_dict(action.data)
        return await self.progress.log_progress(entry.to_dict())

    async def _log_workout_completion(self, action: ChatAction) -> ApiResponse:
        data = action.data
        session_id = data.get("sessionId", data.get("session_id"))
        if session_id is None:
            raise ValidationError("sessionId is required", field="sessionId")
        return await self.workout.log_workout({"session_id": session_id, **_completion(data)})

    async def _log_meal_completion(self, action: ChatAction) -> ApiResponse:
        data = action.data
        meal_id = data.get("mealId", data.get("meal_id"))
        if meal_id is None:
            raise ValidationError("mealId is required", field="mealId")
        return await self.nutrition.log_meal(meal_id, _completion(data))

    async def _suggest_exercise(self, action: ChatAction) -> ApiResponse:
        data = action.data
        name = data.get("exercise_name") or data.get("name")
        if not name:
            raise ValidationError("exercise_name is required", field="exercise_name")
        exercise = Exercise.from_dict(
            {
                "name": name,
                "description": data.get("description"),
                "muscle_group": _joined(data.get("muscle_groups")) or data.get("muscle_group"),
                "equipment_needed": _joined(data.get("equipment_needed")),
                "difficulty_level": data.get("difficulty") or data.get("difficulty_level"),
            }
        )
        payload = exercise.to_dict()
        payload.pop("exercise_id")
        return await self.exercise.suggest_exercise(payload)


def _target_id(action: ChatAction, id_field: str) -> Any:
    """The id of the plan an action updates, or None to create one."""
    if action.target_id is not None:
        return action.target_id
    if "planId" in action.data:
        return action.data["planId"]
    if action.type.startswith("UPDATE"):
        return action.data.get(id_field)
    return None


def _without_nulls(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


def _joined(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return value or ""


def _completion(data: dict) -> dict:
    """The action's completion record, defaulting to completed today."""
    completion = data.get("completion")
    if not completion:
        return CompletionRecord.for_today().to_dict()
    return completion
