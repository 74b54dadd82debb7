"""Tests for chat reply parsing and action dispatch."""

import json
from datetime import date

import httpx
import pytest

from fitsync.chat import (
    APOLOGY,
    BackendChatTransport,
    ChatBridge,
    DeepSeekTransport,
    N8nWebhookTransport,
    extract_actions,
    parse_chat_response,
    strip_actions,
)
from fitsync.chat.parsers import strip_fences, structured_action
from fitsync.clients import ApiResponse, mock
from fitsync.db import PROGRESS_DATA, WORKOUT_PLANS
from fitsync.errors import BackendError, ChatResponseError, ChatServiceError
from fitsync.models.identifiers import is_temporary
from fitsync.services import (
    FallbackExerciseService,
    FallbackNutritionService,
    FallbackProgressService,
    FallbackWorkoutService,
)


class StaticTransport:
    """Chat transport that returns a canned body."""

    def __init__(self, body):
        self.body = body
        self.sent = []

    async def send(self, message):
        self.sent.append(message)
        return self.body


class FailingTransport:
    async def send(self, message):
        raise ChatServiceError("webhook down")


class BrokenLive:
    def __getattr__(self, name):
        async def fail(*args):
            raise BackendError("down")

        return fail


class RecordingLive:
    """Live service that records calls and answers with a bare message."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        async def call(*args):
            self.calls.append((name, args))
            return ApiResponse(data={"message": "ok"})

        return call


@pytest.fixture
async def facades(cache, queue, status):
    await status.mark_unavailable()
    return (
        FallbackWorkoutService(BrokenLive(), mock.MockWorkoutService(), cache, queue, status),
        FallbackNutritionService(BrokenLive(), mock.MockNutritionService(), cache, queue, status),
        FallbackProgressService(BrokenLive(), mock.MockProgressService(), cache, queue, status),
        FallbackExerciseService(BrokenLive(), mock.MockExerciseService(), cache, queue, status),
    )


def bridge_for(body, facades):
    return ChatBridge(StaticTransport(body), *facades)


class TestParseChatResponse:
    """Every known reply shape yields the agent text."""

    def test_envelope(self):
        reply = parse_chat_response(
            {"success": True, "message": "ok", "data": {"mensaje_agente": "Hola", "action": {"type": "log_progress"}}}
        )

        assert reply.message == "Hola"
        assert reply.action == {"type": "log_progress"}

    def test_legacy(self):
        assert parse_chat_response({"mensaje_agente": "Hola"}).message == "Hola"

    def test_output_json(self):
        body = {"output": json.dumps({"mensaje_agente": "Hola"})}

        assert parse_chat_response(body).message == "Hola"

    def test_output_fenced(self):
        body = {"output": '```json\n{"mensaje_agente": "Hola desde n8n"}\n```'}

        assert parse_chat_response(body).message == "Hola desde n8n"

    def test_output_regex_rescue(self):
        """Broken JSON still yields the agent text."""
        body = {"output": '{"mensaje_agente": "Sigue así", "data": {broken'}

        reply = parse_chat_response(body)

        assert reply.message == "Sigue así"
        assert reply.data == {}

    def test_message_field(self):
        assert parse_chat_response({"message": "Hola"}).message == "Hola"

    def test_plain_text(self):
        assert parse_chat_response("Hola").message == "Hola"

    def test_text_holding_json(self):
        assert parse_chat_response('```json\n{"message": "Hola"}\n```').message == "Hola"

    @pytest.mark.parametrize("body", [None, {}, {"output": "nothing useful"}, "   ", 42])
    def test_unrecognised(self, body):
        with pytest.raises(ChatResponseError):
            parse_chat_response(body)

    def test_strip_fences_leaves_plain_text(self):
        assert strip_fences('{"a": 1}') == '{"a": 1}'


class TestActions:
    def test_malformed_block_skipped(self):
        text = (
            'Listo. [ACTION:LOG_PROGRESS]{"weight": 75}[/ACTION] '
            "[ACTION:CREATE_WORKOUT_PLAN]{not json[/ACTION] "
            '[ACTION:LOG_MEAL_COMPLETION]{"mealId": 3}[/ACTION]'
        )

        actions = extract_actions(text)

        assert [a.type for a in actions] == ["LOG_PROGRESS", "LOG_MEAL_COMPLETION"]
        assert actions[0].data == {"weight": 75}

    def test_non_object_payload_skipped(self):
        assert extract_actions("[ACTION:LOG_PROGRESS][1, 2][/ACTION]") == []

    def test_strip_actions(self):
        assert strip_actions('Hecho. [ACTION:LOG_PROGRESS]{"weight": 75}[/ACTION]') == "Hecho."

    def test_structured_action_uses_reply_data(self):
        reply = parse_chat_response(
            {"data": {"mensaje_agente": "Ok", "data": {"weight": 80}, "action": {"type": "log_progress"}}}
        )

        action = structured_action(reply)

        assert action.type == "LOG_PROGRESS"
        assert action.data == {"weight": 80}


class TestChatBridge:
    """Tests for ChatBridge."""

    async def test_transport_failure_returns_apology(self, facades, queue):
        bridge = ChatBridge(FailingTransport(), *facades)

        result = await bridge.send("Hola")

        assert result.failed
        assert result.message == APOLOGY
        assert await queue.count_pending() == 0

    async def test_unrecognised_reply_returns_apology(self, facades):
        result = await bridge_for({"unexpected": True}, facades).send("Hola")

        assert result.message == APOLOGY

    async def test_good_blocks_dispatched_despite_malformed_one(self, facades, cache):
        body = {
            "mensaje_agente": (
                "Registrado. "
                '[ACTION:LOG_PROGRESS]{"weight": 75, "tracking_date": "2025-04-01"}[/ACTION]'
                "[ACTION:LOG_PROGRESS]{oops[/ACTION]"
                '[ACTION:CREATE_WORKOUT_PLAN]{"plan_name": "Fuerza IA", "sessions": []}[/ACTION]'
            )
        }

        result = await bridge_for(body, facades).send("Pesé 75 kg")

        assert [a.type for a in result.actions] == ["LOG_PROGRESS", "CREATE_WORKOUT_PLAN"]
        assert all(a.success for a in result.actions)
        assert result.message == "Registrado."

        (entry,) = await cache.get(PROGRESS_DATA)
        assert entry["weight"] == 75.0
        (plan,) = await cache.get(WORKOUT_PLANS)
        assert plan["is_ai_generated"] is True
        assert is_temporary(plan["plan_id"])

    async def test_invalid_action_reported_in_message(self, facades, queue):
        body = {"mensaje_agente": 'Vale. [ACTION:LOG_PROGRESS]{"weight": -3}[/ACTION]'}

        result = await bridge_for(body, facades).send("Pesé -3 kg")

        assert not result.actions[0].success
        assert "No se pudo completar la acción LOG_PROGRESS" in result.message
        assert await queue.count_pending() == 0

    async def test_server_applied_tags_skipped_for_backend_chat(self, facades, queue):
        """The backend chat endpoint has already acted on past-tense tags."""
        transport = StaticTransport(
            {
                "mensaje_agente": (
                    'Ya está. [ACTION:CREATED_WORKOUT_PLAN]{"plan_name": "Fuerza"}[/ACTION]'
                    "[ACTION:DANCE]{}[/ACTION]"
                )
            }
        )
        transport.acts_on_server = True

        result = await ChatBridge(transport, *facades).send("Crea un plan")

        assert result.actions == []
        assert result.message == "Ya está."
        assert await queue.count_pending() == 0

    async def test_past_tense_tags_dispatched_for_agent_replies(self, facades, cache):
        body = {
            "mensaje_agente": "Anotado.",
            "data": {"type": "progress_entry", "weight_kg": 71.5, "entry_date": "2025-04-02"},
            "action": {"type": "LOGGED_PROGRESS"},
        }

        result = await bridge_for(body, facades).send("Peso 71.5")

        assert [a.type for a in result.actions] == ["LOGGED_PROGRESS"]
        (entry,) = await cache.get(PROGRESS_DATA)
        assert entry["weight"] == 71.5
        assert entry["tracking_date"] == "2025-04-02"

    async def test_updated_plan_goes_to_update(self, cache, queue, status):
        """An UPDATED_WORKOUT_PLAN action with a planId updates that plan."""
        live = RecordingLive()
        workout = FallbackWorkoutService(live, mock.MockWorkoutService(), cache, queue, status)
        body = {
            "success": True,
            "data": {
                "mensaje_agente": "He ajustado tu plan.",
                "data": {"type": "workout_plan", "plan_name": "Fuerza 2", "sessions": []},
                "action": {"type": "UPDATED_WORKOUT_PLAN", "planId": 7},
            },
        }
        bridge = ChatBridge(StaticTransport(body), workout, None, None, None)

        result = await bridge.send("Cambia mi plan")

        assert [a.success for a in result.actions] == [True]
        ((method, (plan_id, payload)),) = live.calls
        assert method == "update_plan"
        assert plan_id == 7
        assert payload["plan_name"] == "Fuerza 2"
        assert payload["is_ai_generated"] is True
        assert "plan_id" not in payload

    async def test_update_block_with_plan_id_offline(self, facades, queue):
        body = {
            "mensaje_agente": (
                'Listo. [ACTION:UPDATE_NUTRITION_PLAN]{"planId": 9, "plan_name": "Volumen", '
                '"daily_calories": 2800}[/ACTION]'
            )
        }

        await bridge_for(body, facades).send("Sube las calorías")

        (request,) = await queue.list_pending()
        assert request.describe() == "nutrition.update_plan"
        assert request.args[0] == 9
        assert request.args[1]["daily_calories"] == 2800

    async def test_created_plan_without_plan_id_is_created(self, facades, cache):
        body = {
            "mensaje_agente": "Tu plan está listo.",
            "data": {"type": "workout_plan", "plan_name": "Hipertrofia"},
            "action": {"type": "CREATED_WORKOUT_PLAN"},
        }

        await bridge_for(body, facades).send("Hazme un plan")

        (plan,) = await cache.get(WORKOUT_PLANS)
        assert plan["plan_name"] == "Hipertrofia"
        assert is_temporary(plan["plan_id"])

    async def test_suggested_exercise(self, facades, queue):
        body = {
            "mensaje_agente": "Prueba este ejercicio.",
            "data": {
                "type": "exercise_suggestion",
                "exercise_name": "Remo con mancuerna",
                "muscle_groups": ["Espalda", "Bíceps"],
                "equipment_needed": ["Mancuerna", "Banco"],
                "difficulty": "beginner",
            },
            "action": {"type": "SUGGESTED_EXERCISE"},
        }

        result = await bridge_for(body, facades).send("¿Qué hago para la espalda?")

        assert [a.success for a in result.actions] == [True]
        (request,) = await queue.list_pending()
        assert request.describe() == "exercise.suggest_exercise"
        assert request.args == [
            {
                "name": "Remo con mancuerna",
                "description": "",
                "muscle_group": "Espalda,Bíceps",
                "equipment_needed": "Mancuerna,Banco",
                "difficulty_level": "beginner",
            }
        ]

    async def test_suggestion_without_name_reported(self, facades, queue):
        body = {"mensaje_agente": "Mira.", "action": {"type": "SUGGESTED_EXERCISE", "data": {"difficulty": "beginner"}}}

        result = await bridge_for(body, facades).send("Sugiere algo")

        assert not result.actions[0].success
        assert await queue.count_pending() == 0

    async def test_completion_actions(self, facades, queue):
        body = {
            "mensaje_agente": (
                '[ACTION:LOG_WORKOUT_COMPLETION]{"sessionId": 2, "completion": {"status": "completed"}}[/ACTION]'
                '[ACTION:LOG_MEAL_COMPLETION]{"mealId": 5, "completion": {"status": "completado"}}[/ACTION]'
                "¡Bien hecho!"
            )
        }

        result = await bridge_for(body, facades).send("Hice la sesión")

        assert [a.success for a in result.actions] == [True, True]
        pending = await queue.list_pending()
        assert [r.describe() for r in pending] == ["workout.log_workout", "nutrition.log_meal"]
        assert pending[0].args == [{"session_id": 2, "status": "completed"}]
        assert pending[1].args == [5, {"status": "completado"}]

    async def test_completion_defaults_to_today(self, facades, queue):
        """A completion action without a record is logged as completed today."""
        body = {"mensaje_agente": '[ACTION:LOG_MEAL_COMPLETION]{"mealId": 5}[/ACTION]Anotado.'}

        await bridge_for(body, facades).send("Ya comí")

        pending = await queue.list_pending()
        meal_id, completion = pending[0].args
        assert meal_id == 5
        assert completion["status"] == "completed"
        assert completion["date"] == date.today().isoformat()

    async def test_structured_action_dispatched(self, facades, cache):
        body = {
            "success": True,
            "data": {
                "mensaje_agente": "He anotado tu peso.",
                "action": {"type": "log_progress", "data": {"weight": 72.5}},
            },
        }

        result = await bridge_for(body, facades).send("Peso 72.5")

        assert [a.type for a in result.actions] == ["LOG_PROGRESS"]
        assert [e["weight"] for e in await cache.get(PROGRESS_DATA)] == [72.5]


class TestTransports:
    async def test_n8n_payload(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"output": '{"mensaje_agente": "Hola"}'})

        async def token():
            return "tok"

        transport = N8nWebhookTransport(
            "https://n8n.test/webhook/sas", "ana", token_provider=token, transport=httpx.MockTransport(handler)
        )

        body = await transport.send("Hola coach")

        assert seen["body"] == {
            "type": "mensaje_chat",
            "token": "tok",
            "data": {"nombre_usuario": "ana", "mensaje": "Hola coach"},
        }
        assert parse_chat_response(body).message == "Hola"

    async def test_n8n_http_error(self):
        transport = N8nWebhookTransport(
            "https://n8n.test/webhook/sas", "ana", transport=httpx.MockTransport(lambda r: httpx.Response(500))
        )

        with pytest.raises(ChatServiceError):
            await transport.send("Hola")

    async def test_deepseek_requires_key(self):
        with pytest.raises(ChatServiceError):
            await DeepSeekTransport("https://deepseek.test/v1", None).send("Hola")

    async def test_deepseek_returns_content(self):
        def handler(request):
            assert request.url.path == "/v1/chat/completions"
            assert request.headers["authorization"] == "Bearer key"
            return httpx.Response(200, json={"choices": [{"message": {"content": "Hola"}}]})

        transport = DeepSeekTransport("https://deepseek.test/v1", "key", transport=httpx.MockTransport(handler))

        assert await transport.send("Hola") == "Hola"

    async def test_deepseek_missing_content(self):
        transport = DeepSeekTransport(
            "https://deepseek.test/v1", "key", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={}))
        )

        with pytest.raises(ChatResponseError):
            await transport.send("Hola")

    async def test_backend_transport(self, backend, live_api):
        backend.chat_reply = {"message": "Hola desde el backend"}

        body = await BackendChatTransport(live_api).send("Hola")

        assert parse_chat_response(body).message == "Hola desde el backend"
        assert ("POST", "/api/ai/chat") in backend.calls

    async def test_backend_transport_failure(self, backend, live_api):
        backend.down = True

        with pytest.raises(ChatServiceError):
            await BackendChatTransport(live_api).send("Hola")
