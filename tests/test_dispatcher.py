"""Tests for the dispatcher: resolve, validate, invoke, normalize."""

import asyncio
import json

import httpx
import pytest
import structlog
from structlog.testing import LogCapture

from src.mcp.dispatcher import Dispatcher, invoke
from src.mcp.errors import INTERNAL_ERROR, INVALID_PARAMS, TOOL_EXECUTION_ERROR, HandlerError
from src.mcp.models import ErrorResult, PromptEnvelope, ResponseEnvelope, TextContent
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import NumberField, Schema, StringField


class TestScenarios:
    """End-to-end dispatches against the bundled capabilities."""

    @pytest.mark.asyncio
    async def test_calculator_division(self, dispatcher: Dispatcher):
        """Test that 6 / 3 is rendered without a trailing .0."""
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "calculator", {"a": 6, "b": 3, "operator": "/"}
        )
        assert isinstance(result, ResponseEnvelope)
        assert result.content == [TextContent(text="6 / 3 = 2")]

    @pytest.mark.asyncio
    async def test_calculator_division_by_zero(self, dispatcher: Dispatcher):
        """Test that division by zero becomes an error result."""
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "calculator", {"a": 1, "b": 0, "operator": "/"}
        )
        assert isinstance(result, ErrorResult)
        assert "divide by zero" in result.message
        assert result.stage == "invoke"
        assert result.code == TOOL_EXECUTION_ERROR

    @pytest.mark.asyncio
    async def test_greeting_default_language(self, dispatcher: Dispatcher):
        """Test that greeting defaults to Korean."""
        result = await dispatcher.dispatch(CapabilityKind.TOOL, "greeting", {"name": "Sam"})
        assert result.content[0].text == "안녕하세요, Sam님! 😊"

    @pytest.mark.asyncio
    async def test_geocode_no_results(self, dispatcher: Dispatcher, mock_upstream):
        """Test that an empty upstream answer is a successful text envelope."""
        mock_upstream(
            "src.tools.geocode.client", lambda request: httpx.Response(200, json=[])
        )
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "geocode", {"query": "", "limit": 1}
        )
        assert isinstance(result, ResponseEnvelope)
        assert result.content[0].text == 'No results found for "".'

    @pytest.mark.asyncio
    async def test_weather_latitude_out_of_range(
        self, dispatcher: Dispatcher, mock_upstream
    ):
        """Test that an out-of-range latitude never reaches the upstream API."""
        sent = mock_upstream(
            "src.tools.weather.client", lambda request: httpx.Response(200, json={})
        )
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "get_weather", {"latitude": 95, "longitude": 0}
        )
        assert isinstance(result, ErrorResult)
        assert result.stage == "validate"
        assert result.code == INVALID_PARAMS
        assert "'latitude'" in result.message
        assert sent == []

    @pytest.mark.asyncio
    async def test_server_info_lists_capabilities(self, dispatcher: Dispatcher):
        """Test that server://info lists every capability's name and kind."""
        result = await dispatcher.dispatch(CapabilityKind.RESOURCE, "server://info", {})
        assert isinstance(result, ResponseEnvelope)

        info = json.loads(result.content[0].text)
        listed = {
            (entry["kind"], entry["name"])
            for section in ("tools", "resources", "prompts")
            for entry in info[section]
        }
        assert listed == {
            ("tool", "greeting"),
            ("tool", "calculator"),
            ("tool", "get_time"),
            ("tool", "geocode"),
            ("tool", "get_weather"),
            ("tool", "generate_image"),
            ("resource", "server://info"),
            ("prompt", "code_review"),
        }

    @pytest.mark.asyncio
    async def test_prompt_dispatch(self, dispatcher: Dispatcher):
        """Test that prompts produce a message envelope."""
        result = await dispatcher.dispatch(
            CapabilityKind.PROMPT, "code_review", {"code": "print(1)"}
        )
        assert isinstance(result, PromptEnvelope)
        assert result.messages[0].role == "user"


class TestFailureStages:
    """Tests for failures at each dispatch stage."""

    @pytest.mark.asyncio
    async def test_unknown_capability(self, dispatcher: Dispatcher):
        result = await dispatcher.dispatch(CapabilityKind.TOOL, "nope", {})
        assert result == ErrorResult(
            message="no such tool named nope", stage="resolve", code=INVALID_PARAMS
        )

    @pytest.mark.asyncio
    async def test_kind_scopes_resolution(self, dispatcher: Dispatcher):
        """Test that a tool name does not resolve as a prompt."""
        result = await dispatcher.dispatch(CapabilityKind.PROMPT, "calculator", {})
        assert result.message == "no such prompt named calculator"

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self, registry: CapabilityRegistry):
        """Test that a crashing handler becomes an error result."""
        def explode(arguments):
            raise RuntimeError("kaboom")

        registry.register(CapabilityKind.TOOL, "explode", Schema(), explode)
        result = await Dispatcher(registry).dispatch(CapabilityKind.TOOL, "explode")
        assert result.message == "tool 'explode' failed: kaboom"
        assert result.stage == "invoke"

    @pytest.mark.asyncio
    async def test_unnormalizable_result(self, registry: CapabilityRegistry):
        """Test that a result that cannot be shaped becomes an internal error."""
        registry.register(CapabilityKind.TOOL, "silent", Schema(), lambda arguments: None)
        result = await Dispatcher(registry).dispatch(CapabilityKind.TOOL, "silent")
        assert result.stage == "normalize"
        assert result.message.startswith("internal error: ")

    @pytest.mark.asyncio
    async def test_huge_integer_argument(self, dispatcher: Dispatcher):
        """Test that an integer beyond float range is dispatched, not raised."""
        result = await dispatcher.dispatch(
            CapabilityKind.TOOL, "calculator", {"a": 10**400, "b": 1, "operator": "+"}
        )
        assert isinstance(result, ResponseEnvelope)
        assert result.content[0].text == f"{10**400} + 1 = {10**400 + 1}"

    @pytest.mark.asyncio
    async def test_non_object_arguments(self, dispatcher: Dispatcher):
        result = await dispatcher.dispatch(CapabilityKind.TOOL, "calculator", [1, 2])
        assert isinstance(result, ErrorResult)
        assert result.stage == "validate"
        assert result.code == INVALID_PARAMS
        assert "'arguments' must be of type object, got array" in result.message

    @pytest.mark.asyncio
    async def test_raising_stage_is_contained(self, dispatcher: Dispatcher, monkeypatch):
        """Test that an exception outside the handler still becomes an error result."""
        def broken_normalize(kind, result):
            raise RuntimeError("shape exploded")

        monkeypatch.setattr("src.mcp.dispatcher.normalize", broken_normalize)
        result = await dispatcher.dispatch(CapabilityKind.TOOL, "greeting", {"name": "Sam"})
        assert isinstance(result, ErrorResult)
        assert result.stage == "normalize"
        assert result.code == INTERNAL_ERROR
        assert result.message == "internal error: shape exploded"

    @pytest.mark.asyncio
    async def test_handler_receives_validated_arguments(self, registry: CapabilityRegistry):
        """Test that handlers see defaults applied and undeclared fields dropped."""
        seen = {}

        def record(arguments):
            seen.update(arguments)
            return "ok"

        registry.register(
            CapabilityKind.TOOL,
            "record",
            Schema({
                "name": StringField(),
                "limit": NumberField(integer=True, required=False, default=1),
            }),
            record,
        )
        await Dispatcher(registry).dispatch(
            CapabilityKind.TOOL, "record", {"name": "x", "junk": 1}
        )
        assert seen == {"name": "x", "limit": 1}

    @pytest.mark.asyncio
    async def test_invoke_sync_and_async(self, registry: CapabilityRegistry):
        """Test that invoke accepts plain functions and coroutines."""
        async def async_handler(arguments):
            return "async"

        sync_record = registry.register(CapabilityKind.TOOL, "sync", Schema(), lambda a: "sync")
        async_record = registry.register(CapabilityKind.TOOL, "async", Schema(), async_handler)

        assert await invoke(sync_record, {}) == ("sync", None)
        assert await invoke(async_record, {}) == ("async", None)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, registry: CapabilityRegistry):
        """Test that cancelling a dispatch is not turned into an error result."""
        started = asyncio.Event()

        async def slow(arguments):
            started.set()
            await asyncio.sleep(10)

        registry.register(CapabilityKind.TOOL, "slow", Schema(), slow)
        task = asyncio.create_task(Dispatcher(registry).dispatch(CapabilityKind.TOOL, "slow"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestIndependence:
    """Tests that dispatches do not affect each other."""

    @pytest.mark.asyncio
    async def test_idempotent(self, dispatcher: Dispatcher):
        """Test that the same request twice gives identical envelopes."""
        request = (CapabilityKind.TOOL, "calculator", {"a": 2.5, "b": 2, "operator": "*"})
        first = await dispatcher.dispatch(*request)
        second = await dispatcher.dispatch(*request)
        assert first == second
        assert first.content[0].text == "2.5 * 2 = 5"

    @pytest.mark.asyncio
    async def test_concurrent_failure_is_isolated(self, registry: CapabilityRegistry):
        """Test that a failing dispatch does not disturb a concurrent one."""
        async def failing(arguments):
            await asyncio.sleep(0)
            raise HandlerError("upstream unavailable")

        async def working(arguments):
            await asyncio.sleep(0)
            return f"hello {arguments['name']}"

        registry.register(CapabilityKind.TOOL, "failing", Schema(), failing)
        registry.register(
            CapabilityKind.TOOL, "working", Schema({"name": StringField()}), working
        )
        dispatcher = Dispatcher(registry)

        results = await asyncio.gather(
            dispatcher.dispatch(CapabilityKind.TOOL, "failing"),
            dispatcher.dispatch(CapabilityKind.TOOL, "working", {"name": "a"}),
            dispatcher.dispatch(CapabilityKind.TOOL, "working", {"name": "b"}),
        )
        assert isinstance(results[0], ErrorResult)
        assert results[1].content[0].text == "hello a"
        assert results[2].content[0].text == "hello b"

    @pytest.mark.asyncio
    async def test_caller_arguments_not_mutated(self, dispatcher: Dispatcher):
        """Test that defaults are not written back into the caller's mapping."""
        arguments = {"name": "Sam"}
        await dispatcher.dispatch(CapabilityKind.TOOL, "greeting", arguments)
        assert arguments == {"name": "Sam"}

    @pytest.mark.asyncio
    async def test_capability_context_is_unbound_afterwards(self, dispatcher: Dispatcher):
        """Test that the structlog context does not leak out of a dispatch."""
        await dispatcher.dispatch(CapabilityKind.TOOL, "greeting", {"name": "Sam"})
        context = structlog.contextvars.get_contextvars()
        assert "capability_name" not in context
        assert "capability_kind" not in context


@pytest.fixture
def captured_logs():
    """Capture structlog events with the context variables merged in."""
    capture = LogCapture()
    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, capture]
    )
    yield capture.entries
    structlog.reset_defaults()


class TestDispatchLogging:
    """Tests for the events logged during a dispatch."""

    @pytest.mark.asyncio
    async def test_handler_failure_event_names_capability(
        self, dispatcher: Dispatcher, captured_logs
    ):
        """Test that log events inside a dispatch carry the capability binding."""
        await dispatcher.dispatch(
            CapabilityKind.TOOL, "calculator", {"a": 1, "b": 0, "operator": "/"}
        )
        event = next(e for e in captured_logs if e["event"] == "Handler failed")
        assert event["capability_kind"] == "tool"
        assert event["capability_name"] == "calculator"
        assert "divide by zero" in event["reason"]

    @pytest.mark.asyncio
    async def test_rejected_arguments_event(self, dispatcher: Dispatcher, captured_logs):
        await dispatcher.dispatch(CapabilityKind.TOOL, "greeting", {})
        event = next(e for e in captured_logs if e["event"] == "Rejected arguments")
        assert event["capability_name"] == "greeting"
        assert event["log_level"] == "info"

class TestDispatchSync:
    """Tests for synchronous dispatch."""

    def test_dispatch_sync(self, dispatcher: Dispatcher):
        result = dispatcher.dispatch_sync(
            CapabilityKind.TOOL, "calculator", {"a": 1, "b": 2, "operator": "+"}
        )
        assert result.content[0].text == "1 + 2 = 3"
