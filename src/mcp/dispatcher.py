"""Capability dispatch: resolve, validate, invoke, normalize."""

import asyncio
import inspect
from typing import Any, Mapping

from src.mcp.errors import HandlerError, translate_failure
from src.mcp.failures import Failure, HandlerFailure, InternalFailure
from src.mcp.models import ErrorResult
from src.mcp.normalizer import Envelope, normalize
from src.mcp.registry import CapabilityKind, CapabilityRecord, CapabilityRegistry
from src.mcp.validation import ValidatedArguments, validate
from src.utils.logging import capability_context, get_logger

DispatchResult = Envelope | ErrorResult


def _stage_raised(stage: str, error: Exception) -> InternalFailure:
    get_logger(__name__).exception("Dispatch stage raised", stage=stage)
    return InternalFailure(failed_stage=stage, reason=str(error) or type(error).__name__)


async def invoke(
    record: CapabilityRecord, arguments: ValidatedArguments
) -> tuple[Any, HandlerFailure | None]:
    """
    Run a capability handler.

    Handlers may be plain functions or coroutines. A ``HandlerError`` carries
    the message shown to the caller; any other exception is logged with its
    traceback and reported by its message. Cancellation is not caught.

    Returns (result, None) or (None, HandlerFailure).
    """
    log = get_logger(__name__)
    try:
        result = record.handler(arguments)
        if inspect.isawaitable(result):
            result = await result
    except HandlerError as e:
        log.info("Handler failed", reason=e.message)
        return None, HandlerFailure(reason=e.message)
    except Exception as e:
        log.exception("Unexpected handler error")
        return None, HandlerFailure(reason=str(e) or type(e).__name__)
    return result, None


class Dispatcher:
    """Dispatch requests against a capability registry.

    Every call is independent: nothing is stored on the dispatcher between
    calls, so one instance can serve any number of concurrent requests.
    """

    def __init__(self, registry: CapabilityRegistry):
        self.registry = registry

    async def dispatch(
        self,
        kind: CapabilityKind | str,
        name: str,
        raw_arguments: Mapping[str, Any] | None = None,
    ) -> DispatchResult:
        """
        Resolve, validate, invoke and normalize a single request.

        Always returns either an envelope or an ErrorResult; failures at any
        stage never propagate to the caller.
        """
        kind_name = kind.value if isinstance(kind, CapabilityKind) else str(kind)
        with capability_context(kind_name, name):
            outcome, failure = await self._run(kind, name, raw_arguments)
        if failure is not None:
            return translate_failure(failure, kind_name, name)
        return outcome

    async def _run(
        self,
        kind: CapabilityKind | str,
        name: str,
        raw_arguments: Mapping[str, Any] | None,
    ) -> tuple[Envelope | None, Failure | None]:
        log = get_logger(__name__)

        try:
            record, failure = self.registry.resolve(kind, name)
        except Exception as e:
            return None, _stage_raised("resolve", e)
        if failure is not None:
            log.info("Capability not found", reason=failure.message)
            return None, failure

        try:
            arguments, failure = validate(record.schema, raw_arguments)
        except Exception as e:
            return None, _stage_raised("validate", e)
        if failure is not None:
            log.info("Rejected arguments", reason=failure.message)
            return None, failure

        result, failure = await invoke(record, arguments)
        if failure is not None:
            return None, failure

        try:
            envelope, failure = normalize(record.kind, result)
        except Exception as e:
            return None, _stage_raised("normalize", e)
        if failure is not None:
            log.error("Could not normalize result", reason=failure.message)
            return None, failure

        return envelope, None

    def dispatch_sync(
        self,
        kind: CapabilityKind | str,
        name: str,
        raw_arguments: Mapping[str, Any] | None = None,
    ) -> DispatchResult:
        """Dispatch from synchronous code. Must not be called inside a running loop."""
        return asyncio.run(self.dispatch(kind, name, raw_arguments))
