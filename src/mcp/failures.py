"""Failure values produced by the dispatch stages.

Each stage of a dispatch (resolve, validate, invoke, normalize) reports
failure by returning one of these values instead of raising, so that the
error translator can map every kind of failure to an error result.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict


class Failure(BaseModel):
    """Base class for dispatch failures."""

    model_config = ConfigDict(frozen=True)

    stage: ClassVar[str] = "dispatch"

    @property
    def message(self) -> str:
        raise NotImplementedError


def _literal(value: Any) -> str:
    """Render a value the way it appears in a request."""
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


# =============================================================================
# Resolution
# =============================================================================


class NotFound(Failure):
    """No capability is registered under (kind, name)."""

    stage: ClassVar[str] = "resolve"

    kind: str
    name: str

    @property
    def message(self) -> str:
        return f"no such {self.kind} named {self.name}"


# =============================================================================
# Validation
# =============================================================================


class ValidationFailure(Failure):
    """An argument violated its field spec. Always names one field."""

    stage: ClassVar[str] = "validate"

    field: str


class MissingRequiredField(ValidationFailure):
    @property
    def message(self) -> str:
        return f"'{self.field}' is required"


class TypeMismatch(ValidationFailure):
    expected: str
    actual: str

    @property
    def message(self) -> str:
        return f"'{self.field}' must be of type {self.expected}, got {self.actual}"


class OutOfRange(ValidationFailure):
    minimum: int | float | None = None
    maximum: int | float | None = None
    actual: int | float

    @property
    def message(self) -> str:
        if self.minimum is not None and self.maximum is not None:
            bound = f"between {_literal(self.minimum)} and {_literal(self.maximum)}"
        elif self.minimum is not None:
            bound = f"at least {_literal(self.minimum)}"
        else:
            bound = f"at most {_literal(self.maximum)}"
        return f"'{self.field}' must be {bound}, got {_literal(self.actual)}"


class InvalidEnumValue(ValidationFailure):
    allowed: tuple[Any, ...]
    actual: Any

    @property
    def message(self) -> str:
        choices = ", ".join(_literal(v) for v in self.allowed)
        return f"'{self.field}' must be one of {choices}, got {_literal(self.actual)}"


# =============================================================================
# Invocation and normalization
# =============================================================================


class HandlerFailure(Failure):
    """The handler itself failed (domain error, upstream error, missing config)."""

    stage: ClassVar[str] = "invoke"

    reason: str

    @property
    def message(self) -> str:
        return self.reason


class NormalizationFailure(Failure):
    """The handler returned something that cannot be shaped into a response."""

    stage: ClassVar[str] = "normalize"

    reason: str

    @property
    def message(self) -> str:
        return self.reason


class InternalFailure(Failure):
    """A dispatch stage raised instead of returning a failure value."""

    failed_stage: str
    reason: str

    @property
    def stage(self) -> str:
        return self.failed_stage

    @property
    def message(self) -> str:
        return self.reason
