"""Argument validation against capability schemas."""

import math
from typing import Any, Iterator, Mapping

from src.mcp.failures import (
    InvalidEnumValue,
    MissingRequiredField,
    OutOfRange,
    TypeMismatch,
    ValidationFailure,
)
from src.mcp.schema import (
    BooleanField,
    EnumField,
    FieldSpec,
    NumberField,
    Schema,
    StringField,
)

ValidatedArguments = dict[str, Any]

# Marks a field that is neither supplied nor defaulted
_ABSENT = object()


def json_type_name(value: Any) -> str:
    """Name the JSON type of a raw argument value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        # Arbitrarily large JSON integers are finite but overflow a float
        return True
    return isinstance(value, float) and math.isfinite(value)


def _enum_contains(allowed: tuple[Any, ...], value: Any) -> bool:
    # 1 == True in Python, so compare types as well as values
    return any(type(value) is type(v) and value == v for v in allowed)


def _check_type(name: str, spec: FieldSpec, value: Any) -> ValidationFailure | None:
    actual = json_type_name(value)

    if isinstance(spec, StringField):
        if not isinstance(value, str):
            return TypeMismatch(field=name, expected="string", actual=actual)
    elif isinstance(spec, NumberField):
        if not _is_number(value):
            if actual == "number":
                actual = "non-finite number"
            return TypeMismatch(field=name, expected=spec.type_name, actual=actual)
        if spec.integer and isinstance(value, float) and not value.is_integer():
            return TypeMismatch(field=name, expected="integer", actual="number")
    elif isinstance(spec, BooleanField):
        if not isinstance(value, bool):
            return TypeMismatch(field=name, expected="boolean", actual=actual)
    elif isinstance(spec, EnumField):
        literal_types = {json_type_name(v) for v in spec.values}
        if actual not in literal_types:
            expected = " or ".join(sorted(literal_types))
            return TypeMismatch(field=name, expected=expected, actual=actual)
    return None


def check_field(name: str, spec: FieldSpec, value: Any) -> tuple[Any, ValidationFailure | None]:
    """
    Check one present value against its field spec.

    Checks run in a fixed order: type, then bounds, then enumeration.

    Returns:
        (typed value, None) on success, (None, failure) otherwise.
    """
    failure = _check_type(name, spec, value)
    if failure is not None:
        return None, failure

    if isinstance(spec, NumberField):
        if (spec.minimum is not None and value < spec.minimum) or (
            spec.maximum is not None and value > spec.maximum
        ):
            return None, OutOfRange(
                field=name,
                minimum=spec.minimum,
                maximum=spec.maximum,
                actual=value,
            )
        if spec.integer and isinstance(value, float):
            value = int(value)

    if isinstance(spec, EnumField) and not _enum_contains(spec.values, value):
        return None, InvalidEnumValue(field=name, allowed=spec.values, actual=value)

    return value, None


def _iter_fields(
    schema: Schema, raw_args: Mapping[str, Any] | None
) -> Iterator[tuple[str, Any, ValidationFailure | None]]:
    """Yield (name, value-or-_ABSENT, failure) per declared field, in order."""
    raw_args = raw_args or {}
    if not isinstance(raw_args, Mapping):
        yield "arguments", _ABSENT, TypeMismatch(
            field="arguments", expected="object", actual=json_type_name(raw_args)
        )
        return
    for name, spec in schema.items():
        value = raw_args.get(name)
        # A JSON null counts as "not supplied"
        if value is None:
            if spec.required:
                yield name, _ABSENT, MissingRequiredField(field=name)
            elif spec.has_default:
                yield name, spec.default, None
            else:
                yield name, _ABSENT, None
            continue

        typed, failure = check_field(name, spec, value)
        yield name, typed, failure


def validate(
    schema: Schema, raw_args: Mapping[str, Any] | None
) -> tuple[ValidatedArguments | None, ValidationFailure | None]:
    """
    Validate raw arguments against a schema, applying defaults.

    Fields are checked in declared order and validation stops at the first
    failing field. Arguments the schema does not declare are ignored.

    Returns:
        (validated arguments, None) on success, (None, failure) otherwise.
    """
    validated: ValidatedArguments = {}
    for name, value, failure in _iter_fields(schema, raw_args):
        if failure is not None:
            return None, failure
        if value is not _ABSENT:
            validated[name] = value
    return validated, None


def collect_violations(
    schema: Schema, raw_args: Mapping[str, Any] | None
) -> list[ValidationFailure]:
    """Return every violation, at most one per field, in declared order."""
    return [
        failure
        for _, _, failure in _iter_fields(schema, raw_args)
        if failure is not None
    ]

