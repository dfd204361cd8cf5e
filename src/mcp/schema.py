"""Declarative parameter schemas for capabilities.

A capability declares its parameters as a ``Schema``: an ordered mapping
from parameter name to a field spec. Field specs are plain data, one class
per primitive kind::

    Schema({
        "query": StringField(description="Place name or address"),
        "limit": NumberField(
            description="Number of results",
            integer=True, minimum=1, maximum=40,
            required=False, default=1,
        ),
    })

A field spec fully determines how its parameter is validated and
defaulted (see ``src.mcp.validation``). Specs are frozen once built.
"""

from types import MappingProxyType
from typing import Any, Iterator, Literal, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

from src.mcp.models import PromptArgument


class BaseField(BaseModel):
    """Attributes shared by every field spec."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    required: bool = True
    default: Any = None

    @property
    def has_default(self) -> bool:
        """True when a default was declared, even if that default is None."""
        return "default" in self.model_fields_set

    @model_validator(mode="after")
    def check_required_has_no_default(self) -> "BaseField":
        if self.required and self.has_default:
            raise ValueError("a required field cannot declare a default")
        return self

    def _base_json_schema(self, type_name: str | list[str]) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": type_name}
        if self.description:
            schema["description"] = self.description
        if self.has_default:
            schema["default"] = self.default
        return schema


class StringField(BaseField):
    kind: Literal["string"] = "string"

    def to_json_schema(self) -> dict[str, Any]:
        return self._base_json_schema("string")


class NumberField(BaseField):
    kind: Literal["number"] = "number"
    integer: bool = False
    minimum: int | float | None = None
    maximum: int | float | None = None

    @model_validator(mode="after")
    def check_bounds_ordered(self) -> "NumberField":
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError("minimum must not exceed maximum")
        return self

    @property
    def type_name(self) -> str:
        return "integer" if self.integer else "number"

    def to_json_schema(self) -> dict[str, Any]:
        schema = self._base_json_schema(self.type_name)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class BooleanField(BaseField):
    kind: Literal["boolean"] = "boolean"

    def to_json_schema(self) -> dict[str, Any]:
        return self._base_json_schema("boolean")


class EnumField(BaseField):
    kind: Literal["enum"] = "enum"
    values: tuple[str | bool | int | float, ...]

    @model_validator(mode="after")
    def check_has_values(self) -> "EnumField":
        if not self.values:
            raise ValueError("an enum field needs at least one allowed value")
        return self

    def to_json_schema(self) -> dict[str, Any]:
        types = sorted({_json_type(v) for v in self.values})
        schema = self._base_json_schema(types[0] if len(types) == 1 else types)
        schema["enum"] = list(self.values)
        return schema


FieldSpec = StringField | NumberField | BooleanField | EnumField


def _json_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, str):
        return "string"
    return "number"


class Schema(Mapping[str, FieldSpec]):
    """Ordered, read-only mapping of parameter name to field spec."""

    def __init__(self, fields: Mapping[str, FieldSpec] | None = None):
        self._fields: Mapping[str, FieldSpec] = MappingProxyType(dict(fields or {}))

    def __getitem__(self, name: str) -> FieldSpec:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({dict(self._fields)!r})"

    @property
    def required(self) -> list[str]:
        """Names of the required parameters, in declared order."""
        return [name for name, spec in self._fields.items() if spec.required]

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a JSON Schema object for tools/list."""
        return {
            "type": "object",
            "properties": {
                name: spec.to_json_schema() for name, spec in self._fields.items()
            },
            "required": self.required,
        }

    def to_prompt_arguments(self) -> list[PromptArgument]:
        """Render as an MCP prompt argument list for prompts/list."""
        return [
            PromptArgument(
                name=name,
                description=spec.description or None,
                required=spec.required,
            )
            for name, spec in self._fields.items()
        ]
