"""Basic provider tools - greeting and four-function calculator."""

from typing import Any

from src.mcp.errors import HandlerError
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import EnumField, NumberField, Schema, StringField

GREETINGS = {
    "ko": "안녕하세요, {name}님! 😊",
    "en": "Hello, {name}! 👋",
}

OPERATORS = ("+", "-", "*", "/")


def format_number(value: int | float) -> str:
    """Format a number without a trailing '.0' for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


async def greeting_handler(arguments: dict[str, Any]) -> str:
    """Handle the greeting tool call."""
    template = GREETINGS[arguments["language"]]
    return template.format(name=arguments["name"])


def calculate(a: int | float, b: int | float, operator: str) -> int | float:
    """Apply a calculator operator, raising HandlerError on invalid input."""
    if operator == "+":
        return a + b
    if operator == "-":
        return a - b
    if operator == "*":
        return a * b
    if operator == "/":
        if b == 0:
            raise HandlerError("cannot divide by zero")
        return a / b
    raise HandlerError(f"unsupported operator: {operator}")


async def calculator_handler(arguments: dict[str, Any]) -> str:
    """Handle the calculator tool call."""
    a, b, operator = arguments["a"], arguments["b"], arguments["operator"]
    result = calculate(a, b, operator)
    return f"{format_number(a)} {operator} {format_number(b)} = {format_number(result)}"


def register_tools(registry: CapabilityRegistry) -> None:
    """Register basic tools with the registry."""

    registry.register(
        CapabilityKind.TOOL,
        "greeting",
        Schema({
            "name": StringField(description="Name of the person to greet"),
            "language": EnumField(
                description="Greeting language (default: ko)",
                values=tuple(GREETINGS),
                required=False,
                default="ko",
            ),
        }),
        greeting_handler,
        description="Greets a person by name in Korean or English.",
    )

    registry.register(
        CapabilityKind.TOOL,
        "calculator",
        Schema({
            "a": NumberField(description="First operand"),
            "b": NumberField(description="Second operand"),
            "operator": EnumField(
                description="Operator (+, -, *, /)",
                values=OPERATORS,
            ),
        }),
        calculator_handler,
        description="Applies +, -, * or / to two numbers and returns the equation with its result.",
    )
