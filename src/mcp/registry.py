"""Capability registry for MCP tools, resources and prompts."""

import importlib
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from src.mcp.failures import NotFound
from src.mcp.models import Prompt, Resource, Tool
from src.mcp.schema import Schema

logger = logging.getLogger(__name__)

# Handlers take validated arguments and return a domain result, either
# directly or through an awaitable.
Handler = Callable[[dict[str, Any]], Awaitable[Any] | Any]


class CapabilityKind(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


class DuplicateCapabilityError(Exception):
    """Raised when (kind, name) is registered twice."""

    def __init__(self, kind: CapabilityKind, name: str):
        super().__init__(f"{kind.value} '{name}' is already registered")
        self.kind = kind
        self.name = name


class RegistryFrozenError(Exception):
    """Raised when registering after the registry has been frozen."""


class CapabilityRecord:
    """A registered capability with its schema and handler."""

    def __init__(
        self,
        kind: CapabilityKind,
        name: str,
        schema: Schema,
        handler: Handler,
        description: str = "",
        title: str | None = None,
        mime_type: str | None = None,
    ):
        self.kind = kind
        self.name = name
        self.schema = schema
        self.handler = handler
        self.description = description
        self.title = title
        self.mime_type = mime_type

    def __repr__(self) -> str:
        return f"CapabilityRecord(kind={self.kind.value!r}, name={self.name!r})"

    def to_mcp_tool(self) -> Tool:
        """Convert to MCP Tool model for tools/list."""
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.schema.to_json_schema(),
        )

    def to_mcp_resource(self) -> Resource:
        """Convert to MCP Resource model for resources/list."""
        return Resource(
            uri=self.name,
            name=self.title or self.name,
            description=self.description or None,
            mimeType=self.mime_type,
        )

    def to_mcp_prompt(self) -> Prompt:
        """Convert to MCP Prompt model for prompts/list."""
        return Prompt(
            name=self.name,
            description=self.description or None,
            arguments=self.schema.to_prompt_arguments(),
        )


class CapabilityRegistry:
    """
    Registry of capabilities keyed by (kind, name).

    Capabilities are registered during startup, after which the registry is
    frozen and only read. Providers are loaded plugin-style from
    ``src.tools.<provider>.tools``.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[CapabilityKind, str], CapabilityRecord] = {}
        self._providers: set[str] = set()
        self._frozen = False

    def register(
        self,
        kind: CapabilityKind | str,
        name: str,
        schema: Schema,
        handler: Handler,
        description: str = "",
        title: str | None = None,
        mime_type: str | None = None,
    ) -> CapabilityRecord:
        """Register a capability. Only valid before ``freeze()``."""
        kind = CapabilityKind(kind)
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot register {kind.value} '{name}': registry is frozen"
            )
        key = (kind, name)
        if key in self._records:
            raise DuplicateCapabilityError(kind, name)

        record = CapabilityRecord(
            kind=kind,
            name=name,
            schema=schema,
            handler=handler,
            description=description,
            title=title,
            mime_type=mime_type,
        )
        self._records[key] = record
        logger.info(f"Registered {kind.value}: {name}")
        return record

    def freeze(self) -> None:
        """End the registration phase; the registry is read-only afterwards."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, kind: CapabilityKind | str, name: str) -> CapabilityRecord | None:
        """Get a capability by kind and name."""
        try:
            kind = CapabilityKind(kind)
        except ValueError:
            return None
        return self._records.get((kind, name))

    def resolve(
        self, kind: CapabilityKind | str, name: str
    ) -> tuple[CapabilityRecord | None, NotFound | None]:
        """
        Resolve a capability for dispatch.

        Returns (record, None) or (None, NotFound).
        """
        record = self.get(kind, name)
        if record is None:
            kind_name = kind.value if isinstance(kind, CapabilityKind) else str(kind)
            return None, NotFound(kind=kind_name, name=name)
        return record, None

    def records(self, kind: CapabilityKind | str | None = None) -> tuple[CapabilityRecord, ...]:
        """All registered records in registration order, optionally of one kind."""
        if kind is None:
            return tuple(self._records.values())
        kind = CapabilityKind(kind)
        return tuple(r for r in self._records.values() if r.kind is kind)

    def list_tools(self) -> list[Tool]:
        """List all registered tools as MCP Tool models."""
        return [r.to_mcp_tool() for r in self.records(CapabilityKind.TOOL)]

    def list_resources(self) -> list[Resource]:
        """List all registered resources as MCP Resource models."""
        return [r.to_mcp_resource() for r in self.records(CapabilityKind.RESOURCE)]

    def list_prompts(self) -> list[Prompt]:
        """List all registered prompts as MCP Prompt models."""
        return [r.to_mcp_prompt() for r in self.records(CapabilityKind.PROMPT)]

    def load_provider(self, provider_name: str) -> bool:
        """
        Load a provider module and register its capabilities.

        Providers are expected to be in src/tools/<provider_name>/
        and have a register_tools(registry) function. Duplicate or
        late registrations are programming errors and propagate.
        """
        if provider_name in self._providers:
            logger.debug(f"Provider '{provider_name}' already loaded")
            return True

        module_path = f"src.tools.{provider_name}.tools"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import provider '{provider_name}': {e}")
            return False

        if not hasattr(module, "register_tools"):
            logger.warning(f"Provider '{provider_name}' has no register_tools function")
            return False

        module.register_tools(self)
        self._providers.add(provider_name)
        logger.info(f"Loaded provider: {provider_name}")
        return True

    def load_providers(self, provider_names: list[str]) -> dict[str, bool]:
        """Load multiple providers, returning success status for each."""
        results = {}
        for name in provider_names:
            results[name] = self.load_provider(name)
        return results

    @property
    def capability_count(self) -> int:
        """Return the number of registered capabilities of every kind."""
        return len(self._records)

    def count(self, kind: CapabilityKind | str) -> int:
        """Return the number of registered capabilities of one kind."""
        return len(self.records(kind))

    @property
    def provider_count(self) -> int:
        """Return the number of loaded providers."""
        return len(self._providers)


# Global registry instance
_registry: CapabilityRegistry | None = None


def get_registry() -> CapabilityRegistry:
    """Get the global capability registry, creating it if necessary."""
    global _registry
    if _registry is None:
        _registry = CapabilityRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (useful for testing)."""
    global _registry
    _registry = None
