"""
Dashboard Tool Registry

Maps tool ids to their metadata and implementation. Entries are added at
import time by @system_tool; execute_tool and the MCP server read them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Coroutine

from dashboard_builder.models.contracts.tools import ToolResponse


class ToolCategory(str, Enum):
    """Categories for grouping dashboard tools."""

    DASHBOARD = "dashboard"
    COMPONENTS = "components"
    DATA = "data"
    SCHEMA = "schema"
    TEMPLATES = "templates"


ToolReturnType = ToolResponse


@dataclass
class SystemToolMetadata:
    """A registered dashboard tool."""

    id: str
    name: str
    description: str

    category: ToolCategory = ToolCategory.DASHBOARD

    # JSON schema; property names are camelCase
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}, "required": []}
    )

    implementation: Callable[..., Coroutine[Any, Any, ToolReturnType]] | None = None


_SYSTEM_TOOL_REGISTRY: dict[str, SystemToolMetadata] = {}


def register_tool(metadata: SystemToolMetadata) -> None:
    """Add a tool. Ids are unique."""
    if metadata.id in _SYSTEM_TOOL_REGISTRY:
        raise ValueError(f"Tool '{metadata.id}' is already registered")
    _SYSTEM_TOOL_REGISTRY[metadata.id] = metadata


def get_all_system_tools() -> list[SystemToolMetadata]:
    """Tools in registration order."""
    return list(_SYSTEM_TOOL_REGISTRY.values())


def get_system_tool(tool_id: str) -> SystemToolMetadata | None:
    return _SYSTEM_TOOL_REGISTRY.get(tool_id)


def get_all_tool_ids() -> list[str]:
    return list(_SYSTEM_TOOL_REGISTRY.keys())
