"""
Dashboard Tool Decorator

@system_tool attaches metadata to a tool coroutine and registers it.
The function itself is returned unchanged.
"""

from typing import Any, Callable, Coroutine, TypeVar

from dashboard_builder.services.mcp_server.tool_registry import (
    SystemToolMetadata,
    ToolCategory,
    ToolReturnType,
    register_tool,
)

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, ToolReturnType]])


def system_tool(
    id: str,
    name: str,
    description: str,
    *,
    category: ToolCategory = ToolCategory.DASHBOARD,
    input_schema: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """
    Register a coroutine `async def tool(context, **kwargs) -> ToolResponse`.

    `input_schema` uses camelCase property names; execute_tool passes the
    matching params to the tool as snake_case keyword arguments. The
    function is returned as is, with `_tool_metadata` attached.
    """

    def decorator(func: F) -> F:
        metadata = SystemToolMetadata(
            id=id,
            name=name,
            description=description,
            category=category,
            input_schema=input_schema or {"type": "object", "properties": {}, "required": []},
            implementation=func,
        )
        register_tool(metadata)

        func._tool_metadata = metadata  # type: ignore[attr-defined]
        return func

    return decorator
