# registry.py
# Per-agent tool registry.
#
# Maps tool name -> Tool and owns the invocation boundary. execute() turns
# handler exceptions into soft failures; invoke() raises ToolExecutionError
# so plan execution can stop at a throwing tool.

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

from web3_agent.errors import InvalidToolError, ToolExecutionError, ToolNotFoundError
from web3_agent.models import StepResult

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Union[StepResult, Awaitable[StepResult]]]


@dataclass
class Tool:
    """A named capability with a uniform invoke/result contract."""

    name: str
    handler: ToolHandler
    description: str = ""


def _normalize(result: Any) -> StepResult:
    """Coerce a handler's return value into a StepResult dict."""
    if isinstance(result, dict):
        if "success" in result:
            return result
        return {"success": True, **result}
    return {"success": True, "result": result}


class ToolRegistry:
    """
    Name -> Tool mapping with last-write-wins registration.

    Example:
        registry = ToolRegistry()
        registry.register(Tool(name="echo", handler=lambda p: {"success": True, **p}))
        result = await registry.execute("echo", {"message": "hi"})
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool | Mapping[str, Any]) -> "ToolRegistry":
        if isinstance(tool, Mapping):
            tool = Tool(
                name=tool.get("name"),
                handler=tool.get("handler"),
                description=tool.get("description") or "",
            )

        if not isinstance(tool.name, str) or not tool.name.strip():
            raise InvalidToolError("Tool must have a name and handler function.")
        if not callable(tool.handler):
            raise InvalidToolError(f"Tool {tool.name!r} must have a name and handler function.")

        if tool.name in self._tools:
            logger.debug("Overwriting tool %s", tool.name)
        self._tools[tool.name] = tool
        return self

    def enable(self, name: str) -> "ToolRegistry":
        """Best-effort activation. Unknown names are reported, never raised."""
        if name not in self._tools:
            logger.warning("No built-in tool found with name: %s", name)
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Tool not found: {name}") from None

    def names(self) -> list[str]:
        return list(self._tools)

    def describe(self) -> str:
        """One line per tool, for planning prompts."""
        return "\n".join(
            f"- {tool.name}: {tool.description or 'no description'}" for tool in self._tools.values()
        )

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def invoke(self, name: str, parameters: Mapping[str, Any] | None = None) -> StepResult:
        """
        Invoke a registered tool, escalating handler exceptions.

        Raises ToolNotFoundError for unknown names and ToolExecutionError
        (chained to the original) when the handler raises.
        """
        tool = self.get(name)
        try:
            result = tool.handler(dict(parameters or {}))
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.debug("Tool %s raised %r", name, exc)
            raise ToolExecutionError(name, str(exc) or type(exc).__name__) from exc
        return _normalize(result)

    async def execute(self, name: str, parameters: Mapping[str, Any] | None = None) -> StepResult:
        """
        Invoke a registered tool.

        Raises ToolNotFoundError for unknown names. Anything the handler
        raises is returned as {"success": False, "error": <message>}.
        """
        try:
            return await self.invoke(name, parameters)
        except ToolExecutionError as exc:
            return exc.result
