# errors.py
# Exception hierarchy for the agent core.
#
# Hard errors only. Soft failures travel as {"success": False, ...} dicts
# and never appear here.


class AgentError(Exception):
    """Base class for every hard error raised by the agent core."""


class InvalidToolError(AgentError):
    """Raised when a tool definition lacks a name or a callable handler."""


class ToolNotFoundError(AgentError):
    """Raised when a tool name is absent from the registry."""


class PlanGenerationError(AgentError):
    """Raised when the reasoning service cannot produce a usable plan."""


class PlanParseError(PlanGenerationError):
    """Raised when a plan response cannot be parsed or validated."""


class AgentBusyError(AgentError):
    """Raised when run() is called while a task is already in flight."""


class ToolExecutionError(AgentError):
    """
    Raised when a tool handler raises during plan execution.

    `result` is the soft-failure form of the exception, the same dict
    ToolRegistry.execute() would have returned. `results` holds the step
    results recorded before the run stopped, the failing step included.
    """

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"Tool {tool} raised: {message}")
        self.tool = tool
        self.result: dict = {"success": False, "error": message}
        self.results: dict = {}
