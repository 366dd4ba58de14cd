# agent.py
# Agent core.
#
# The Agent is the kernel. The reasoning service and the tools are passive
# responders; this class owns lifecycle state, sequencing and result
# aggregation, and reports progress on its EventBus.
#
# Control flow:
#   run(task) -> busy guard -> plan (once) -> steps in order, each result
#   stored under step.id -> summary -> TaskResult
#
# All terminal output lives in display.py, attached as an event observer.

import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

import httpx

from web3_agent.config import AgentConfig
from web3_agent.errors import AgentBusyError, ToolExecutionError
from web3_agent.events import Event, EventBus, Observer
from web3_agent.executor import StepExecutor
from web3_agent.models import AgentStatus, Plan, Step, StepResult, Task, TaskResult
from web3_agent.planner import PlanGenerator
from web3_agent.reasoning import OpenAIReasoningService, ReasoningService
from web3_agent.registry import Tool, ToolRegistry
from web3_agent.tools import register_builtin_tools

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = """\
You report on tasks completed by an autonomous Web3 agent. Create a concise \
summary of what was accomplished, including any relevant blockchain \
transaction details (hashes, token ids, content ids) found in the step results.\
"""


class Agent:
    """
    Plan-then-execute agent with a per-instance tool registry.

    At most one task is in flight per instance. Separate instances share
    nothing and may run concurrently.

    Example:
        async with Agent(AgentConfig.from_env()) as agent:
            report = await agent.run(Task(objective="Store my profile on IPFS"))
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        *,
        reasoning: ReasoningService | None = None,
        registry: ToolRegistry | None = None,
        events: EventBus | None = None,
        http_client: httpx.AsyncClient | None = None,
        builtin_tools: bool = True,
    ) -> None:
        self.config = config or AgentConfig()
        self.id = str(uuid.uuid4())
        self.name = self.config.name
        self.status = AgentStatus.IDLE

        self.events = events if events is not None else EventBus()
        self.providers = self.config.providers()

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.config.http_timeout)
        self._owns_reasoning = reasoning is None
        self.reasoning = reasoning or OpenAIReasoningService.from_config(self.config)

        self.tools = registry if registry is not None else ToolRegistry()
        if builtin_tools:
            register_builtin_tools(self.tools, self.config, self._http, self.providers)
        for name in self.config.web3_tools:
            self.enable_tool(name)

        self.planner = PlanGenerator(
            self.tools,
            self.reasoning,
            model=self.config.models.reasoning,
            networks=self.config.networks,
        )
        self.executor = StepExecutor(
            self.tools,
            self.reasoning,
            model=self.config.models.execution,
            strict_tools=self.config.strict_tools,
        )

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def register_tool(self, tool: Tool | Mapping[str, Any]) -> "Agent":
        self.tools.register(tool)
        return self

    def enable_tool(self, name: str) -> "Agent":
        self.tools.enable(name)
        return self

    async def execute_tool(self, name: str, parameters: Mapping[str, Any] | None = None) -> StepResult:
        return await self.tools.execute(name, parameters)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: Event | None, callback: Observer):
        """Subscribe to lifecycle events. Returns an unsubscribe function."""
        return self.events.subscribe(event, callback)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def create_plan(self, task: Task) -> Plan:
        return await self.planner.create_plan(task)

    async def execute_step(self, step: Step, prior_results: Mapping[str, StepResult], task: Task) -> StepResult:
        return await self.executor.execute_step(step, prior_results, task.context())

    async def execute_plan(self, plan: Plan, task: Task, task_id: str | None = None) -> TaskResult:
        """
        Strictly sequential execution.

        Stops at the first step that raises: stepFailed is emitted and the
        exception propagates. Soft failures are stored and execution goes on.
        A throwing tool leaves its soft-failure result under its step id and
        the partial map on ToolExecutionError.results.
        """
        results: dict[str, StepResult] = {}

        for step in plan.steps:
            self.events.emit(Event.STEP_START, step=step)
            try:
                # Copy so step k sees exactly steps 1..k-1.
                result = await self.execute_step(step, dict(results), task)
            except Exception as exc:
                if isinstance(exc, ToolExecutionError):
                    results[step.id] = exc.result
                    exc.results = dict(results)
                self.events.emit(Event.STEP_FAILED, step=step, error=str(exc))
                raise
            results[step.id] = result
            self.events.emit(Event.STEP_COMPLETE, step=step, result=result)

        return await self.create_final_report(task, results, task_id)

    async def create_final_report(
        self,
        task: Task,
        results: dict[str, StepResult],
        task_id: str | None = None,
    ) -> TaskResult:
        messages = [
            {"role": "system", "content": SUMMARY_PROMPT},
            {
                "role": "user",
                "content": (
                    f'Summarize the results of the task: "{task.objective}"\n\n'
                    f"Step results: {json.dumps(results, default=str)}"
                ),
            },
        ]
        summary = await self.reasoning.complete(
            messages, model=self.config.models.execution, temperature=0.3
        )
        return TaskResult(
            task_id=task_id or str(uuid.uuid4()),
            success=True,
            objective=task.objective,
            summary=summary,
            results=results,
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, task: Task | Mapping[str, Any]) -> TaskResult:
        """
        Plan, execute and summarise one task.

        Raises AgentBusyError without side effects if a task is already in
        flight. Any other failure resets the agent to idle, emits
        taskFailed and re-raises.
        """
        if self.status is not AgentStatus.IDLE:
            raise AgentBusyError(f"Agent {self.name} is already running a task.")
        if not isinstance(task, Task):
            task = Task.model_validate(task)

        task_id = str(uuid.uuid4())
        self.status = AgentStatus.RUNNING
        logger.info("Starting task %s: %s", task_id, task.objective)
        self.events.emit(Event.TASK_START, task_id=task_id, objective=task.objective)

        try:
            plan = await self.create_plan(task)
            self.events.emit(Event.PLAN_CREATED, task_id=task_id, plan=plan)
            report = await self.execute_plan(plan, task, task_id)
        except Exception as exc:
            self.status = AgentStatus.IDLE
            logger.info("Task %s failed: %s", task_id, exc)
            self.events.emit(Event.TASK_FAILED, task_id=task_id, error=str(exc))
            raise
        finally:
            self.status = AgentStatus.IDLE

        self.events.emit(Event.TASK_COMPLETE, task_id=task_id, result=report)
        return report

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()
        if self._owns_reasoning and isinstance(self.reasoning, OpenAIReasoningService):
            await self.reasoning.aclose()

    async def __aenter__(self) -> "Agent":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_agent(config: AgentConfig | None = None, **kwargs: Any) -> Agent:
    """Build an agent from config, falling back to the environment."""
    return Agent(config or AgentConfig.from_env(), **kwargs)
