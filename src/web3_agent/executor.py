# executor.py
# Step execution: one plan step -> one StepResult.
#
# A step naming a registered tool goes through the registry. A step with
# no tool is answered by the reasoning service. A step naming an
# unregistered tool is a hard ToolNotFoundError unless strict_tools is off,
# in which case it is answered by reasoning as well. A tool handler that
# raises surfaces as ToolExecutionError; a returned {"success": False} is data.

import json
import logging
from collections.abc import Mapping
from typing import Any

from web3_agent.errors import ToolNotFoundError
from web3_agent.models import Step, StepResult
from web3_agent.reasoning import ReasoningService
from web3_agent.registry import ToolRegistry

logger = logging.getLogger(__name__)

REASONING_PROMPT = """\
You are the execution component of an autonomous Web3 agent. You receive \
one plan step together with the results of the steps before it. Provide \
your reasoning and conclusion for this step. Be concise and concrete.\
"""


class StepExecutor:
    def __init__(
        self,
        registry: ToolRegistry,
        reasoning: ReasoningService,
        *,
        model: str,
        strict_tools: bool = True,
        temperature: float = 0.5,
    ) -> None:
        self._registry = registry
        self._reasoning = reasoning
        self._model = model
        self._strict_tools = strict_tools
        self._temperature = temperature

    async def execute_step(
        self,
        step: Step,
        prior_results: Mapping[str, StepResult],
        context: Mapping[str, Any] | None = None,
    ) -> StepResult:
        """
        Run one step.

        `context` is task-scoped (e.g. walletAddress) and wins over the
        step's own parameters on key collisions.
        """
        if step.tool:
            if self._registry.has(step.tool):
                parameters = {**step.parameters, **(context or {})}
                logger.debug("Step %s -> tool %s", step.id, step.tool)
                return await self._registry.invoke(step.tool, parameters)
            if self._strict_tools:
                raise ToolNotFoundError(f"Tool not found: {step.tool}")
            logger.warning(
                "Step %s names unregistered tool %s; using reasoning instead", step.id, step.tool
            )
        return await self.execute_reasoning(step, prior_results)

    async def execute_reasoning(self, step: Step, prior_results: Mapping[str, StepResult]) -> StepResult:
        messages = [
            {"role": "system", "content": REASONING_PROMPT},
            {
                "role": "user",
                "content": (
                    f'You are executing step: "{step.description or step.id}"\n\n'
                    f"Previous results: {json.dumps(dict(prior_results), default=str)}"
                ),
            },
        ]
        logger.debug("Step %s -> reasoning", step.id)
        text = await self._reasoning.complete(
            messages, model=self._model, temperature=self._temperature
        )
        return {"success": True, "reasoning": text or ""}
