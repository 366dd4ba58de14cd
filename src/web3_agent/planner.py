# planner.py
# Plan generation: objective + tool catalog -> validated Plan.
#
# The reasoning service is untrusted. Its output is parsed and validated
# strictly; anything that is not a well-formed {"steps": [...]} object is
# a PlanParseError and ends the run.

import json
import re

from pydantic import ValidationError

from web3_agent.errors import PlanParseError
from web3_agent.models import Plan, Task
from web3_agent.reasoning import ReasoningService
from web3_agent.registry import ToolRegistry

PLANNING_PROMPT = """\
You are the planning component of an autonomous Web3 agent.

Break the user's objective into an ordered list of steps. Respond with a \
single JSON object that matches this exact schema and nothing else:

{
  "steps": [
    {
      "id": "s1",
      "description": "what this step does and why",
      "tool": "toolName or null",
      "parameters": {"param_name": "value"}
    }
  ]
}

Rules:
- Step ids are unique strings.
- Set "tool" only to one of the available tools. Use null for steps that \
need analysis or reasoning instead of a tool call.
- Steps run strictly in order and later steps can see earlier results.\
"""


def parse_plan(response: str) -> Plan:
    """
    Decode and validate a planning response.

    Raises PlanParseError on invalid JSON, a missing or empty steps array,
    malformed steps, or duplicate step ids.
    """
    raw = response.strip()
    # Strip markdown code blocks if the model wrapped its JSON
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw)
        raw = re.sub(r"\s*```$", "", raw)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PlanParseError(f"Failed to create plan: response is not valid JSON ({exc})") from exc

    if not isinstance(data, dict) or "steps" not in data:
        raise PlanParseError("Failed to create plan: response has no 'steps' field.")

    try:
        return Plan.model_validate({"steps": data["steps"]})
    except ValidationError as exc:
        raise PlanParseError(f"Failed to create plan: {exc}") from exc


class PlanGenerator:
    def __init__(
        self,
        registry: ToolRegistry,
        reasoning: ReasoningService,
        *,
        model: str,
        networks: list[str],
        temperature: float = 0.2,
    ) -> None:
        self._registry = registry
        self._reasoning = reasoning
        self._model = model
        self._networks = list(networks)
        self._temperature = temperature

    def build_messages(self, task: Task) -> list[dict]:
        lines = [
            f'Create a step-by-step plan for: "{task.objective}"',
            "",
            "Available Web3 tools:",
            self._registry.describe() or "- none",
            f"Supported blockchains: {', '.join(self._networks)}",
        ]
        if task.wallet_address:
            lines.append(f"Wallet address: {task.wallet_address}")
        if task.parameters:
            lines.append(f"Task parameters: {json.dumps(task.parameters, default=str)}")
        return [
            {"role": "system", "content": PLANNING_PROMPT},
            {"role": "user", "content": "\n".join(lines)},
        ]

    async def create_plan(self, task: Task) -> Plan:
        response = await self._reasoning.complete(
            self.build_messages(task),
            model=self._model,
            temperature=self._temperature,
            json_mode=True,
        )
        return parse_plan(response)
