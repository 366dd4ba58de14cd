# models.py
# Data contracts for the agent core.
# No business logic lives here. Pure schema and validation.

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Tool and reasoning results stay plain dicts: tools add their own keys.
StepResult = dict[str, Any]


class AgentStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class Step(BaseModel):
    """A single action node in an execution plan."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique within the plan.")
    description: str = Field(default="", description="Human-readable intent of this step.")
    tool: str | None = Field(default=None, description="Registered tool name, or None for reasoning.")
    parameters: dict[str, Any] = Field(default_factory=dict, description="Tool arguments.")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Models frequently number steps 1, 2, 3.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tool", mode="before")
    @classmethod
    def _blank_tool(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("parameters", mode="before")
    @classmethod
    def _null_parameters(cls, value: Any) -> Any:
        return {} if value is None else value


class Plan(BaseModel):
    """An ordered execution plan produced once per task."""

    model_config = ConfigDict(frozen=True)

    steps: list[Step] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _unique_ids(self) -> "Plan":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id {step.id!r} in plan.")
            seen.add(step.id)
        return self


class Task(BaseModel):
    """A caller-submitted objective plus the context it runs under."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    objective: str = Field(..., description="Free-text statement of what to accomplish.")
    wallet_address: str | None = Field(default=None, alias="walletAddress")
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("objective")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task objective must not be blank.")
        return value

    @field_validator("wallet_address")
    @classmethod
    def _evm_address(cls, value: str | None) -> str | None:
        if value is not None and not _EVM_ADDRESS.match(value):
            raise ValueError(f"walletAddress {value!r} is not a 0x-prefixed 20-byte hex address.")
        return value

    def context(self) -> dict[str, Any]:
        """Task-scoped values merged into every tool invocation."""
        if self.wallet_address is None:
            return {}
        return {"walletAddress": self.wallet_address}


class TaskResult(BaseModel):
    """Final report for one run: the summary plus every step result."""

    task_id: str
    success: bool
    objective: str
    summary: str
    results: dict[str, StepResult] = Field(default_factory=dict)
