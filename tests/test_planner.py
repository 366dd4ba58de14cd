import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from web3_agent.errors import PlanParseError
from web3_agent.models import Task
from web3_agent.planner import PlanGenerator, parse_plan
from web3_agent.registry import Tool, ToolRegistry


def test_parse_plan_valid_response():
    plan = parse_plan(
        json.dumps(
            {
                "steps": [
                    {"id": "s1", "description": "Store", "tool": "ipfsStore", "parameters": {"content": "x"}},
                    {"id": "s2", "description": "Explain"},
                ]
            }
        )
    )

    assert [step.id for step in plan.steps] == ["s1", "s2"]
    assert plan.steps[0].tool == "ipfsStore"
    assert plan.steps[0].parameters == {"content": "x"}
    assert plan.steps[1].tool is None
    assert plan.steps[1].parameters == {}


def test_parse_plan_normalizes_loose_step_fields():
    plan = parse_plan('{"steps": [{"id": 1, "tool": "", "parameters": null}]}')

    step = plan.steps[0]
    assert step.id == "1"
    assert step.tool is None
    assert step.parameters == {}


def test_parse_plan_accepts_null_description():
    plan = parse_plan('{"steps": [{"id": "s1", "description": null, "tool": null}]}')

    assert plan.steps[0].description == ""
    assert plan.steps[0].tool is None


def test_parse_plan_strips_markdown_fences():
    plan = parse_plan('```json\n{"steps": [{"id": "s1"}]}\n```')

    assert plan.steps[0].id == "s1"


@pytest.mark.parametrize(
    "response",
    [
        "Sure! Here is the plan: first, check the balance.",
        "",
        '{"plan": [{"id": "s1"}]}',
        '[{"id": "s1"}]',
        '{"steps": []}',
        '{"steps": "s1, s2"}',
        '{"steps": [{"description": "no id"}]}',
        '{"steps": [{"id": "s1"}, {"id": "s1"}]}',
        '{"steps": [{"id": "s1", "parameters": ["not", "a", "mapping"]}]}',
    ],
)
def test_parse_plan_rejects_malformed_responses(response):
    with pytest.raises(PlanParseError, match="Failed to create plan"):
        parse_plan(response)


def _generator(registry=None, response='{"steps": [{"id": "s1"}]}'):
    reasoning = MagicMock()
    reasoning.complete = AsyncMock(return_value=response)
    registry = registry or ToolRegistry()
    return PlanGenerator(registry, reasoning, model="planner-model", networks=["ethereum", "solana"]), reasoning


def test_build_messages_describes_tools_networks_and_context():
    registry = ToolRegistry().register(Tool(name="ipfsStore", handler=lambda p: {}, description="Store data on IPFS"))
    generator, _ = _generator(registry)
    task = Task(
        objective="Archive my profile",
        walletAddress="0x" + "12" * 20,
        parameters={"profile": {"handle": "alice"}},
    )

    system, user = generator.build_messages(task)

    assert system["role"] == "system"
    assert '"steps"' in system["content"]
    content = user["content"]
    assert '"Archive my profile"' in content
    assert "- ipfsStore: Store data on IPFS" in content
    assert "Supported blockchains: ethereum, solana" in content
    assert "0x" + "12" * 20 in content
    assert '"handle": "alice"' in content


def test_build_messages_with_empty_registry():
    generator, _ = _generator()

    _, user = generator.build_messages(Task(objective="Think"))

    assert "- none" in user["content"]
    assert "Wallet address" not in user["content"]


@pytest.mark.asyncio
async def test_create_plan_requests_json_from_configured_model():
    generator, reasoning = _generator()

    plan = await generator.create_plan(Task(objective="Think"))

    assert plan.steps[0].id == "s1"
    reasoning.complete.assert_awaited_once()
    kwargs = reasoning.complete.await_args.kwargs
    assert kwargs == {"model": "planner-model", "temperature": 0.2, "json_mode": True}


@pytest.mark.asyncio
async def test_create_plan_wraps_bad_output():
    generator, _ = _generator(response="no plan today")

    with pytest.raises(PlanParseError):
        await generator.create_plan(Task(objective="Think"))
