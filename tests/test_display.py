from unittest.mock import patch

from rich.console import Console

from web3_agent import display
from web3_agent.events import Event, EventBus
from web3_agent.models import Plan, Step, TaskResult


def test_attach_renders_a_full_run():
    console = Console(record=True, width=140)
    bus = EventBus()
    plan = Plan(steps=[Step(id="s1", tool="ipfsStore", description="Store profile"), Step(id="s2")])
    result = TaskResult(
        task_id="t1",
        success=True,
        objective="Archive profile",
        summary="Profile pinned as Qm123.",
        results={"s1": {"success": True, "cid": "Qm123"}, "s2": {"success": False, "error": "quota"}},
    )

    with patch.object(display, "console", console):
        unsubscribe = display.attach(bus)
        bus.emit(Event.TASK_START, task_id="t1", objective="Archive profile")
        bus.emit(Event.PLAN_CREATED, task_id="t1", plan=plan)
        bus.emit(Event.STEP_START, step=plan.steps[0])
        bus.emit(Event.STEP_COMPLETE, step=plan.steps[0], result=result.results["s1"])
        bus.emit(Event.STEP_START, step=plan.steps[1])
        bus.emit(Event.STEP_COMPLETE, step=plan.steps[1], result=result.results["s2"])
        bus.emit(Event.TASK_COMPLETE, task_id="t1", result=result)
        unsubscribe()

    text = console.export_text()
    assert "Archive profile" in text
    assert "STEP [1/2]" in text
    assert "STEP [2/2]" in text
    assert "Soft failure" in text
    assert "Profile pinned as Qm123." in text
    assert len(bus) == 0


def test_attach_renders_failures():
    console = Console(record=True, width=140)
    bus = EventBus()
    step = Step(id="s1", tool="missingTool")

    with patch.object(display, "console", console):
        display.attach(bus)
        bus.emit(Event.STEP_FAILED, step=step, error="Tool not found: missingTool")
        bus.emit(Event.TASK_FAILED, task_id="t1", error="Tool not found: missingTool")

    text = console.export_text()
    assert "STEP FAILED" in text
    assert "Task failed: Tool not found: missingTool" in text
