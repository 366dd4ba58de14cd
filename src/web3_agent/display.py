# display.py
# All terminal output for the agent.
#
# This module owns presentation entirely. agent.py never formats strings;
# attach() subscribes one observer to an EventBus and renders each
# lifecycle event. Swap this file to change the entire UI.
#
# Colour language:
#   cyan    - lifecycle / routing events
#   magenta - tool calls and reasoning output
#   green   - success
#   yellow  - soft failures
#   red     - hard failures and halts

import json
from collections.abc import Callable
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from web3_agent.events import Event, EventBus
from web3_agent.models import Plan, Step, StepResult, TaskResult

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


def _brief(result: StepResult) -> str:
    if "reasoning" in result:
        return str(result["reasoning"])
    if not result.get("success", True):
        return str(result.get("error", "failed"))
    shown = {key: value for key, value in result.items() if key != "success"}
    return json.dumps(shown, default=str)


# ---------------------------------------------------------------------------
# Pipeline entry
# ---------------------------------------------------------------------------


def banner(name: str, reasoning_model: str, execution_model: str, networks: list[str]) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]{name}[/bold cyan]\n"
            "[dim]Plan-then-execute agent over a registry of Web3 tools[/dim]\n\n"
            f"[dim]Reasoning model :[/dim] [white]{reasoning_model}[/white]\n"
            f"[dim]Execution model :[/dim] [white]{execution_model}[/white]\n"
            f"[dim]Networks        :[/dim] [white]{', '.join(networks)}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def task_start(task_id: str, objective: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW TASK[/cyan]", style="cyan"))
    console.print(
        Panel(
            f"[white]{objective}[/white]",
            title=_label("OBJECTIVE", "cyan"),
            subtitle=f"[dim]{task_id}[/dim]",
            border_style="cyan",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Plan display
# ---------------------------------------------------------------------------


def plan_created(plan: Plan) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="cyan",
        show_header=True,
        header_style="bold cyan",
        padding=(0, 1),
    )
    table.add_column("ID", justify="center", width=6)
    table.add_column("Tool", style="bold white", width=18)
    table.add_column("Parameters", style="dim white", width=32)
    table.add_column("Description", style="white")

    for step in plan.steps:
        table.add_row(
            step.id,
            step.tool or "[dim]reasoning[/dim]",
            _mono(json.dumps(step.parameters, default=str), 30),
            step.description,
        )

    console.print(
        Panel(
            table,
            title=_label("PLAN", "cyan"),
            subtitle=f"[dim]{len(plan.steps)} step(s)[/dim]",
            border_style="cyan",
            padding=(0, 1),
        )
    )
    console.print(Rule(f"[cyan]EXECUTION, {len(plan.steps)} step(s)[/cyan]", style="cyan"))


# ---------------------------------------------------------------------------
# Execution loop
# ---------------------------------------------------------------------------


def step_start(index: int, total: int, step: Step) -> None:
    console.print()
    position = f"{index}/{total}" if total else str(index)
    console.print(
        f"[bold cyan]  STEP [{position}][/bold cyan]  [white]{step.description or step.id}[/white]"
    )
    if step.tool:
        console.print(
            f"  [magenta]Tool[/magenta]     [bold white]{step.tool}[/bold white]"
            f"  [dim]{_mono(json.dumps(step.parameters, default=str), 100)}[/dim]"
        )
    else:
        console.print("  [magenta]Reason[/magenta]   [dim]no tool, asking the reasoning service[/dim]")


def step_complete(step: Step, result: StepResult) -> None:
    if result.get("success", True):
        console.print(f"  [bold green]✓ Done[/bold green]     [white]{_mono(_brief(result), 140)}[/white]")
    else:
        console.print(
            f"  [bold yellow]! Soft failure[/bold yellow]  [white]{_mono(_brief(result), 140)}[/white]"
        )


def step_failed(step: Step, error: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold red]Step {step.id!r} failed.[/bold red]\n\n[white]{error}[/white]\n"
            "[dim]Remaining steps will not run.[/dim]",
            title=_label("STEP FAILED ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def task_complete(result: TaskResult) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("Step", justify="center", width=6)
    table.add_column("OK", justify="center", width=4)
    table.add_column("Result", style="dim white")

    for step_id, step_result in result.results.items():
        ok = (
            "[bold green]✓[/bold green]"
            if step_result.get("success", True)
            else "[bold yellow]✗[/bold yellow]"
        )
        table.add_row(step_id, ok, _mono(_brief(step_result), 60))

    console.print(Panel(table, title="[dim]STEP RESULTS[/dim]", border_style="dim", padding=(0, 1)))
    console.print(
        Panel(
            f"[white]{result.summary}[/white]",
            title=_label("SUMMARY", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{reason}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()


# ---------------------------------------------------------------------------
# Event wiring
# ---------------------------------------------------------------------------


def attach(bus: EventBus) -> Callable[[], None]:
    """Render every lifecycle event on `bus`. Returns the unsubscribe function."""
    progress: dict[str, int] = {"index": 0, "total": 0}

    def _observer(event: Event, payload: dict[str, Any]) -> None:
        if event is Event.TASK_START:
            progress.update(index=0, total=0)
            task_start(payload["task_id"], payload["objective"])
        elif event is Event.PLAN_CREATED:
            progress["total"] = len(payload["plan"].steps)
            plan_created(payload["plan"])
        elif event is Event.STEP_START:
            progress["index"] += 1
            step_start(progress["index"], progress["total"], payload["step"])
        elif event is Event.STEP_COMPLETE:
            step_complete(payload["step"], payload["result"])
        elif event is Event.STEP_FAILED:
            step_failed(payload["step"], payload["error"])
        elif event is Event.TASK_COMPLETE:
            task_complete(payload["result"])
        elif event is Event.TASK_FAILED:
            halt(f"Task failed: {payload['error']}")

    return bus.subscribe(None, _observer)
