# display.py
# All terminal output for the step agent.
#
# This module owns presentation entirely. harness.py never formats output;
# it calls named functions here. Swap this file to change the entire UI.
#
# Colour language:
#   cyan: loop / routing events
#   blue: model calls
#   magenta: START / THINK content
#   yellow: tool calls, parse retries
#   green: success / final output
#   red: failures and halts

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    value = value.replace("\n", " ")
    if len(value) > max_len:
        return value[:max_len] + "…"
    return value


# ---------------------------------------------------------------------------
# Run entry
# ---------------------------------------------------------------------------


def banner(title: str, model: str, tools: list[str]) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]{title}[/bold cyan]\n"
            "[dim]Step protocol: START → THINK → TOOL → OBSERVE → OUTPUT[/dim]\n\n"
            f"[dim]Model :[/dim] [white]{model}[/white]\n"
            f"[dim]Tools :[/dim] [white]{', '.join(tools) or '(none)'}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def prompt_received(prompt: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW REQUEST[/cyan]", style="cyan"))
    console.print(
        Panel(
            Text(prompt, style="white"),
            title=_label("USER PROMPT", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


def calling_model(iteration: int, budget: int) -> None:
    console.print(f"[dim blue]  → model call {iteration}/{budget}…[/dim blue]")


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def step_start(content: str) -> None:
    console.print()
    console.print(_label("START", "magenta"), Text(f" {content}", style="magenta"))


def step_think(content: str) -> None:
    console.print(Text(f"  🧠 {_mono(content, 200)}", style="dim white"))


def tool_call(tool_name: str, input: str, args: list[str]) -> None:
    extra = f", {', '.join(repr(arg) for arg in args)}" if args else ""
    console.print(
        Text("  🛠  ", style="yellow")
        + Text(tool_name, style="bold white")
        + Text(f"({input!r}{extra})", style="dim")
    )


def tool_observation(observation: str, ok: bool) -> None:
    style = "white" if ok else "red"
    console.print(Text("  Observe  ", style="yellow") + Text(_mono(observation, 160), style=style))


def tool_not_found(tool_name: str) -> None:
    console.print(
        Panel(
            Text(f"Tool {tool_name!r} is not registered. Reporting back to the model.", style="bold red"),
            title=_label("TOOL NOT FOUND ✗", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )


def parse_error(reason: str, attempt: int, budget: int) -> None:
    console.print(
        _label(f"PARSE RETRY {attempt}/{budget}", "yellow"),
        Text(f" {_mono(reason, 160)}", style="yellow"),
    )


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def final_result(result: str) -> None:
    console.print()
    console.print(
        Panel(
            Text(result, style="white"),
            title=_label("RESULT", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            Text(reason, style="bold white"),
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()


def serving(urls: list[str]) -> None:
    console.print(
        _label("SERVING", "green"),
        f"[green] {', '.join(urls)}[/green] [dim](press Ctrl+C to stop)[/dim]",
    )


def transcript_saved(path: str) -> None:
    console.print(f"[dim]Transcript saved to {path}[/dim]")
