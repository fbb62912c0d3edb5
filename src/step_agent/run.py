# run.py
# Entry point. Config and wiring only. No logic lives here.
#
#   step-agent ask "What's the weather in Patiala?"
#   step-agent clone https://example.com

import sys

import click

from step_agent import display, server
from step_agent.config import load_agent_config, load_gateway_config
from step_agent.errors import AgentError
from step_agent.gateway import ModelGateway
from step_agent.harness import AgentLoop
from step_agent.prompts import ASSISTANT_PROMPT, CLONER_PROMPT, build_system_prompt, clone_request
from step_agent.tools import ToolRegistry, assistant_registry, cloner_registry


def _loop_options(func):
    func = click.option("--model", default=None, help="Model identifier (default: $STEP_AGENT_MODEL).")(func)
    func = click.option(
        "--max-iterations", type=click.IntRange(min=1), default=None,
        help="Model turns allowed before giving up (default: $STEP_AGENT_MAX_ITERATIONS or 25).",
    )(func)
    func = click.option(
        "--max-retries", type=click.IntRange(min=0), default=None,
        help="Consecutive invalid replies tolerated (default: $STEP_AGENT_MAX_RETRIES or 3).",
    )(func)
    func = click.option("--json-mode/--no-json-mode", default=False, help="Ask the endpoint for JSON output.")(func)
    func = click.option(
        "--transcript", "transcript_path", type=click.Path(dir_okay=False), default=None,
        help="Write the run's transcript to this JSON file.",
    )(func)
    return func


def _run_agent(
    title: str,
    template: str,
    registry: ToolRegistry,
    user_message: str,
    model: str | None,
    max_iterations: int | None,
    max_retries: int | None,
    json_mode: bool,
    transcript_path: str | None,
) -> str:
    try:
        gateway_config = load_gateway_config(model=model, json_mode=json_mode or None)
        agent_config = load_agent_config(max_iterations=max_iterations, max_parse_retries=max_retries)
        gateway = ModelGateway(gateway_config)
    except ValueError as exc:
        display.halt(str(exc))
        sys.exit(1)

    display.banner(title, gateway_config.model, registry.names)
    loop = AgentLoop(gateway, registry, agent_config)
    try:
        return loop.run(build_system_prompt(template, registry), user_message)
    except AgentError:
        sys.exit(1)
    except KeyboardInterrupt:
        display.halt("Interrupted.")
        sys.exit(130)
    finally:
        if transcript_path and loop.session is not None:
            display.transcript_saved(loop.session.transcript.save(transcript_path))


@click.group()
def cli() -> None:
    """Tool-calling agent over an OpenAI-compatible chat endpoint."""


@cli.command()
@click.argument("query")
@_loop_options
def ask(query, model, max_iterations, max_retries, json_mode, transcript_path):
    """Answer QUERY using the shell, HTTP, weather and GitHub tools."""
    _run_agent(
        "Step Agent", ASSISTANT_PROMPT, assistant_registry(), query,
        model, max_iterations, max_retries, json_mode, transcript_path,
    )


@cli.command()
@click.argument("url")
@click.option("--output-dir", default=None, help="Where to save the clone (default: chosen by the model).")
@click.option("--serve/--no-serve", default=True, help="Keep serving the clone after the run.")
@_loop_options
def clone(url, output_dir, serve, model, max_iterations, max_retries, json_mode, transcript_path):
    """Clone the UI of the website at URL and serve it locally."""
    try:
        _run_agent(
            "AI Website UI Cloner", CLONER_PROMPT, cloner_registry(), clone_request(url, output_dir),
            model, max_iterations, max_retries, json_mode, transcript_path,
        )
        urls = server.running_servers()
        if serve and urls:
            display.serving(urls)
            server.wait_for_servers()
    except KeyboardInterrupt:
        display.halt("Stopped.")
    finally:
        server.stop_servers()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
