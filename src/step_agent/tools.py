# tools.py
# Tool registry and the builtin tool implementations.
#
# Every tool takes a primary text input plus optional positional string args
# and returns text. The loop only ever goes through ToolRegistry.invoke();
# it never calls these functions directly.

import json
import subprocess
from dataclasses import dataclass
from typing import Callable, Iterator

from step_agent import cloner, server
from step_agent.errors import ToolError

COMMAND_TIMEOUT = 120
MAX_BODY_CHARS = 4000


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    function: Callable[..., str]
    usage: str = ""

    def invoke(self, input: str, *args: str) -> str:
        result = self.function(input, *args)
        return result if isinstance(result, str) else str(result)


class ToolRegistry:
    """Name → Tool mapping. Names are unique."""

    def __init__(self, tools: list[Tool] | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> Tool:
        if not tool.name or not tool.name.strip():
            raise ToolError("Tool name must not be empty.")
        if tool.name in self._tools:
            raise ToolError(f"Tool '{tool.name}' is already registered.")
        self._tools[tool.name] = tool
        return tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def invoke(self, name: str, input: str, *args: str) -> str:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolError(f"Tool '{name}' is not registered.")
        return tool.invoke(input, *args)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def describe(self) -> str:
        """One line per tool, for the system prompt."""
        lines = []
        for tool in self._tools.values():
            signature = tool.usage or f"{tool.name}(input: string)"
            lines.append(f"- {signature}: {tool.description}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Builtin tools
# ---------------------------------------------------------------------------


def _truncate(text: str, limit: int = MAX_BODY_CHARS) -> str:
    return text[:limit] + "\n…[truncated]" if len(text) > limit else text


def _tool_execute_command(command: str, *args: str) -> str:
    command = (command or "").strip()
    if not command:
        return "Error: no command provided."
    try:
        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            timeout=COMMAND_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        return f"Error: command timed out after {COMMAND_TIMEOUT}s."

    if completed.returncode != 0:
        detail = completed.stderr.strip() or completed.stdout.strip()
        return _truncate(f"Error running command (exit {completed.returncode}): {detail}")
    return _truncate(completed.stdout) or "(no output)"


def _tool_fetch_url(url: str, *args: str) -> str:
    import httpx
    url = (url or "").strip()
    if not url:
        return "Error: no URL provided."
    try:
        response = httpx.get(url, follow_redirects=True, timeout=15)
    except httpx.HTTPError as e:
        return f"Fetch failed: {e}"
    return _truncate(f"GET {url} → {response.status_code}\n{response.text}")


def _tool_get_weather(city: str, *args: str) -> str:
    import httpx
    city = (city or "").strip()
    if not city:
        return "Error: no city provided."
    url = f"https://wttr.in/{city.lower()}?format=%C+%t"
    try:
        response = httpx.get(url, timeout=10)
        response.raise_for_status()
    except httpx.HTTPError as e:
        return f"Weather lookup failed: {e}"
    return f"The current weather of {city} is {response.text.strip()}"


def _tool_get_github_user(username: str, *args: str) -> str:
    import httpx
    username = (username or "").strip()
    if not username:
        return "Error: no username provided."
    try:
        response = httpx.get(f"https://api.github.com/users/{username}", timeout=10)
    except httpx.HTTPError as e:
        return f"GitHub lookup failed: {e}"
    if response.status_code == 404:
        return f"No GitHub user named {username!r}."
    if response.status_code != 200:
        return f"GitHub lookup failed: HTTP {response.status_code}"

    data = response.json()
    fields = ("login", "name", "bio", "company", "location", "public_repos", "followers", "following")
    return json.dumps({key: data.get(key) for key in fields})


def _tool_clone_website(url: str, *args: str) -> str:
    url = (url or "").strip()
    if not url:
        return "Error: URL is required."
    output_dir = args[0] if args and args[0].strip() else cloner.default_output_dir(url)
    return cloner.clone_website(url, output_dir)


def _tool_start_local_server(directory: str, *args: str) -> str:
    directory = (directory or "").strip()
    if not directory:
        return "Error: directory is required."
    port = server.DEFAULT_PORT
    if args and str(args[0]).strip():
        try:
            port = int(args[0])
        except ValueError:
            return f"Error: port must be a number, got {args[0]!r}."
    return server.start_local_server(directory, port)


EXECUTE_COMMAND = Tool(
    name="execute_command",
    description="Runs a linux/unix shell command on the user's machine and returns its output.",
    function=_tool_execute_command,
    usage="execute_command(input: command string)",
)
FETCH_URL = Tool(
    name="fetch_url",
    description="Fetches a URL over HTTP GET and returns the status and body text.",
    function=_tool_fetch_url,
    usage="fetch_url(input: url)",
)
GET_WEATHER = Tool(
    name="get_weather",
    description="Returns the current weather of a city.",
    function=_tool_get_weather,
    usage="get_weather(input: city name)",
)
GET_GITHUB_USER = Tool(
    name="get_github_user",
    description="Returns public profile info about a GitHub user.",
    function=_tool_get_github_user,
    usage="get_github_user(input: username)",
)
CLONE_WEBSITE = Tool(
    name="clone_website",
    description=(
        "Captures a website's rendered HTML and its assets into a local directory, "
        "rewriting asset URLs to local relative paths."
    ),
    function=_tool_clone_website,
    usage="clone_website(input: url, args: [output_dir])",
)
START_LOCAL_SERVER = Tool(
    name="start_local_server",
    description="Serves a directory of static files on http://localhost.",
    function=_tool_start_local_server,
    usage="start_local_server(input: directory, args: [port])",
)


def assistant_registry() -> ToolRegistry:
    """Tools for the general assistant (ask command)."""
    return ToolRegistry([EXECUTE_COMMAND, FETCH_URL, GET_WEATHER, GET_GITHUB_USER])


def cloner_registry() -> ToolRegistry:
    """Tools for the website cloner (clone command)."""
    return ToolRegistry([CLONE_WEBSITE, START_LOCAL_SERVER, EXECUTE_COMMAND])


def default_registry() -> ToolRegistry:
    return ToolRegistry(
        [EXECUTE_COMMAND, FETCH_URL, GET_WEATHER, GET_GITHUB_USER, CLONE_WEBSITE, START_LOCAL_SERVER]
    )
