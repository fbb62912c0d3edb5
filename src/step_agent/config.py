# config.py
# Run configuration. Values come from the environment (optionally a .env
# file) and are passed explicitly into the gateway and the loop; nothing is
# constructed at import time.

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.0-flash"


class GatewayConfig(BaseModel):
    """Connection settings for an OpenAI-compatible chat endpoint."""

    api_key: str | None = Field(default=None, description="Endpoint API key.")
    base_url: str = Field(default=GEMINI_OPENAI_BASE_URL)
    model: str = Field(default=DEFAULT_MODEL)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    json_mode: bool = Field(default=False, description="Send response_format=json_object.")
    timeout: float = Field(default=60.0, gt=0)
    observation_role: str = Field(
        default="user",
        description="Wire role used for tool observations and corrections.",
    )


class AgentConfig(BaseModel):
    """Loop budgets."""

    max_iterations: int = Field(default=25, ge=1)
    max_parse_retries: int = Field(default=3, ge=0)
    allow_multiple_steps: bool = Field(
        default=True,
        description="Process every step in a reply instead of only the first.",
    )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def load_gateway_config(**overrides) -> GatewayConfig:
    load_dotenv()
    values = {
        "api_key": os.getenv("GEMINI_API_KEY"),
        "base_url": os.getenv("STEP_AGENT_BASE_URL", GEMINI_OPENAI_BASE_URL),
        "model": os.getenv("STEP_AGENT_MODEL", DEFAULT_MODEL),
        "observation_role": os.getenv("STEP_AGENT_OBSERVATION_ROLE", "user"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return GatewayConfig(**values)


def load_agent_config(**overrides) -> AgentConfig:
    load_dotenv()
    values = {
        "max_iterations": _env_int("STEP_AGENT_MAX_ITERATIONS", 25),
        "max_parse_retries": _env_int("STEP_AGENT_MAX_RETRIES", 3),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return AgentConfig(**values)
