import pytest
from pydantic import ValidationError

from step_agent import config
from step_agent.config import AgentConfig, load_agent_config, load_gateway_config


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in (
        "GEMINI_API_KEY",
        "STEP_AGENT_BASE_URL",
        "STEP_AGENT_MODEL",
        "STEP_AGENT_MAX_ITERATIONS",
        "STEP_AGENT_MAX_RETRIES",
        "STEP_AGENT_OBSERVATION_ROLE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    gateway = load_gateway_config()
    agent = load_agent_config()

    assert gateway.api_key is None
    assert gateway.base_url == config.GEMINI_OPENAI_BASE_URL
    assert gateway.model == config.DEFAULT_MODEL
    assert gateway.observation_role == "user"
    assert agent.max_iterations == 25
    assert agent.max_parse_retries == 3


def test_environment_values(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.setenv("STEP_AGENT_MODEL", "gemini-x")
    monkeypatch.setenv("STEP_AGENT_OBSERVATION_ROLE", "developer")
    monkeypatch.setenv("STEP_AGENT_MAX_ITERATIONS", "10")
    monkeypatch.setenv("STEP_AGENT_MAX_RETRIES", "0")

    gateway = load_gateway_config()
    agent = load_agent_config()

    assert gateway.api_key == "secret"
    assert gateway.model == "gemini-x"
    assert gateway.observation_role == "developer"
    assert agent.max_iterations == 10
    assert agent.max_parse_retries == 0


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("STEP_AGENT_MODEL", "from-env")
    assert load_gateway_config(model="from-cli").model == "from-cli"
    assert load_gateway_config(model=None).model == "from-env"
    assert load_agent_config(max_iterations=3, max_parse_retries=None).max_iterations == 3


def test_bad_integer_env(monkeypatch):
    monkeypatch.setenv("STEP_AGENT_MAX_ITERATIONS", "lots")
    with pytest.raises(ValueError, match="STEP_AGENT_MAX_ITERATIONS"):
        load_agent_config()


def test_budgets_validated():
    with pytest.raises(ValidationError):
        AgentConfig(max_iterations=0)
    with pytest.raises(ValidationError):
        AgentConfig(max_parse_retries=-1)
