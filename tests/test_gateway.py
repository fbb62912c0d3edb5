from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from step_agent.config import GatewayConfig
from step_agent.errors import TransportError
from step_agent.gateway import ModelGateway

MESSAGES = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]


def _client(content):
    client = MagicMock()
    message = SimpleNamespace(content=content)
    client.chat.completions.create.return_value = SimpleNamespace(choices=[SimpleNamespace(message=message)])
    return client


def test_complete_returns_stripped_content():
    client = _client('  {"step": "THINK"}\n')
    gateway = ModelGateway(GatewayConfig(model="gemini-test"), client=client)

    assert gateway.complete(MESSAGES) == '{"step": "THINK"}'
    client.chat.completions.create.assert_called_once_with(model="gemini-test", messages=MESSAGES)


def test_optional_request_fields():
    client = _client("{}")
    config = GatewayConfig(model="m", temperature=0.7, json_mode=True)
    ModelGateway(config, client=client).complete(MESSAGES)

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["temperature"] == 0.7
    assert kwargs["response_format"] == {"type": "json_object"}


def test_none_content_becomes_empty_string():
    gateway = ModelGateway(GatewayConfig(), client=_client(None))
    assert gateway.complete(MESSAGES) == ""


def test_no_choices_becomes_empty_string():
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(choices=[])
    assert ModelGateway(GatewayConfig(), client=client).complete(MESSAGES) == ""


def test_api_errors_become_transport_errors():
    client = MagicMock()
    request = httpx.Request("POST", "https://example.test/chat/completions")
    client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
    gateway = ModelGateway(GatewayConfig(), client=client)

    with pytest.raises(TransportError, match="Model call failed"):
        gateway.complete(MESSAGES)


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        ModelGateway(GatewayConfig(api_key=None))


def test_builds_client_from_config():
    gateway = ModelGateway(GatewayConfig(api_key="k", base_url="https://example.test/v1/"))
    assert str(gateway._client.base_url) == "https://example.test/v1/"
    assert gateway.observation_role == "user"
