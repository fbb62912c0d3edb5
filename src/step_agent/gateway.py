# gateway.py
# The only module that talks to the model endpoint.
#
# One blocking chat-completions call per turn. The full transcript is sent
# every time; the endpoint keeps no session state for us.

import openai
from openai import OpenAI

from step_agent.config import GatewayConfig
from step_agent.errors import TransportError


class ModelGateway:
    """
    Thin wrapper around an OpenAI-compatible client.

    Example:
        gateway = ModelGateway(GatewayConfig(api_key="...", model="gemini-2.0-flash"))
        text = gateway.complete([{"role": "user", "content": "hi"}])
    """

    def __init__(self, config: GatewayConfig, client: OpenAI | None = None) -> None:
        self.config = config
        if client is None and not config.api_key:
            raise ValueError("GEMINI_API_KEY must be provided either in GatewayConfig or the environment")
        self._client = client or OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    @property
    def observation_role(self) -> str:
        return self.config.observation_role

    def complete(self, messages: list[dict]) -> str:
        """Return the assistant's raw text, or "" when it sent no content."""
        kwargs: dict = {"model": self.config.model, "messages": messages}
        if self.config.temperature is not None:
            kwargs["temperature"] = self.config.temperature
        if self.config.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            raise TransportError(f"Model call failed: {exc}") from exc

        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()
