# transcript.py
# Append-only conversation history. The model is stateless, so this is the
# agent's entire memory and is resent in full on every call.

import json
import os
from datetime import datetime
from typing import Iterator

from step_agent.models import Message, Role


class Transcript:
    """
    Ordered, append-only sequence of Messages.

    The system message, when given, is always first and can't be appended
    again later. Messages are never edited or removed.
    """

    def __init__(self, system_prompt: str | None = None) -> None:
        self._messages: list[Message] = []
        self.started_at = datetime.now().isoformat()
        if system_prompt:
            self._messages.append(Message(role=Role.SYSTEM, content=system_prompt))

    def append(self, role: Role, content: str) -> Message:
        if role is Role.SYSTEM:
            raise ValueError("The system message can only be set when the transcript is created.")
        message = Message(role=role, content=content)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def to_wire(self, observation_role: str = "user") -> list[dict]:
        """Chat-completions message list; observations use observation_role."""
        wire: list[dict] = []
        for message in self._messages:
            role = observation_role if message.role is Role.OBSERVATION else message.role.value
            wire.append({"role": role, "content": message.content})
        return wire

    def save(self, path: str) -> str:
        """Write the transcript to a JSON file and return the path."""
        data = {
            "started_at": self.started_at,
            "saved_at": datetime.now().isoformat(),
            "messages": [message.model_dump(mode="json") for message in self._messages],
        }
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
        return path
