import json

import pytest
from pydantic import ValidationError

from step_agent.models import Role
from step_agent.transcript import Transcript


def test_system_message_first_and_unique():
    transcript = Transcript("sys")
    transcript.append(Role.USER, "hi")

    assert transcript.messages[0].role is Role.SYSTEM
    with pytest.raises(ValueError):
        transcript.append(Role.SYSTEM, "again")
    assert len(transcript) == 2


def test_no_system_prompt():
    transcript = Transcript()
    assert len(transcript) == 0
    assert transcript.last is None


def test_messages_are_immutable():
    transcript = Transcript("sys")
    message = transcript.append(Role.USER, "hi")
    with pytest.raises(ValidationError):
        message.content = "changed"


def test_messages_view_is_a_copy():
    transcript = Transcript("sys")
    view = transcript.messages
    transcript.append(Role.USER, "hi")
    assert len(view) == 1
    assert len(transcript.messages) == 2


def test_to_wire_maps_observation_role():
    transcript = Transcript("sys")
    transcript.append(Role.USER, "q")
    transcript.append(Role.ASSISTANT, "a")
    transcript.append(Role.OBSERVATION, "o")

    assert [m["role"] for m in transcript.to_wire()] == ["system", "user", "assistant", "user"]
    assert transcript.to_wire("developer")[-1] == {"role": "developer", "content": "o"}


def test_save_writes_json(tmp_path):
    transcript = Transcript("sys")
    transcript.append(Role.USER, "héllo")
    path = tmp_path / "runs" / "run.json"

    transcript.save(str(path))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "héllo"},
    ]
    assert "started_at" in data
