import pytest

from step_agent.errors import StepParseError
from step_agent.models import Step, StepKind
from step_agent.parser import parse_steps

THINK = '{"step": "THINK", "content": "compute"}'
TOOL = '{"step": "TOOL", "tool_name": "get_weather", "input": "patiala"}'
OUTPUT = '{"step": "OUTPUT", "content": "4"}'

# ---------------------------------------------------------------------------
# Wrapping tolerance
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        TOOL,
        f"   \n{TOOL}\n\t ",
        f"```json\n{TOOL}\n```",
        f"```\n{TOOL}\n```",
        f"Sure, here is the next step:\n```json\n{TOOL}\n```\nLet me know.",
        f"Calling the tool now: {TOOL} and waiting.",
    ],
)
def test_same_step_regardless_of_wrapping(text):
    steps = parse_steps(text)
    assert steps == [Step(step="TOOL", tool_name="get_weather", input="patiala")]


def test_multiple_fenced_blocks_in_order():
    text = f"```json\n{THINK}\n```\n\n```json\n{TOOL}\n```"
    steps = parse_steps(text)
    assert [s.kind for s in steps] == [StepKind.THINK, StepKind.TOOL]
    assert steps[1].tool_name == "get_weather"


def test_concatenated_objects_without_fences():
    steps = parse_steps(f"{THINK}\n{THINK}{TOOL}")
    assert [s.kind for s in steps] == [StepKind.THINK, StepKind.THINK, StepKind.TOOL]


def test_single_object_mode_returns_first_step():
    steps = parse_steps(f"{THINK}\n{TOOL}", multiple=False)
    assert len(steps) == 1
    assert steps[0].kind is StepKind.THINK


def test_steps_after_output_are_dropped():
    steps = parse_steps(f"{THINK}\n{OUTPUT}\n{TOOL}")
    assert [s.kind for s in steps] == [StepKind.THINK, StepKind.OUTPUT]


def test_non_json_fence_falls_back_to_whole_text():
    text = f"Run this:\n```bash\nls -la\n```\n{TOOL}"
    steps = parse_steps(text)
    assert steps[0].tool_name == "get_weather"


def test_literal_newline_inside_string_is_accepted():
    text = '{"step": "OUTPUT", "content": "line one\nline two"}'
    steps = parse_steps(text)
    assert steps[0].content == "line one\nline two"


# ---------------------------------------------------------------------------
# Field handling
# ---------------------------------------------------------------------------


def test_lowercase_step_is_normalised():
    steps = parse_steps('{"step": "think", "content": "hmm"}')
    assert steps[0].kind is StepKind.THINK


def test_args_scalars_are_coerced_to_text():
    text = '{"step": "TOOL", "tool_name": "start_local_server", "input": "site", "args": [8080, true]}'
    step = parse_steps(text)[0]
    assert step.args == ["8080", "True"]


def test_extra_keys_are_ignored():
    step = parse_steps('{"step": "THINK", "content": "x", "confidence": 0.9}')[0]
    assert step.content == "x"


def test_wire_form_uses_protocol_field_names():
    step = parse_steps(TOOL)[0]
    assert '"step":"TOOL"' in step.to_wire()
    assert '"tool_name":"get_weather"' in step.to_wire()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "The weather is nice today.",
        "{broken: json}",
        "```json\n{\"step\": \"THINK\", \"content\": \n```",
        "[1, 2, 3]",
        pytest.param('{"step": "THINK", "content": ' + "[" * 100000 + "]" * 100000 + "}", id="deeply-nested"),
    ],
)
def test_malformed_input_raises_step_parse_error(text):
    with pytest.raises(StepParseError):
        parse_steps(text)


@pytest.mark.parametrize(
    "text",
    [
        '{"content": "no step field"}',
        '{"step": "DANCE", "content": "unknown kind"}',
        '{"step": "TOOL", "input": "patiala"}',
        '{"step": "TOOL", "tool_name": "get_weather"}',
        '{"step": "TOOL", "tool_name": "  ", "input": "x"}',
        '{"step": "TOOL", "tool_name": "t", "input": "x", "args": "not-a-list"}',
        '{"step": "TOOL", "tool_name": "t", "input": "x", "args": [{"nested": 1}]}',
    ],
)
def test_invalid_step_raises_step_parse_error(text):
    with pytest.raises(StepParseError):
        parse_steps(text)


def test_invalid_object_in_batch_fails_whole_turn():
    with pytest.raises(StepParseError, match="tool_name"):
        parse_steps(f'{THINK}\n{{"step": "TOOL", "input": "x"}}')


def test_none_input_raises_step_parse_error():
    with pytest.raises(StepParseError):
        parse_steps(None)
