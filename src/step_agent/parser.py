# parser.py
# Step extraction from raw model text.
#
# Models wrap their JSON in ``` fences, add prose around it, or concatenate
# several objects in one reply. parse_steps() tolerates all of that and either
# returns validated Steps or raises StepParseError. Nothing else escapes.

import json
import re

from pydantic import ValidationError

from step_agent.errors import StepParseError
from step_agent.models import Step

_FENCE = re.compile(r"```[ \t]*(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_DECODER = json.JSONDecoder(strict=False)


def _candidates(text: str) -> list[str]:
    """Fenced block bodies in order, or the whole text when there are none."""
    blocks = [body.strip() for body in _FENCE.findall(text)]
    blocks = [body for body in blocks if body]
    if blocks:
        return blocks
    return [text.strip()]


def _scan_objects(candidate: str) -> list[dict]:
    """Decode every top-level JSON object found in the candidate string."""
    objects: list[dict] = []
    index = candidate.find("{")
    while index != -1:
        try:
            value, end = _DECODER.raw_decode(candidate, index)
        except (json.JSONDecodeError, RecursionError):
            index = candidate.find("{", index + 1)
            continue
        if isinstance(value, dict):
            objects.append(value)
        index = candidate.find("{", end)
    return objects


def parse_steps(text: str, multiple: bool = True) -> list[Step]:
    """
    Parse one model reply into Steps.

    With multiple=False only the first valid step is returned. Steps that
    follow an OUTPUT step are dropped. Raises StepParseError when the reply
    contains no JSON object, or when any decoded object is not a valid Step.
    """
    if text is None or not text.strip():
        raise StepParseError("Response was empty.")

    objects: list[dict] = []
    for candidate in _candidates(text):
        objects.extend(_scan_objects(candidate))

    # Fences held something other than JSON; the step may sit outside them.
    if not objects:
        objects = _scan_objects(text)

    if not objects:
        raise StepParseError("Response did not contain a JSON object.")

    steps: list[Step] = []
    for obj in objects:
        try:
            step = Step.model_validate(obj)
        except ValidationError as exc:
            errors = "; ".join(err["msg"] for err in exc.errors())
            raise StepParseError(f"Invalid step {json.dumps(obj)[:200]}: {errors}") from exc

        steps.append(step)
        if step.is_terminal or not multiple:
            break

    return steps
