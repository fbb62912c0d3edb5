# models.py
# Data contracts for the step agent.
# No business logic lives here: pure schema and validation.

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Role(str, Enum):
    """Transcript roles. OBSERVATION is mapped to a wire role by the gateway."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    OBSERVATION = "observation"


class StepKind(str, Enum):
    START = "START"
    THINK = "THINK"
    TOOL = "TOOL"
    OBSERVE = "OBSERVE"
    OUTPUT = "OUTPUT"


class Message(BaseModel):
    """A single transcript entry. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Step(BaseModel):
    """One unit of the model's step protocol, as parsed from its reply."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: StepKind = Field(..., alias="step", description="Protocol step type.")
    content: str | None = Field(default=None, description="Free text for START/THINK/OUTPUT.")
    tool_name: str | None = Field(default=None, description="Registry key for TOOL steps.")
    input: str | None = Field(default=None, description="Primary tool input.")
    args: list[str] = Field(default_factory=list, description="Extra positional tool arguments.")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("content", "input", mode="before")
    @classmethod
    def _scalar_to_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value

    @field_validator("args", mode="before")
    @classmethod
    def _coerce_args(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("args must be a list")
        coerced = []
        for item in value:
            if isinstance(item, (dict, list)):
                raise ValueError("args items must be scalar values")
            coerced.append(item if isinstance(item, str) else str(item))
        return coerced

    @model_validator(mode="after")
    def _check_tool_fields(self) -> "Step":
        if self.kind is StepKind.TOOL:
            if not (self.tool_name or "").strip():
                raise ValueError("TOOL step requires 'tool_name'")
            if self.input is None:
                raise ValueError("TOOL step requires 'input'")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.kind is StepKind.OUTPUT

    def to_wire(self) -> str:
        """Canonical JSON form, using the protocol's field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ToolInvocation(BaseModel):
    """Log entry produced after each tool dispatch."""

    tool_name: str
    input: str
    args: list[str] = Field(default_factory=list)
    observation: str = Field(default="", description="Text fed back to the model.")
    ok: bool = Field(default=True, description="False when the tool raised.")
