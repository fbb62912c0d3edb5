# harness.py
# Step Agent Loop
#
# The loop is the kernel. The model is a stateless responder. This class
# owns all control flow, the transcript, tool dispatch and the budgets.
#
# Control flow (one turn):
#   budget check → model call → parse → { START/THINK: show
#                                         TOOL: dispatch → observation
#                                         OUTPUT: return
#                                         invalid: correction → retry }
#
# All terminal output is delegated to display.py.

import json
from dataclasses import dataclass, field
from enum import Enum

from step_agent import display
from step_agent.config import AgentConfig
from step_agent.errors import (
    EmptyResponseError,
    IterationBudgetExceeded,
    ParseRetryExceeded,
    StepParseError,
    TransportError,
)
from step_agent.gateway import ModelGateway
from step_agent.models import Role, Step, StepKind, ToolInvocation
from step_agent.parser import parse_steps
from step_agent.prompts import CORRECTION
from step_agent.tools import ToolRegistry
from step_agent.transcript import Transcript


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    HAVE_STEP = "have_step"
    TERMINATED = "terminated"


@dataclass
class Session:
    """Per-run state. Only AgentLoop mutates it."""

    transcript: Transcript
    iteration: int = 0
    parse_retries: int = 0
    state: LoopState = LoopState.AWAITING_MODEL
    output: str | None = None
    invocations: list[ToolInvocation] = field(default_factory=list)

    @property
    def terminal(self) -> bool:
        return self.state is LoopState.TERMINATED


def _observation(content: str) -> str:
    return json.dumps({"step": StepKind.OBSERVE.value, "content": content}, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Loop
# ---------------------------------------------------------------------------


class AgentLoop:
    """
    Single-threaded tool-calling loop.

    Example:
        loop = AgentLoop(ModelGateway(load_gateway_config()), assistant_registry())
        answer = loop.run(system_prompt, "What's the weather in Patiala?")

    The most recent Session stays on ``self.session`` after run() returns or
    raises, so the transcript can be inspected or saved.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        registry: ToolRegistry,
        config: AgentConfig | None = None,
    ) -> None:
        self.gateway = gateway
        self.registry = registry
        self.config = config or AgentConfig()
        self.session: Session | None = None

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, system_prompt: str, user_message: str, max_iterations: int | None = None) -> str:
        """
        Drive the model until it emits OUTPUT and return that content.

        Raises IterationBudgetExceeded, ParseRetryExceeded, EmptyResponseError
        or TransportError. Tool failures and unknown tools never raise.
        A max_iterations below 1 is rejected with ValueError.
        """
        budget = self.config.max_iterations if max_iterations is None else max_iterations
        if budget < 1:
            raise ValueError(f"max_iterations must be at least 1, got {budget}")
        transcript = Transcript(system_prompt)
        transcript.append(Role.USER, user_message)
        session = Session(transcript=transcript)
        self.session = session

        display.prompt_received(user_message)

        while not session.terminal:
            if session.iteration >= budget:
                msg = f"Iteration budget of {budget} exhausted without an OUTPUT step."
                display.halt(msg)
                raise IterationBudgetExceeded(msg)

            raw = self._call_model(session, budget)
            session.state = LoopState.HAVE_STEP

            try:
                steps = parse_steps(raw, multiple=self.config.allow_multiple_steps)
            except StepParseError as exc:
                self._handle_parse_error(session, raw, exc)
                session.state = LoopState.AWAITING_MODEL
                continue

            session.parse_retries = 0
            session.iteration += 1

            if len(steps) == 1:
                transcript.append(Role.ASSISTANT, raw)
                self._handle_step(session, steps[0])
            else:
                for step in steps:
                    transcript.append(Role.ASSISTANT, step.to_wire())
                    self._handle_step(session, step)
                    if session.terminal:
                        break

            if not session.terminal:
                session.state = LoopState.AWAITING_MODEL

        display.final_result(session.output)
        return session.output

    # ------------------------------------------------------------------
    # Turn handling
    # ------------------------------------------------------------------

    def _call_model(self, session: Session, budget: int) -> str:
        display.calling_model(session.iteration + 1, budget)
        try:
            raw = self.gateway.complete(session.transcript.to_wire(self.gateway.observation_role))
        except TransportError as exc:
            display.halt(str(exc))
            raise

        if raw is None or not raw.strip():
            msg = "The model returned an empty response. Ending the run."
            display.halt(msg)
            raise EmptyResponseError(msg)
        return raw

    def _handle_parse_error(self, session: Session, raw: str, exc: StepParseError) -> None:
        session.parse_retries += 1
        budget = self.config.max_parse_retries
        display.parse_error(str(exc), session.parse_retries, budget)

        session.transcript.append(Role.ASSISTANT, raw)
        if session.parse_retries > budget:
            msg = f"Model produced {session.parse_retries} invalid responses in a row."
            display.halt(msg)
            raise ParseRetryExceeded(msg) from exc

        session.transcript.append(Role.OBSERVATION, CORRECTION.format(reason=exc))

    def _handle_step(self, session: Session, step: Step) -> None:
        if step.kind is StepKind.START:
            display.step_start(step.content or "")
        elif step.kind in (StepKind.THINK, StepKind.OBSERVE):
            # OBSERVE is injected by the loop; if the model sends one, it's just thinking.
            display.step_think(step.content or "")
        elif step.kind is StepKind.TOOL:
            self._dispatch_tool(session, step)
        elif step.kind is StepKind.OUTPUT:
            session.output = step.content or ""
            session.state = LoopState.TERMINATED

    def _dispatch_tool(self, session: Session, step: Step) -> None:
        name = step.tool_name
        display.tool_call(name, step.input, step.args)

        if name not in self.registry:
            display.tool_not_found(name)
            session.transcript.append(Role.OBSERVATION, _observation(f"There is no such tool as {name}"))
            return

        try:
            observation = self.registry.invoke(name, step.input, *step.args)
            ok = True
        except Exception as exc:
            observation = f"Error: {type(exc).__name__}: {exc}"
            ok = False

        display.tool_observation(observation, ok)
        session.invocations.append(
            ToolInvocation(tool_name=name, input=step.input, args=list(step.args), observation=observation, ok=ok)
        )
        session.transcript.append(Role.OBSERVATION, _observation(observation))
