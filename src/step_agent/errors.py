# errors.py
# Exception taxonomy for the step agent.
#
# Only AgentError subclasses end a run. StepParseError is raised per turn and
# is always caught by the loop, which turns it into a corrective message.


class AgentError(Exception):
    """Base class for conditions that abort a run."""


class TransportError(AgentError):
    """Raised when the model endpoint is unreachable or returns an API error."""


class EmptyResponseError(AgentError):
    """Raised when the model returns no content for a turn."""


class ParseRetryExceeded(AgentError):
    """Raised when the model keeps producing invalid steps past the retry budget."""


class IterationBudgetExceeded(AgentError):
    """Raised when max_iterations is reached without an OUTPUT step."""


class StepParseError(ValueError):
    """Raised when a model reply holds no valid step. Recoverable."""


class ToolError(Exception):
    """Raised on registry misuse (duplicate or empty tool names)."""
