"""Project-wide custom exception types."""


class SchoolEvalError(RuntimeError):
    """Base class for errors raised by the evaluation pipeline."""


class InvalidArgumentError(SchoolEvalError):
    """Raised when a required identifier or value is missing or malformed."""

    def __init__(self, message: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)


class NotFoundError(SchoolEvalError):
    """Raised when the project does not exist or has nothing to analyze."""


class MalformedOutputError(SchoolEvalError, ValueError):
    """Raised when model output does not contain a usable JSON object.

    The offending text is kept on ``raw`` so callers can log it.
    """

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class UpstreamUnavailableError(SchoolEvalError):
    """Raised when the generative-text service cannot be reached in time."""


class InternalError(SchoolEvalError):
    """Raised when aggregation fails unexpectedly (bad source data)."""
