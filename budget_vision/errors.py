"""Error taxonomy for the orchestration layer."""


class BudgetVisionError(Exception):
    """Base for every error raised by budget_vision."""


class DisposedError(BudgetVisionError):
    """Operation attempted after teardown."""

    def __init__(self, name: str = "AnalysisOrchestrator") -> None:
        super().__init__(f"{name} has been disposed")


class TransientError(BudgetVisionError):
    """Remote failure that may succeed on retry (timeout, transport)."""


class FatalError(BudgetVisionError):
    """Remote failure that retrying cannot fix (bad input, credentials)."""


class RetryExhaustedError(BudgetVisionError):

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Retry attempts exhausted after {attempts} tries: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class InitializationError(BudgetVisionError, ValueError):
    """Missing or invalid configuration at startup."""


class InvalidStateError(BudgetVisionError):
    """Illegal image-source lifecycle transition."""
