"""Domain exceptions raised by services and dependencies.

Services raise these to signal business-rule violations.
Exception handlers in main.py translate them into the standard error
envelope: {"success": false, "code": "...", "message": "...", ...}.
"""


class DomainError(Exception):
    """Base class for all domain exceptions."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidPaginationError(DomainError):
    """Raised when page/limit query parameters fail validation."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Invalid pagination parameters")


class HybridThresholdExceededError(DomainError):
    """Raised when an in-memory (hybrid) page would load more rows than allowed."""

    def __init__(self, total: int, threshold: int) -> None:
        self.total = total
        self.threshold = threshold
        super().__init__(
            f"Query matches {total} items, above the in-memory limit of {threshold}. "
            "Use a numeric limit of at most the configured maximum or narrow the filters."
        )
