"""Domain errors surfaced to the HTTP layer.

Recoverable failures (a single strategy query, a single malformed stream
line) are handled where they happen and never raised as these.
"""


class CodeContextError(Exception):
    """Base class for errors the API maps to a status code."""


class StoreUninitializedError(CodeContextError):
    """Document store is not connected or cannot answer a count check."""

    def __init__(self, message: str = "Vector DB is not initialized") -> None:
        super().__init__(message)


class MissingRequiredFieldError(CodeContextError):
    """Request lacks a field that must be present before any upstream call."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"'{field}' is required")


class UpstreamTransportError(CodeContextError):
    """Inference engine connection failed or returned an error."""
