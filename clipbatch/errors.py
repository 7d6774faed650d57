"""Exceptions raised by the batch engine."""


class BatchError(Exception):
    """Base class for batch engine errors."""


class UnknownOperationError(BatchError):
    """Raised when a clip is dispatched with an unrecognised operation kind."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unknown batch operation: {operation}")


class BackendError(BatchError):
    """Raised when the analysis backend rejects or fails a command."""

    def __init__(self, command: str, message: str):
        self.command = command
        super().__init__(f"{command} failed: {message}")
