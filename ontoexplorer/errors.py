from typing import Optional


class ExplorerError(Exception):
    """Base class for errors raised by the explorer pipeline."""


class TransportError(ExplorerError):
    """Network or HTTP failure talking to the backend. Timeouts included."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ProtocolError(ExplorerError):
    """The backend answered with a payload of unexpected shape."""


class NotFound(ExplorerError):
    """The requested resource does not exist on the backend."""

    def __init__(self, message: str, status: int = 404):
        super().__init__(message)
        self.status = status


class ValidationError(ExplorerError):
    """Input rejected locally before anything is sent."""
