"""
Exception hierarchy for the k3s-hello server.

Each exception carries a context dict for structured logging.
"""


class HelloServerError(Exception):
    """Base exception for all k3s-hello errors."""

    def __init__(self, message: str, context: dict = None):
        self.context = context or {}
        super().__init__(message)


class ServeError(HelloServerError):
    """Raised when the listener cannot be established or the serve loop dies."""
    pass


class BindError(ServeError):
    """Raised when the listening socket cannot be bound."""
    pass


class ConfigurationError(HelloServerError):
    """Raised when configuration is invalid."""
    pass
