"""Exceptions raised by the session engine."""


class InvalidCommandError(Exception):
    """A command is not allowed in the session's current status.

    Raised synchronously; the session is left untouched.
    """

    def __init__(self, message: str, status: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class InvalidLevelError(ValueError):
    """Generated level metadata violates the difficulty contract."""
