"""
Exception types for dotsync.

Engine components convert these into status values at their boundary;
only the command-line surface ever sees them escape.
"""


class DotsyncError(Exception):
    """Base class for dotsync errors."""
    pass


class BackendNotFound(DotsyncError):
    """No supported package manager could be detected on this host."""

    def __init__(self, message: str = "No supported package manager found!"):
        super().__init__(message)


class ConfigError(DotsyncError):
    """The configuration file could not be read or parsed."""
    pass


class PreconditionError(DotsyncError):
    """A required tool or directory is missing."""
    pass
