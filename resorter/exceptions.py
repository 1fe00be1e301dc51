"""
Exception classes for the resorter.

Centralized location for all custom exceptions to avoid circular imports.
"""


class ResorterError(Exception):
    """Base exception for all resorter errors."""
    pass


class StorageError(ResorterError):
    """Raised when the rating store cannot be read, parsed or written."""
    pass


class JudgeError(ResorterError):
    """Base exception for all judge-related errors."""
    pass


class OracleAbortedError(JudgeError):
    """Raised when a comparison is cancelled or answered with garbage."""
    pass


class UpdateError(ResorterError):
    """Raised when the rating update rejects its inputs or outputs."""
    pass


class ValidationError(ResorterError):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(ResorterError):
    """Base exception for configuration-related errors."""
    pass
