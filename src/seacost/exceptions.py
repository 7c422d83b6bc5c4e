"""
Custom exception hierarchy for the batch costing engine.

All exceptions inherit from SeaCostError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class SeaCostError(Exception):
    """Base exception for all costing engine errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(SeaCostError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Non-positive packaging defaults
        - Ratio thresholds in the wrong order
    """

    pass


class ValidationError(SeaCostError):
    """Raised when a caller asks for something the engine does not know.

    This is a programming error (unknown field, parameter or metric name),
    never a user data-entry gap.

    Context should include:
        - field: The name that failed validation
        - expected: The accepted names
    """

    pass


class InvalidScenarioSet(SeaCostError):
    """Raised when scenario probabilities do not sum to 100.

    The set is never renormalised silently since that would hide a
    data-entry mistake.

    Context should include:
        - total: The probability sum that was supplied
        - expected: 100.0
        - tolerance: The accepted absolute deviation
    """

    pass


class InputFileError(SeaCostError):
    """Raised when a CLI input file cannot be read or parsed.

    Context should include:
        - path: The file that was being read
    """

    pass


class ExportError(SeaCostError):
    """Raised when writing an export file fails.

    Context should include:
        - path: The output path
        - format: The export format (json, csv, xlsx)
    """

    pass
