"""Custom exceptions for the PolicyWorth impact engine.

This module provides the exception hierarchy used by the reporting pipeline.
All exceptions inherit from PolicyWorthError, making it easy to catch every
engine-specific failure in one place.

Only fatal conditions are raised. Non-fatal conditions (a location without a
cost baseline, split shares that do not add up to one) are attached to the
finished report as warnings instead.

Example:
    try:
        result = run_report(period, services, params, records, costs)
    except ConfigurationError as e:
        show_settings_page(missing=e.missing_keys, invalid=e.invalid_keys)
    except PolicyWorthError as e:
        logger.error("report_failed", error=str(e))
"""

from typing import Any, Optional, Sequence


class PolicyWorthError(Exception):
    """Base exception for all PolicyWorth engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise PolicyWorthError("Something went wrong", details={"code": 500})
        PolicyWorthError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize PolicyWorthError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error can be fixed by correcting the
                inputs and running again. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(PolicyWorthError):
    """Error raised when report inputs fail validation.

    Raised for an empty service selection, an unknown service code or a
    malformed period (quarter outside 1..4, custom range with a missing
    bound or ``from`` after ``to``). Also raised by
    ``TallyRecord.from_document`` for a document that cannot form a record;
    the report engine skips such documents with a warning.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Select at least one service.",
        ...     field="selected_services",
        ...     constraint="At least one service code is required",
        ... )
        ValidationError: Select at least one service.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True since validation errors typically require
                user input correction.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ConfigurationError(PolicyWorthError):
    """Error raised when the calculation parameters are missing or invalid.

    Every offending key is reported at once so an administrator can fix the
    whole parameter set from a single message.

    Attributes:
        missing_keys: Required keys that were not supplied.
        invalid_keys: Keys that were supplied but are not numeric.

    Example:
        >>> raise ConfigurationError(
        ...     "Missing required settings: taxpayerMultiplier",
        ...     missing_keys=["taxpayerMultiplier"],
        ... )
        ConfigurationError: Missing required settings: taxpayerMultiplier
    """

    def __init__(
        self,
        message: str,
        *,
        missing_keys: Sequence[str] = (),
        invalid_keys: Sequence[str] = (),
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            missing_keys: Required keys absent from the parameter set.
            invalid_keys: Keys whose values could not be read as numbers.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed at runtime.
                Defaults to False since parameters are administrator-managed.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.missing_keys = list(missing_keys)
        self.invalid_keys = list(invalid_keys)

        if self.missing_keys:
            self.details["missing_keys"] = self.missing_keys
        if self.invalid_keys:
            self.details["invalid_keys"] = self.invalid_keys

    @property
    def keys(self) -> list[str]:
        """All offending keys, missing first."""
        return self.missing_keys + self.invalid_keys


__all__ = [
    "PolicyWorthError",
    "ValidationError",
    "ConfigurationError",
]
