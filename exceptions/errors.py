"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict
so routes can return the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "CUTOFF_RULES_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CONFIGURATION ERRORS
# ===================

class ConfigurationError(ValidationError):
    """Cutoff rule configuration is invalid (422)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFIGURATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            message=message,
            code=code,
            details=details
        )


class InvalidTimeZoneError(ConfigurationError):
    """Time zone identifier is not in the IANA database."""

    def __init__(self, timezone_id: Optional[str]):
        super().__init__(
            code="INVALID_TIME_ZONE",
            message=f"Unknown time zone: {timezone_id}",
            details={"timezone": timezone_id}
        )


class InvalidCutoffTimeError(ConfigurationError):
    """Cutoff time is not a valid 24-hour HH:MM string."""

    def __init__(self, value: Optional[str], division: Optional[str] = None):
        super().__init__(
            code="INVALID_CUTOFF_TIME",
            message="Cutoff time must be a zero-padded 24-hour HH:MM string",
            details={"provided": value, "division": division}
        )


class InvalidBlackoutWindowError(ConfigurationError):
    """Blackout window dates are malformed or reversed."""

    def __init__(self, start: str, end: str):
        super().__init__(
            code="INVALID_BLACKOUT_WINDOW",
            message="Blackout window must have YYYY-MM-DD dates with start <= end",
            details={"start": start, "end": end}
        )


class InvalidRuleSetError(ConfigurationError):
    """Rule set fails schema validation (bad stored row or write payload)."""

    def __init__(self, location_id: Optional[str], errors: Optional[list[dict]] = None):
        super().__init__(
            code="INVALID_RULE_SET",
            message=f"Cutoff rules for {location_id} are malformed",
            details={"location_id": location_id, "errors": errors or []}
        )
        self.location_id = location_id


# ===================
# LOOKUP ERRORS
# ===================

class CutoffRulesNotFoundError(NotFoundError):
    """No cutoff rule set configured for the location."""

    def __init__(self, location_id: str):
        super().__init__(
            resource="Cutoff rules",
            identifier=location_id,
            code="CUTOFF_RULES_NOT_FOUND"
        )


class BranchNotFoundError(NotFoundError):
    """Branch is not in the branch directory."""

    def __init__(self, location_id: str):
        super().__init__(
            resource="Branch",
            identifier=location_id,
            code="BRANCH_NOT_FOUND"
        )


# ===================
# FETCH ERRORS
# ===================

class TransientFetchError(ExternalServiceError):
    """Fetching one candidate's facts failed; the ranking run continues."""

    def __init__(
        self,
        source: str,
        location_id: str,
        message: str
    ):
        super().__init__(
            service=source,
            message=message,
            details={"location_id": location_id}
        )
        self.code = "TRANSIENT_FETCH_ERROR"
        self.location_id = location_id


def field_errors(errors: list[dict]) -> list[dict]:
    """Reduce pydantic error dicts to JSON-safe {field, message} pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in errors
    ]
