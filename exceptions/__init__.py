"""
Custom exceptions module.

Error codes and HTTP statuses are defined on each class.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Configuration
    ConfigurationError,
    InvalidTimeZoneError,
    InvalidCutoffTimeError,
    InvalidBlackoutWindowError,
    InvalidRuleSetError,

    # Lookups
    CutoffRulesNotFoundError,
    BranchNotFoundError,

    # Fetching
    TransientFetchError,

    # Helpers
    field_errors,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Configuration
    "ConfigurationError",
    "InvalidTimeZoneError",
    "InvalidCutoffTimeError",
    "InvalidBlackoutWindowError",
    "InvalidRuleSetError",

    # Lookups
    "CutoffRulesNotFoundError",
    "BranchNotFoundError",

    # Fetching
    "TransientFetchError",
    "field_errors",
]
