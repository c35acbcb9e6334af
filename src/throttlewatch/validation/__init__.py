"""
Validation and error handling for the throttlewatch package.

This module provides input validation and error handling with consistent
error reporting across the application.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_observer_error,
    handle_cli_error,
)

from .validators import (
    validate_bool,
    validate_enum_choice,
    validate_percentage,
    validate_positive_float,
    validate_positive_integer,
    validate_ratio,
    validate_string_list,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError",
    "handle_error",
    "handle_config_error",
    "handle_observer_error",
    "handle_cli_error",
    # Validators
    "validate_bool",
    "validate_enum_choice",
    "validate_percentage",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_ratio",
    "validate_string_list",
]
