"""
Errors raised by throttlewatch and the helpers that report them.

Configuration problems are `ValidationError`s and are fatal before sampling
starts. Everything else goes through `handle_error`, which logs with a
context prefix and re-raises unless told otherwise.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union


class ErrorSeverity(Enum):
    """Log level used when reporting an error."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Severities whose log record carries the traceback.
_TRACEBACK_SEVERITIES = (ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL)


class ValidationError(Exception):
    """An invalid configuration or command-line value."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log ``error`` as "Error in <context>: <error>" and optionally re-raise it.

    ``severity`` may be an `ErrorSeverity` or its name in any case.
    """
    log = logger or logging.getLogger(__name__)
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    log_method = getattr(log, severity.value)
    message = f"Error in {context}: {error}"
    if severity in _TRACEBACK_SEVERITIES:
        log_method(message, exc_info=error)
    else:
        log_method(message)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    handle_error(error, f"config {context}", **kwargs)


def handle_observer_error(error: Exception, observer_name: str, **kwargs) -> None:
    """Report a failing per-sample observer; the sampling loop carries on."""
    kwargs.setdefault("severity", ErrorSeverity.WARNING)
    kwargs.setdefault("reraise", False)
    handle_error(error, f"sample observer '{observer_name}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Report an error that ends the command and exit the process.

    Keyword args ``exit_code`` (default 1) and ``include_traceback`` are
    consumed here; a traceback is logged at critical level.
    """
    exit_code = kwargs.pop("exit_code", 1)
    include_traceback = kwargs.pop("include_traceback", False)
    kwargs.setdefault("severity", ErrorSeverity.CRITICAL if include_traceback else ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", reraise=False, **kwargs)
    sys.exit(exit_code)
