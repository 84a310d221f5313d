"""Custom exception hierarchy for reqtrace-core.

This module defines the exception classes used throughout reqtrace:
- ReqtraceError: Base exception for all reqtrace errors
- ConfigurationError: Malformed or invalid suite configuration (run-fatal)
- RegistrationError: Module descriptor rejected by the registry (run-fatal)
- ModuleLoadError: Test module implementation cannot be resolved
- ModuleExecutionError: Test module raised, timed out, or returned garbage
- ExportError: Report serialization failed
- RunNotAvailableError: Results requested before a run completed

Only configuration and registration errors abort a run. Module load and
execution errors are converted into skipped/error results by the
coordinator and never escape it.

User-facing messages are safe to display. Technical details are logged
internally via structlog and never exposed to the user.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class ReqtraceError(Exception):
    """Base exception for reqtrace.

    All reqtrace exceptions inherit from this class. User-facing messages
    are safe to display; technical details are logged internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise ReqtraceError(
        ...     "Suite configuration invalid",
        ...     internal_details="thresholds.successRatePercent = -5",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ReqtraceError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "reqtrace_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(ReqtraceError):
    """Raised when suite configuration parsing or validation fails.

    Use this exception when:
    - The configuration file cannot be read or parsed
    - A section has the wrong structural type
    - initialize() is given a configuration with validation issues

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "thresholds.successRatePercent").
        issues: Individual validation messages, when several were found.

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid suite configuration",
        ...     file_path="suite.yaml",
        ...     field_path="environment.apiUrl",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        issues: list[str] | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            issues: Individual validation messages (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.issues = issues or []


class RegistrationError(ConfigurationError):
    """Raised when a module descriptor cannot be registered.

    Use this exception when:
    - Two modules share a name or a category
    - A module declares a requirement ID absent from the catalog

    Attributes:
        module_name: Name of the rejected module.
        unknown_requirements: Requirement IDs not present in the catalog.

    Example:
        >>> raise RegistrationError(
        ...     "Module 'API Testing' declares unknown requirements: 2.11",
        ...     module_name="API Testing",
        ...     unknown_requirements=["2.11"],
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        module_name: str,
        unknown_requirements: list[str] | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, field_path="modules", internal_details=internal_details)
        self.module_name = module_name
        self.unknown_requirements = unknown_requirements or []


class ModuleLoadError(ReqtraceError):
    """Raised when a test module implementation cannot be resolved.

    Attributes:
        factory_path: The import path that failed (e.g., "suite.api:ApiModule").
    """

    def __init__(
        self,
        factory_path: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Test module implementation '{factory_path}' could not be loaded",
            internal_details=internal_details,
        )
        self.factory_path = factory_path


class ModuleExecutionError(ReqtraceError):
    """Raised when a test module fails while running.

    Attributes:
        module_name: Name of the failing module.
        reason: Short machine-friendly reason ("timeout", "exception", "cancelled",
            "invalid_report").
    """

    def __init__(
        self,
        module_name: str,
        message: str,
        *,
        reason: str = "exception",
        internal_details: str | None = None,
    ) -> None:
        super().__init__(message, internal_details=internal_details)
        self.module_name = module_name
        self.reason = reason


class ExportError(ReqtraceError):
    """Raised when a report cannot be serialized.

    The run being exported is never modified, so callers can retry with a
    different format or destination.

    Attributes:
        export_format: The format that failed ("json", "csv", ...).
    """

    def __init__(
        self,
        export_format: str,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.export_format = export_format


class RunNotAvailableError(ReqtraceError):
    """Raised when results are requested before a run completed."""

    pass
