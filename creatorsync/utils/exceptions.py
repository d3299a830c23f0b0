"""
CreatorSync Custom Exceptions
=============================

Exception hierarchy for CreatorSync with error codes, context information,
and operator-friendly error messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"
    CONFIG_PARSE_ERROR = "C003"
    CONFIG_NO_FEEDS = "C004"

    # Feed ingestion errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_ACCESS_DENIED = "F005"
    FEED_NOT_FOUND = "F006"

    # Archive supplement errors (A001-A099)
    ARCHIVE_FETCH_FAILED = "A001"

    # Storage errors (S001-S099)
    STORAGE_WRITE_FAILED = "S001"
    STORAGE_PERMISSION_DENIED = "S003"

    # Fleet target errors (T001-T099)
    TARGET_EXIT_NONZERO = "T001"
    TARGET_TIMEOUT = "T002"
    TARGET_LAUNCH_FAILED = "T003"

    # Validation errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"

    # System errors (X001-X099)
    SYSTEM_UNEXPECTED = "X002"


class CreatorSyncError(Exception):
    """Base exception for all CreatorSync errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize CreatorSync error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: Operator-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


def _passthrough(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v
        for k, v in kwargs.items()
        if k not in ["context", "error_code", "user_message", "recoverable"]
    }


class ConfigurationError(CreatorSyncError):
    """Configuration-related errors (settings or owner configuration)."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key or file that caused the error
            **kwargs: Additional arguments for CreatorSyncError
        """
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            recoverable=kwargs.get("recoverable", False),
            **_passthrough(kwargs),
        )


class FeedError(CreatorSyncError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for CreatorSyncError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_PARSE_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs),
        )


class FeedFetchError(FeedError):
    """Feed fetching errors (network, HTTP status, invalid URL)."""

    pass


class ArchiveFetchError(CreatorSyncError):
    """Archive page fetch errors."""

    def __init__(self, message: str, archive_url: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if archive_url:
            context["archive_url"] = archive_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.ARCHIVE_FETCH_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Archive crawl failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs),
        )


class StorageError(CreatorSyncError):
    """Post/metadata persistence errors."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        """Initialize storage error.

        Args:
            message: Error message
            path: File path that caused the error
            **kwargs: Additional arguments for CreatorSyncError
        """
        context = kwargs.get("context", {})
        if path:
            context["path"] = path

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.STORAGE_WRITE_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Storage operation failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs),
        )


class TargetExecutionError(CreatorSyncError):
    """Fleet target invocation errors."""

    def __init__(self, message: str, target: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if target:
            context["target"] = target

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.TARGET_EXIT_NONZERO),
            context=context,
            user_message=kwargs.get("user_message", f"Sync failed for {target}"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs),
        )


class ValidationError(CreatorSyncError):
    """Data validation errors."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        """Initialize validation error.

        Args:
            message: Error message
            field_name: Field name that failed validation
            **kwargs: Additional arguments for CreatorSyncError
        """
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Invalid {field_name or 'input'}: {message}"
            ),
            recoverable=kwargs.get("recoverable", False),
            **_passthrough(kwargs),
        )


# Exception handling utilities


def handle_exception(
    exception: Exception,
    logger,
    operation: str,
    context: Optional[Dict[str, Any]] = None,
) -> CreatorSyncError:
    """Convert generic exceptions to CreatorSync exceptions with logging.

    Args:
        exception: Original exception
        logger: Logger instance for error logging
        operation: Operation that was being performed
        context: Additional context information

    Returns:
        CreatorSync exception with proper categorization
    """
    context = context or {}
    context["operation"] = operation
    context["original_exception_type"] = type(exception).__name__

    if isinstance(exception, CreatorSyncError):
        logger.error(f"Operation '{operation}' failed", extra=exception.to_dict())
        return exception

    elif isinstance(exception, (ConnectionError, TimeoutError)):
        error = CreatorSyncError(
            message=f"Network error during {operation}: {str(exception)}",
            error_code=ErrorCode.FEED_NETWORK_ERROR,
            context=context,
            user_message="Network connection failed",
            recoverable=True,
        )

    elif isinstance(exception, PermissionError):
        error = StorageError(
            message=f"Permission denied during {operation}: {str(exception)}",
            error_code=ErrorCode.STORAGE_PERMISSION_DENIED,
            context=context,
            user_message="Access denied",
            recoverable=False,
        )

    elif isinstance(exception, FileNotFoundError):
        error = ConfigurationError(
            message=f"Required file not found during {operation}: {str(exception)}",
            error_code=ErrorCode.CONFIG_MISSING,
            context=context,
            user_message="Configuration file missing",
        )

    elif isinstance(exception, OSError):
        error = StorageError(
            message=f"I/O error during {operation}: {str(exception)}",
            context=context,
        )

    else:
        error = CreatorSyncError(
            message=f"Unexpected error during {operation}: {str(exception)}",
            error_code=ErrorCode.SYSTEM_UNEXPECTED,
            context=context,
            user_message="An unexpected error occurred",
            recoverable=True,
        )

    logger.error(f"Operation '{operation}' failed", extra=error.to_dict())
    return error


def is_retryable_error(exception: CreatorSyncError) -> bool:
    """Check if an error is worth retrying on the next sweep round.

    Args:
        exception: CreatorSync exception to check

    Returns:
        True if the error is potentially retryable
    """
    if not exception.recoverable:
        return False

    retryable_codes = {
        ErrorCode.FEED_NETWORK_ERROR,
        ErrorCode.FEED_FETCH_TIMEOUT,
        ErrorCode.ARCHIVE_FETCH_FAILED,
        ErrorCode.STORAGE_WRITE_FAILED,
        ErrorCode.TARGET_EXIT_NONZERO,
        ErrorCode.TARGET_TIMEOUT,
    }

    return exception.error_code in retryable_codes
