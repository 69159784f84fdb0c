"""Error handling framework for Reelvault.

Provides custom exception types and decorators for standardized error handling
across the application.
"""

import logging
from functools import wraps

logger = logging.getLogger(__name__)


# Custom Exception Hierarchy
class ReelvaultError(Exception):
    """Base exception for all Reelvault-specific errors."""

    pass


class MetadataError(ReelvaultError):
    """External metadata catalog lookup failed.

    Raised when TMDB requests fail after retries or return unusable payloads.
    """

    pass


class ConfigurationError(ReelvaultError):
    """Configuration validation failed.

    Raised when user configuration is invalid or incomplete.
    """

    pass


class FolderEnumerationError(ReelvaultError):
    """A configured media folder could not be walked.

    Carries the root paths that failed so callers can report all of them.
    """

    def __init__(self, message: str, paths: list[str] | None = None):
        super().__init__(message)
        self.paths = paths or []


class ScanInProgressError(ReelvaultError):
    """A scan over (part of) the requested folder set is already running."""

    def __init__(self, busy_paths: list[str]):
        super().__init__(f"Scan already in progress for: {', '.join(busy_paths)}")
        self.busy_paths = busy_paths


class ConflictNotFoundError(ReelvaultError):
    """No scanning conflict exists with the given id."""

    def __init__(self, conflict_id: int):
        super().__init__(f"Conflict {conflict_id} not found")
        self.conflict_id = conflict_id


class ConflictResolutionError(ReelvaultError):
    """A conflict could not be turned into a catalog entry.

    Raised when the stored file path no longer parses for its media type.
    """

    pass


class CatalogEntryNotFoundError(ReelvaultError):
    """No movie, series or episode exists with the given id."""

    def __init__(self, kind: str, entry_id: int):
        super().__init__(f"{kind.capitalize()} with ID {entry_id} not found")
        self.kind = kind
        self.entry_id = entry_id


class CascadeTargetMissingError(ReelvaultError):
    """A series status cascade has nothing to apply to.

    Raised when the series does not exist or has no episodes.
    """

    def __init__(self, series_id: int, reason: str, series_missing: bool = False):
        super().__init__(f"Cannot cascade status for series {series_id}: {reason}")
        self.series_id = series_id
        self.reason = reason
        self.series_missing = series_missing


# Error Handling Decorator
def handle_errors(
    *,
    error_types: tuple[type[Exception], ...],
    default_message: str,
    log_level: str = "error",
    reraise: bool = True,
    wrap_as: type[ReelvaultError] | None = None,
):
    """Decorator for standardized error handling around coroutine functions.

    Args:
        error_types: Tuple of exception types to catch
        default_message: Message to log when error occurs
        log_level: Logging level (error, warning, info, debug)
        reraise: Whether to re-raise the exception after logging
        wrap_as: Optionally wrap the caught exception in a ReelvaultError subclass

    Example:
        @handle_errors(
            error_types=(requests.RequestException,),
            default_message="TMDB details lookup failed",
            wrap_as=MetadataError,
        )
        async def get_movie_details(self, tmdb_id):
            ...
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except error_types as e:
                log_func = getattr(logger, log_level)
                log_func(
                    f"{default_message}: {e}",
                    exc_info=(log_level == "error"),
                )
                if wrap_as:
                    raise wrap_as(f"{default_message}: {e}") from e
                if reraise:
                    raise

        return wrapper

    return decorator


# Context Manager for Error Handling
class error_context:
    """Context manager for error handling in specific code blocks.

    Example:
        with error_context(
            error_types=(FileNotFoundError, PermissionError),
            default_message="Failed to walk media folder",
            wrap_as=FolderEnumerationError,
        ):
            ...
    """

    def __init__(
        self,
        *,
        error_types: tuple[type[Exception], ...],
        default_message: str,
        log_level: str = "error",
        wrap_as: type[ReelvaultError] | None = None,
    ):
        self.error_types = error_types
        self.default_message = default_message
        self.log_level = log_level
        self.wrap_as = wrap_as

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and issubclass(exc_type, self.error_types):
            log_func = getattr(logger, self.log_level)
            log_func(
                f"{self.default_message}: {exc_val}",
                exc_info=(self.log_level == "error"),
            )
            if self.wrap_as:
                raise self.wrap_as(f"{self.default_message}: {exc_val}") from exc_val
            return False
        return False
