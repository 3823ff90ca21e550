"""
Error handling for Feedlens.

This module provides the exception taxonomy shared by the analyzer, the digest
components and the HTTP layer, plus helpers that log errors at component
boundaries.
"""

import logging
import traceback
import functools
import time
from typing import Any, Callable, Dict, List, Type, Optional, Union
import asyncio

logger = logging.getLogger(__name__)


class FeedlensError(Exception):
    """Base exception class for all Feedlens errors."""

    status_code: int = 500

    def __init__(self, message: str, component: str = "unknown", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}
        self.timestamp = time.time()


class NotFoundError(FeedlensError):
    """A referenced feedback item or workflow instance does not exist."""
    status_code = 404


class AnalysisParseError(FeedlensError):
    """Model output could not be parsed into the expected analysis shape."""
    status_code = 500


class NoAnalyzedFeedbackError(FeedlensError):
    """A summary was requested while no feedback has been analyzed."""
    status_code = 400


class DeliveryError(FeedlensError):
    """Network failure while posting to the chat webhook."""
    status_code = 502


class LLMError(FeedlensError):
    """Error when interacting with the language model endpoint."""
    status_code = 502


class StorageError(FeedlensError):
    """Error with database operations."""
    pass


class ConfigurationError(FeedlensError):
    """Error related to system configuration."""
    pass


def catch_and_log(
    component: str,
    exceptions: Union[Type[Exception], List[Type[Exception]]] = Exception,
    error_class: Type[FeedlensError] = FeedlensError
) -> Callable:
    """
    Decorator that logs exceptions and re-raises them as Feedlens errors.

    Feedlens errors pass through unchanged so callers still see the
    original taxonomy.

    Args:
        component: Component name used in log messages
        exceptions: Exception(s) to catch
        error_class: Feedlens error class used to wrap foreign exceptions

    Returns:
        Decorated function
    """
    if isinstance(exceptions, list):
        exceptions = tuple(exceptions)

    def _handle(func, e):
        if isinstance(e, FeedlensError):
            logger.warning(f"{e.__class__.__name__} in {func.__name__} ({component}): {e}")
            raise e

        stack_trace = traceback.format_exc()
        logger.error(f"Error in {func.__name__} ({component}): {e}")
        logger.debug(f"Stack trace: {stack_trace}")

        raise error_class(
            message=str(e),
            component=component,
            details={"original_error": e.__class__.__name__, "function": func.__name__}
        ) from e

    def decorator(func):
        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                _handle(func, e)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except exceptions as e:
                _handle(func, e)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def timer(component: str, method_name: Optional[str] = None) -> Callable:
    """
    Decorator to log function execution time at DEBUG level.

    Args:
        component: Component name for the log line
        method_name: Optional method name override

    Returns:
        Decorated function
    """
    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                duration_ms = (time.time() - start_time) * 1000
                logger.debug(f"{component}.{method_name or func.__name__} executed in {duration_ms:.2f}ms")

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.time() - start_time) * 1000
                logger.debug(f"{component}.{method_name or func.__name__} executed in {duration_ms:.2f}ms")

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def error_response_body(error: FeedlensError) -> Dict[str, Any]:
    """Build the JSON body returned for a Feedlens error."""
    return {"error": error.message}


class AsyncErrorContext:
    """
    Async context manager that wraps foreign exceptions in a Feedlens error.

    Example:
        async with AsyncErrorContext("llm_client", "Completion failed", LLMError):
            text = await client.chat.completions.create(...)
    """

    def __init__(self, component: str, message: str,
                error_class: Type[FeedlensError] = FeedlensError):
        """
        Initialize the async error context.

        Args:
            component: Component name
            message: Error message prefix
            error_class: Feedlens error class to use
        """
        self.component = component
        self.message = message
        self.error_class = error_class

    async def __aenter__(self):
        """Enter the context."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit the context, wrapping any non-Feedlens error."""
        if exc_type is None or isinstance(exc_val, FeedlensError):
            return False

        if issubclass(exc_type, asyncio.CancelledError):
            return False

        logger.error(f"Error in {self.component}: {self.message} - {exc_val}")

        raise self.error_class(
            message=f"{self.message}: {exc_val}",
            component=self.component,
            details={"original_error": exc_type.__name__}
        ) from exc_val
