"""Helpers for invoking caller-supplied side-channel callbacks."""

import inspect
import logging
from typing import Any, Callable, Optional


async def invoke_callback(
    callback: Optional[Callable[..., Any]],
    *args: Any,
    logger: logging.Logger,
    on_error: Optional[Callable[[str], Any]] = None
) -> None:
    """
    Call ``callback(*args)`` and await the result if it is awaitable.

    Exceptions raised by the callback are reported to ``on_error`` (or the
    logger when no error callback is set) and never propagated.
    """
    if callback is None:
        return
    try:
        result = callback(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        name = getattr(callback, '__name__', repr(callback))
        report_error(on_error, f"Callback {name} failed: {e}", logger=logger)


def report_error(on_error: Optional[Callable[[str], Any]], message: str, logger: logging.Logger) -> None:
    """Send ``message`` to the error callback, falling back to the logger."""
    if on_error is None:
        logger.error(message)
        return
    try:
        on_error(message)
    except Exception:
        logger.exception(f"Error callback failed while reporting: {message}")


def report_log(on_log: Optional[Callable[[str], Any]], message: str, logger: logging.Logger) -> None:
    """Send ``message`` to the log callback, falling back to the logger."""
    if on_log is None:
        logger.info(message)
        return
    try:
        on_log(message)
    except Exception:
        logger.exception(f"Log callback failed while reporting: {message}")
