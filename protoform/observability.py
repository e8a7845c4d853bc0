"""Optional Pydantic Logfire tracing for form rendering.

Every helper no-ops until :func:`configure` has enabled logfire, and when
the ``logfire`` extra is not installed.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from protoform.config import Settings

_logfire = None


def is_available() -> bool:
    return _logfire is not None


def configure(settings: Settings) -> bool:
    """Initialize logfire from the ``logfire`` settings section.

    Returns True when tracing is active afterwards.
    """
    global _logfire

    if not settings.logfire.enabled:
        return False

    try:
        import logfire as lf
    except ImportError:
        return False

    kwargs: dict[str, Any] = {
        "service_name": settings.logfire.service_name,
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire.environment:
        kwargs["environment"] = settings.logfire.environment
    if settings.logfire.sample_rate != 1.0:
        kwargs["trace_sample_rate"] = settings.logfire.sample_rate
    if settings.logfire.console:
        kwargs["console"] = lf.ConsoleOptions()

    lf.configure(**kwargs)
    _logfire = lf
    return True


def reset() -> None:
    """Disable tracing again (used by tests)."""
    global _logfire
    _logfire = None


@contextmanager
def span(name: str, **attrs: Any):
    """Context manager that yields a logfire span, or None if unavailable."""
    if is_available():
        with _logfire.span(name, **attrs) as s:
            yield s
    else:
        yield None


def info(msg: str, **kwargs: Any) -> None:
    if is_available():
        _logfire.info(msg, **kwargs)


def warning(msg: str, **kwargs: Any) -> None:
    if is_available():
        _logfire.warn(msg, **kwargs)


def error(msg: str, **kwargs: Any) -> None:
    if is_available():
        _logfire.error(msg, **kwargs)
