"""
Centralized error types for the scrape pipeline and their HTTP mapping.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException


class CourtwatchError(Exception):
    """Base for errors raised by courtwatch services."""


class FetchError(CourtwatchError):
    """A fetcher could not return slots for one (venue, date) target."""


class ChannelSendError(CourtwatchError):
    """Delivery to one notification channel failed. Nothing is logged as sent."""


class ChannelNotConfigured(ChannelSendError):
    """Transport credentials (SMTP, bot token) are missing."""


class UnsupportedChannelError(CourtwatchError):
    """Channel type has no registered sender."""


class PassAlreadyRunning(CourtwatchError):
    """A scrape pass is in progress in this process."""


# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500

MSG_PASS_RUNNING = "Scrape job already running"


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail_message)
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

def _is_instance(*types: type) -> Callable[[Exception], bool]:
    return lambda exc: isinstance(exc, types)


# List of (predicate, status_code, detail). First match wins.
ERROR_RULES: list[tuple[Callable[[Exception], bool], int, str]] = [
    (_is_instance(PassAlreadyRunning), STATUS_CONFLICT, MSG_PASS_RUNNING),
]


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a service call into an HTTPException.
    Uses ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for predicate, status_code, detail in ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
