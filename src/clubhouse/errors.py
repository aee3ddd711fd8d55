"""Exceptions shared between the core and the API layer."""

from __future__ import annotations


class StandingsUnavailableError(Exception):
    """Raised when a backing store cannot be read while computing standings.

    Standings are all-or-nothing: callers must surface this as a failed
    request rather than render partial or zeroed numbers.
    """
