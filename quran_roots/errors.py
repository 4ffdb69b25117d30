"""Exceptions and warnings raised by the root search engine."""
from __future__ import annotations


class QuranRootsError(Exception):
    """Base class for errors raised by the engine."""


class InvalidInput(QuranRootsError, ValueError):
    """The query is empty, blank or otherwise unusable."""

    def __init__(self, message: str = "الجذر غير صالح") -> None:
        super().__init__(message)


class UpstreamUnavailable(QuranRootsError):
    """The corpus store could not be reached or timed out."""


class DataInconsistency(UserWarning):
    """A token points at a verse key the verse table does not know.

    Emitted through :func:`warnings.warn`; the offending row is skipped.
    """
