"""Exceptions raised by the content analysis pipeline."""

from __future__ import annotations


class FootprintError(Exception):
    """Base class for all pipeline errors."""

    pass


class InitializationError(FootprintError):
    """Raised when the recognizer cannot be trained.

    Fatal: the analyzer refuses to serve requests rather than run with a
    partially trained recognizer.
    """

    pass


class NotReadyError(FootprintError):
    """Raised when a request arrives before initialization has completed."""

    pass


class EmptyContentError(FootprintError, ValueError):
    """Raised when a request carries no content to analyze."""

    pass


class BackendError(FootprintError):
    """Raised when an external extraction backend call fails or times out."""

    pass


class AnalysisCancelled(FootprintError):
    """Raised when an analysis is cancelled by its caller."""

    pass
