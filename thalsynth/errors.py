"""Exception types raised by thalsynth."""

from __future__ import annotations


class ThalSynthError(Exception):
    """Base class for all thalsynth errors."""


class EmptyDatasetError(ThalSynthError, ValueError):
    """Generation was requested without any source rows."""


class InvalidCountError(ThalSynthError, ValueError):
    """The requested number of synthetic rows is not a positive integer."""


class UnsupportedFormatError(ThalSynthError, ValueError):
    """An input file has an extension the loader cannot read."""


class RemoteGenerationError(ThalSynthError):
    """The remote generation service failed or returned an unusable payload."""
