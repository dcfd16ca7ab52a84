"""Exception taxonomy for the sonar log decoders."""
from __future__ import annotations


class SonarDecodeError(ValueError):
    """Raised when a sonar log cannot be decoded."""


class LogFileNotFoundError(SonarDecodeError, FileNotFoundError):
    """Raised when the log, its index or its data file is missing."""


class TruncatedError(SonarDecodeError):
    """Raised when a log header ends before all of its fields were read."""


class ShortRecordError(SonarDecodeError):
    """Raised when a ping record runs past the end of its data file."""


class FormatMismatchError(SonarDecodeError):
    """Raised when a file is not one of the supported vendor layouts."""
