"""Custom exceptions for usage log scanning."""


class ScanError(Exception):
    """Base exception for scan errors."""


class ParseError(ScanError):
    """Raised when one log record cannot be decoded."""
