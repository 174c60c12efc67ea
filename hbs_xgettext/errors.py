"""
Exception taxonomy for message extraction.

Every error raised by the extractor derives from ExtractionError and carries
a ``context`` dict with the fields that identify the offending input.
"""

from typing import Any, Dict, Optional, Tuple


class ExtractionError(Exception):
    """Base class for extraction related issues."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(ExtractionError):
    """Raised when a keyword specification entry is malformed."""

    def __init__(self, message: str, *, keyword: Optional[str] = None):
        super().__init__(message, context={'keyword': keyword})
        self.keyword = keyword


class MarkupError(ExtractionError):
    """Raised when a translation helper call is missing or misuses an argument."""

    def __init__(self, message: str, *, msgid: Optional[str] = None,
                 values: Tuple[str, ...] = ()):
        super().__init__(message, context={'msgid': msgid, 'values': values})
        self.msgid = msgid
        self.values = values


class ResolutionError(ExtractionError):
    """Raised when a file pattern cannot be expanded."""

    def __init__(self, message: str, *, pattern: Optional[str] = None):
        super().__init__(message, context={'pattern': pattern})
        self.pattern = pattern


class TemplateSyntaxError(ExtractionError):
    """Raised when template source cannot be parsed into a tree."""

    def __init__(self, message: str, *, line: Optional[int] = None):
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, context={'line': line})
        self.line = line
