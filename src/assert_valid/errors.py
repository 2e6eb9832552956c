from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .cache import DocumentKind
    from .interpreter import Verdict


class AssertValidError(Exception):
    """Base class for errors raised by assert_valid itself."""


class ValidatorProtocolError(AssertValidError, RuntimeError):
    """The validator replied with something other than the expected shape."""

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Unexpected validator response: expected {expected}, got {received}")


class InvalidDocumentError(AssertionError):
    """The validator ran and reported the document as invalid."""

    def __init__(self, message: str, *, verdict: Verdict, kind: DocumentKind):
        super().__init__(message)
        self.verdict = verdict
        self.kind = kind
