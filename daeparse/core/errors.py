"""Error taxonomy for COLLADA parsing.

Every error aborts the parse it was raised in. Errors carry the source file
name and, where the token source knows it, the current line number.
"""

from __future__ import annotations


class ColladaError(Exception):
    """Base class for all parse and resolution errors.

    Attributes:
        message: Human readable description
        file_name: Identifier of the document being read
        line: Line number in the document, if known
    """

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        line: int | None = None,
    ) -> None:
        self.message = message
        self.file_name = file_name
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.file_name is None:
            return self.message
        if self.line is None:
            return f"{self.file_name}: {self.message}"
        return f"{self.file_name}:{self.line}: {self.message}"


class MissingAttributeError(ColladaError):
    """A required attribute is absent on the current element."""


class MissingContentError(ColladaError):
    """An element that must carry text content is empty."""


class MalformedDocumentError(ColladaError):
    """Closing tag mismatch, unexpected token ordering or truncated input."""


class DuplicateIdError(ColladaError):
    """An ID was declared twice in the node library."""


class UnresolvedReferenceError(ColladaError):
    """A referenced ID (scene or accessor source) does not exist."""


class ExcessiveNestingError(ColladaError):
    """Node nesting went beyond the configured maximum depth."""


class NumericFormatError(ColladaError):
    """A token could not be read as a number, or the value count is wrong."""
