"""Core modules for daeparse."""

from .config import ParserConfig
from .errors import (
    ColladaError,
    DuplicateIdError,
    ExcessiveNestingError,
    MalformedDocumentError,
    MissingAttributeError,
    MissingContentError,
    NumericFormatError,
    UnresolvedReferenceError,
)

__all__ = [
    "ParserConfig",
    "ColladaError",
    "DuplicateIdError",
    "ExcessiveNestingError",
    "MalformedDocumentError",
    "MissingAttributeError",
    "MissingContentError",
    "NumericFormatError",
    "UnresolvedReferenceError",
]
