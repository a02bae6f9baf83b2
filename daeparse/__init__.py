"""daeparse - structural parser for COLLADA scene documents.

Reads a COLLADA document into a node hierarchy with ordered transforms,
a library of raw float arrays with strided accessors over them, and the
document's unit and up-axis conventions.
"""

__version__ = "0.1.0"

from .core.config import ParserConfig
from .core.errors import (
    ColladaError,
    DuplicateIdError,
    ExcessiveNestingError,
    MalformedDocumentError,
    MissingAttributeError,
    MissingContentError,
    NumericFormatError,
    UnresolvedReferenceError,
)
from .data.library import Accessor, Data, DataLibrary, Geometry
from .parser import ColladaParser, ParseResult, parse_file, parse_string
from .scene.asset import AssetInfo, UpAxis
from .scene.node import Node, NodeLibrary
from .scene.transform import Transform, TransformKind, compose_transforms

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
    "Accessor",
    "Data",
    "DataLibrary",
    "Geometry",
    "ColladaParser",
    "ParseResult",
    "parse_file",
    "parse_string",
    "AssetInfo",
    "UpAxis",
    "Node",
    "NodeLibrary",
    "Transform",
    "TransformKind",
    "compose_transforms",
]
