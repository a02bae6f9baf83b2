"""Data arrays and accessors."""

from .library import Accessor, Data, DataLibrary, Geometry, strip_fragment

__all__ = [
    "Accessor",
    "Data",
    "DataLibrary",
    "Geometry",
    "strip_fragment",
]
