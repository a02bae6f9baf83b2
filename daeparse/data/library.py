"""Raw numeric arrays and the strided accessors that view them.

A COLLADA ``<source>`` couples a flat ``<float_array>`` with an
``<accessor>`` describing how to slice it into tuples. Several accessors may
view the same array, and an accessor may name an array that has not been
read yet. References are therefore stored by ID and only looked up when a
consumer calls ``DataLibrary.resolve``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from ..core.config import ParserConfig
from ..core.errors import (
    MalformedDocumentError,
    NumericFormatError,
    UnresolvedReferenceError,
)
from ..xml.reader import ElementReader

logger = logging.getLogger(__name__)


@dataclass
class Data:
    """A flat, unshaped sequence of floats identified by ID.

    Attributes:
        id: Library key taken from the array's ``id`` attribute
        values: 1-D float64 array
    """

    id: str
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        self.values = np.asarray(self.values, dtype=np.float64)
        if self.values.ndim != 1:
            raise ValueError(f"Data values must be 1-D, got shape {self.values.shape}")

    def __len__(self) -> int:
        return len(self.values)


class Accessor(BaseModel):
    """Strided view over a named data array.

    Tuple ``i`` starts at ``offset + i * stride``. The referenced array is
    not checked when the accessor is read.
    """

    count: int = Field(ge=0, description="Number of tuples")
    offset: int = Field(default=0, ge=0, description="Index of the first value")
    stride: int = Field(default=1, ge=1, description="Values between tuple starts")
    source: str = Field(description="ID of the viewed data array, without '#'")
    params: tuple[str, ...] = Field(
        default=(),
        description="Names of the <param> children, in order",
    )

    model_config = {"frozen": True}

    @property
    def width(self) -> int:
        """Number of values per tuple."""
        return len(self.params) if self.params else self.stride


class Geometry(BaseModel):
    """A geometry entry with the IDs of the sources its mesh declares."""

    id: str
    name: str = ""
    sources: list[str] = Field(default_factory=list)


def strip_fragment(url: str) -> str:
    """Turn a local URI reference (``#id``) into a plain ID."""
    return url[1:] if url.startswith("#") else url


class DataLibrary:
    """ID-keyed float arrays plus accessors keyed by their owning source."""

    def __init__(self, config: ParserConfig | None = None, file_name: str | None = None):
        self.config = config or ParserConfig.default()
        self.file_name = file_name
        self.arrays: dict[str, Data] = {}
        self.accessors: dict[str, Accessor] = {}

    def __len__(self) -> int:
        return len(self.arrays)

    def __contains__(self, data_id: str) -> bool:
        return data_id in self.arrays

    def get(self, data_id: str) -> Data | None:
        return self.arrays.get(data_id)

    def clear(self) -> None:
        self.arrays.clear()
        self.accessors.clear()

    def read_data_array(self, reader: ElementReader) -> Data:
        """Read a ``<float_array>`` element and store it by its ID.

        Raises:
            MissingAttributeError: If the array has no ``id``
            NumericFormatError: On a non-numeric value
        """
        element = reader.name
        array_id = reader.require_attribute("id")
        declared = reader.optional_attribute("count")

        values = reader.read_floats(allow_empty=True)

        if declared is not None:
            try:
                expected = int(declared)
            except ValueError:
                raise reader.error(
                    NumericFormatError,
                    f'Attribute "count" of <{element}> is not an integer: {declared!r}',
                ) from None
            if expected != len(values):
                message = (
                    f'<{element} id="{array_id}"> declares {expected} values '
                    f"but contains {len(values)}"
                )
                if self.config.strict_array_count:
                    raise reader.error(MalformedDocumentError, message)
                logger.warning(message)

        reader.verify_closing(element)

        if array_id in self.arrays:
            logger.warning("Data array %r declared twice, keeping the last one", array_id)
        data = Data(id=array_id, values=values)
        self.arrays[array_id] = data
        logger.debug("Read data array %r (%d values)", array_id, len(data))
        return data

    def read_accessor(self, reader: ElementReader) -> Accessor:
        """Read an ``<accessor>`` element without dereferencing its source."""
        count = reader.int_attribute("count")
        offset = reader.int_attribute("offset", 0)
        stride = reader.int_attribute("stride", 1)
        source = strip_fragment(reader.require_attribute("source"))

        if count < 0 or offset < 0 or stride < 1:
            raise reader.error(
                NumericFormatError,
                f"Invalid accessor layout: count={count} offset={offset} stride={stride}",
            )

        params: list[str] = []
        for child in reader.children("accessor"):
            if child == "param":
                params.append(reader.optional_attribute("name", ""))
            reader.skip_element()

        return Accessor(
            count=count,
            offset=offset,
            stride=stride,
            source=source,
            params=tuple(params),
        )

    def read_source(self, reader: ElementReader) -> str:
        """Read a ``<source>`` element: its data array and its accessor.

        Returns:
            The source's ID, which is also the accessor's key
        """
        source_id = reader.require_attribute("id")

        for child in reader.children("source"):
            if child == "float_array":
                self.read_data_array(reader)
            elif child == "technique_common":
                for inner in reader.children("technique_common"):
                    if inner == "accessor":
                        self.accessors[source_id] = self.read_accessor(reader)
                    else:
                        reader.skip_element()
            else:
                # int_array, Name_array and friends are not kept
                reader.skip_element()

        return source_id

    def resolve(self, accessor: Accessor | str) -> NDArray[np.float64]:
        """Read the tuples an accessor describes.

        Args:
            accessor: Accessor, or the ID of the source that owns one

        Returns:
            (count, width) array of values

        Raises:
            UnresolvedReferenceError: If the accessor or its data array is unknown
            MalformedDocumentError: If the accessor reaches past the array end
        """
        if isinstance(accessor, str):
            key = accessor
            accessor = self.accessors.get(strip_fragment(key))
            if accessor is None:
                raise UnresolvedReferenceError(
                    f'No accessor for source "{key}"', self.file_name
                )

        data = self.arrays.get(accessor.source)
        if data is None:
            raise UnresolvedReferenceError(
                f'Accessor source "#{accessor.source}" not found in data library',
                self.file_name,
            )

        width = accessor.width
        if accessor.count == 0:
            return np.empty((0, width), dtype=np.float64)

        end = accessor.offset + (accessor.count - 1) * accessor.stride + width
        if end > len(data):
            raise MalformedDocumentError(
                f'Accessor over "#{accessor.source}" needs {end} values, '
                f"array holds {len(data)}",
                self.file_name,
            )

        starts = accessor.offset + np.arange(accessor.count) * accessor.stride
        index = starts[:, np.newaxis] + np.arange(width)[np.newaxis, :]
        return data.values[index]

    def __repr__(self) -> str:
        return f"DataLibrary({len(self.arrays)} arrays, {len(self.accessors)} accessors)"
