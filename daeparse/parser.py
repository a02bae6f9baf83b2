"""Document-level reader for COLLADA files.

``ColladaParser`` drives one depth-first pass over the token stream. It
dispatches the ``<asset>`` block, the geometry and visual scene libraries and
the ``<scene>`` selection to their readers, and skips everything else.
References between sections are kept as IDs; only the scene selection is
resolved while parsing.

Typical use::

    result = parse_file("model.dae")
    root = result.root_node
    matrix = result.nodes.world_transform(root.children[0])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from .core.config import ParserConfig
from .core.errors import (
    ColladaError,
    MalformedDocumentError,
    UnresolvedReferenceError,
)
from .data.library import Accessor, DataLibrary, Geometry
from .scene.asset import AssetInfo, read_asset_info
from .scene.node import Node, NodeLibrary
from .xml.reader import ElementReader
from .xml.tokens import ExpatTokenSource, TokenSource

logger = logging.getLogger(__name__)

ROOT_ELEMENT = "COLLADA"


class ParserState(Enum):
    """Where the parser currently is in the document."""

    START = "start"
    IN_ASSET = "in_asset"
    IN_STRUCTURE = "in_structure"
    IN_GEOMETRY_LIBRARY = "in_geometry_library"
    IN_SCENE_LIBRARY = "in_scene_library"
    SCENE_SELECTED = "scene_selected"
    DONE = "done"


@dataclass(frozen=True)
class ParseResult:
    """Everything read from one document.

    Attributes:
        nodes: Node arena and ID library
        data: Float arrays and accessors
        geometries: Geometry entries by ID
        asset: Unit scale and up-axis
        root: Handle of the active scene root, None if no scene was selected
        version: ``version`` attribute of the document element
        file_name: Identifier of the parsed document
    """

    nodes: NodeLibrary
    data: DataLibrary
    geometries: dict[str, Geometry]
    asset: AssetInfo
    root: int | None
    version: str | None
    file_name: str

    @property
    def root_node(self) -> Node | None:
        """The active scene root, if a ``<scene>`` selected one."""
        if self.root is None:
            return None
        return self.nodes.node(self.root)

    @property
    def accessors(self) -> dict[str, Accessor]:
        return self.data.accessors

    def resolve(self, accessor: Accessor | str) -> NDArray[np.float64]:
        """Read an accessor's tuples; see ``DataLibrary.resolve``."""
        return self.data.resolve(accessor)

    def stats(self) -> dict[str, Any]:
        """Return summary statistics about the parsed document."""
        root = self.root_node
        return {
            "file": self.file_name,
            "version": self.version,
            "unit_size": self.asset.unit_size,
            "up_axis": self.asset.up_axis.value,
            "num_nodes": len(self.nodes.nodes),
            "num_node_ids": len(self.nodes),
            "num_geometries": len(self.geometries),
            "num_arrays": len(self.data.arrays),
            "num_accessors": len(self.data.accessors),
            "root": root.id if root is not None else None,
        }


class ColladaParser:
    """Single-pass structural reader for one COLLADA document.

    A parser instance owns its node and data libraries until ``parse``
    hands them over in a ``ParseResult``. If parsing fails, the libraries
    are cleared so no partial result survives.
    """

    def __init__(self, source: TokenSource, config: ParserConfig | None = None):
        self.config = config or ParserConfig.default()
        self.reader = ElementReader(source)
        self.nodes = NodeLibrary(self.config)
        self.data = DataLibrary(self.config, file_name=self.reader.file_name)
        self.geometries: dict[str, Geometry] = {}
        self.asset = AssetInfo()
        self.root: int | None = None
        self.version: str | None = None
        self.state = ParserState.START

    @property
    def file_name(self) -> str:
        return self.reader.file_name

    def parse(self) -> ParseResult:
        """Read the whole document.

        Raises:
            ColladaError: Any structural or reference error; nothing is returned
        """
        if self.state is not ParserState.START:
            raise RuntimeError("A ColladaParser can only parse one document")

        try:
            self.read_contents()
        except ColladaError:
            self._fail()
            raise
        except ValidationError as e:
            error = self.reader.error(MalformedDocumentError, f"Invalid document value: {e}")
            self._fail()
            raise error from e

        result = ParseResult(
            nodes=self.nodes,
            data=self.data,
            geometries=self.geometries,
            asset=self.asset,
            root=self.root,
            version=self.version,
            file_name=self.file_name,
        )
        logger.info(
            "Parsed %s: %d nodes, %d arrays, %d accessors",
            self.file_name,
            len(self.nodes.nodes),
            len(self.data.arrays),
            len(self.data.accessors),
        )
        return result

    def _fail(self) -> None:
        logger.debug("Parse of %s failed in state %s", self.file_name, self.state.value)
        self._reset()

    def _reset(self) -> None:
        self.nodes.clear()
        self.data.clear()
        self.geometries.clear()
        self.asset = AssetInfo()
        self.root = None
        self.state = ParserState.DONE

    def read_contents(self) -> None:
        """Find the document element and read its structure."""
        reader = self.reader
        found = False
        while reader.read():
            if reader.is_element(ROOT_ELEMENT):
                found = True
                self.version = reader.optional_attribute("version")
                logger.debug("COLLADA version %s", self.version)
                self.read_structure()
            elif reader.is_element():
                reader.skip_element()

        if not found:
            raise reader.error(
                MalformedDocumentError, f"No <{ROOT_ELEMENT}> document element found"
            )
        self.state = ParserState.DONE

    def read_structure(self) -> None:
        """Dispatch the children of the document element."""
        reader = self.reader
        self.state = ParserState.IN_STRUCTURE

        for child in reader.children(ROOT_ELEMENT):
            if child == "asset":
                self.read_asset_info()
            elif child == "library_geometries":
                self.read_geometry_library()
            elif child == "library_visual_scenes":
                self.read_scene_library()
            elif child == "scene":
                self.read_scene()
            else:
                reader.skip_element()

    def read_asset_info(self) -> None:
        """Read an ``<asset>`` block; the last block in the document wins."""
        previous = self.state
        self.state = ParserState.IN_ASSET
        self.asset = read_asset_info(self.reader)
        self.state = previous

    def read_geometry_library(self) -> None:
        previous = self.state
        self.state = ParserState.IN_GEOMETRY_LIBRARY
        for child in self.reader.children("library_geometries"):
            if child == "geometry":
                self.read_geometry()
            else:
                self.reader.skip_element()
        self.state = previous

    def read_geometry(self) -> None:
        """Read the sources of a ``<geometry>``'s mesh.

        Vertices, primitives and everything else are left to the consumer
        and skipped here.
        """
        reader = self.reader
        geometry = Geometry(
            id=reader.require_attribute("id"),
            name=reader.optional_attribute("name", ""),
        )

        for child in reader.children("geometry"):
            if child == "mesh":
                for inner in reader.children("mesh"):
                    if inner == "source":
                        geometry.sources.append(self.data.read_source(reader))
                    else:
                        reader.skip_element()
            else:
                reader.skip_element()

        if geometry.id in self.geometries:
            logger.warning("Geometry %r declared twice, keeping the last one", geometry.id)
        self.geometries[geometry.id] = geometry

    def read_scene_library(self) -> None:
        previous = self.state
        self.state = ParserState.IN_SCENE_LIBRARY
        for child in self.reader.children("library_visual_scenes"):
            if child == "visual_scene":
                self.nodes.read_node(self.reader)
            else:
                self.reader.skip_element()
        self.state = previous

    def read_scene(self) -> None:
        """Select the active scene root from ``<instance_visual_scene>``.

        Raises:
            UnresolvedReferenceError: If the referenced visual scene is unknown
            MalformedDocumentError: If the scene instantiates more than one root
        """
        reader = self.reader
        for child in reader.children("scene"):
            if child != "instance_visual_scene":
                reader.skip_element()
                continue

            if self.root is not None:
                raise reader.error(
                    MalformedDocumentError, "Invalid scene containing multiple root nodes"
                )
            url = reader.require_attribute("url")
            if not url.startswith("#"):
                raise reader.error(
                    UnresolvedReferenceError, f"Unknown reference format in url {url!r}"
                )
            handle = self.nodes.lookup(url[1:])
            if handle is None:
                raise reader.error(
                    UnresolvedReferenceError,
                    f'Unable to resolve visual_scene reference "{url}"',
                )
            self.root = handle
            self.state = ParserState.SCENE_SELECTED
            reader.skip_element()


def parse_string(
    text: str | bytes,
    file_name: str = "<string>",
    config: ParserConfig | None = None,
) -> ParseResult:
    """Parse a COLLADA document held in memory."""
    config = config or ParserConfig.default()
    source = ExpatTokenSource.from_string(text, file_name, chunk_size=config.chunk_size)
    return ColladaParser(source, config).parse()


def parse_file(path: str | Path, config: ParserConfig | None = None) -> ParseResult:
    """Parse a COLLADA file.

    Args:
        path: Path to a .dae file

    Raises:
        FileNotFoundError: If the file does not exist
        ColladaError: If the document cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"COLLADA file not found: {path}")

    config = config or ParserConfig.default()
    with open(path, "rb") as f:
        source = ExpatTokenSource(f, file_name=str(path), chunk_size=config.chunk_size)
        return ColladaParser(source, config).parse()
