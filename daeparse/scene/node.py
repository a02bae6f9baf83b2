"""Scene node hierarchy and the ID-keyed node library.

Nodes live in a single arena owned by ``NodeLibrary`` and refer to each
other by integer handle. A node is owned either by its structural parent or,
for the root of a visual scene, by the library itself. Nodes that carry an
``id`` are additionally reachable through the ID map, which never implies a
second owner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.config import ParserConfig
from ..core.errors import ColladaError, DuplicateIdError, ExcessiveNestingError
from ..xml.reader import ElementReader
from .transform import TRANSFORM_TAGS, Transform, compose_transforms, read_transform

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """A point in the scene hierarchy.

    Attributes:
        handle: Index of this node in the library arena
        name: Display label (``name`` attribute)
        id: Library key, None for anonymous nodes
        sid: Scoped identifier, unique among siblings
        parent: Handle of the structural parent, None for library roots
        children: Handles of child nodes in document order
        transforms: Transform operations in document order
    """

    handle: int
    name: str = ""
    id: str | None = None
    sid: str | None = None
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    transforms: list[Transform] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.name or self.id or self.sid or f"<node {self.handle}>"

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def local_transform(self) -> NDArray[np.float64]:
        """Composed 4x4 matrix of this node's own transform operations."""
        return compose_transforms(self.transforms)


class NodeLibrary:
    """Arena of nodes plus the mapping from ID to node handle."""

    def __init__(self, config: ParserConfig | None = None):
        self.config = config or ParserConfig.default()
        self._nodes: list[Node] = []
        self._by_id: dict[str, int] = {}
        self._roots: list[int] = []

    def __len__(self) -> int:
        """Number of ID-registered nodes."""
        return len(self._by_id)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._by_id

    def __getitem__(self, node_id: str) -> Node:
        return self._nodes[self._by_id[node_id]]

    @property
    def nodes(self) -> Sequence[Node]:
        """Every node in the arena, in allocation order."""
        return self._nodes

    @property
    def roots(self) -> list[int]:
        """Handles of nodes owned directly by the library."""
        return list(self._roots)

    def ids(self) -> list[str]:
        return list(self._by_id)

    def lookup(self, node_id: str) -> int | None:
        """Return the handle registered under ``node_id``, if any."""
        return self._by_id.get(node_id)

    def node(self, handle: int) -> Node:
        return self._nodes[handle]

    def clear(self) -> None:
        self._nodes.clear()
        self._by_id.clear()
        self._roots.clear()

    def read_node(
        self,
        reader: ElementReader,
        parent: int | None = None,
        depth: int = 0,
    ) -> int:
        """Read a node element (``<node>`` or ``<visual_scene>``) and its subtree.

        The reader must be positioned on the element's opening tag and is
        left on its closing tag. If reading fails, every node allocated by
        this call is discarded again before the error propagates.

        Args:
            reader: Positioned element reader
            parent: Handle of the owning node, None to make a library root
            depth: Nesting depth of the element

        Returns:
            Handle of the new node

        Raises:
            DuplicateIdError: If a node ID is already registered
            ExcessiveNestingError: If nesting exceeds ``config.max_depth``
        """
        mark = len(self._nodes)
        try:
            return self._read_node(reader, parent, depth)
        except ColladaError:
            self._rollback(mark, parent)
            raise

    def _read_node(self, reader: ElementReader, parent: int | None, depth: int) -> int:
        if depth > self.config.max_depth:
            raise reader.error(
                ExcessiveNestingError,
                f"Node nesting deeper than {self.config.max_depth} levels",
            )

        element = reader.name
        handle = len(self._nodes)
        node = Node(
            handle=handle,
            name=reader.optional_attribute("name", ""),
            id=reader.optional_attribute("id"),
            sid=reader.optional_attribute("sid"),
            parent=parent,
        )
        self._nodes.append(node)
        if parent is None:
            self._roots.append(handle)
        else:
            self._nodes[parent].children.append(handle)

        for child in reader.children(element):
            if child in TRANSFORM_TAGS:
                node.transforms.append(read_transform(reader, child))
            elif child == "node":
                self._read_node(reader, handle, depth + 1)
            else:
                reader.skip_element()

        if node.id is not None:
            self._register(reader, node)
        return handle

    def _register(self, reader: ElementReader, node: Node) -> None:
        if node.id in self._by_id:
            raise reader.error(DuplicateIdError, f'Node ID "{node.id}" declared twice')
        self._by_id[node.id] = node.handle
        logger.debug("Registered node %r (handle %d)", node.id, node.handle)

    def _rollback(self, mark: int, parent: int | None) -> None:
        for node in self._nodes[mark:]:
            if node.id is not None and self._by_id.get(node.id) == node.handle:
                del self._by_id[node.id]
        del self._nodes[mark:]
        self._roots = [h for h in self._roots if h < mark]
        if parent is not None and parent < mark:
            owner = self._nodes[parent]
            owner.children = [h for h in owner.children if h < mark]

    def iter_subtree(self, handle: int) -> Iterator[tuple[int, Node]]:
        """Depth-first walk below ``handle``, yielding (depth, node) pairs."""
        stack = [(0, handle)]
        while stack:
            depth, current = stack.pop()
            node = self._nodes[current]
            yield depth, node
            for child in reversed(node.children):
                stack.append((depth + 1, child))

    def ancestry(self, handle: int) -> list[int]:
        """Handles from the library root down to ``handle`` (inclusive)."""
        chain = []
        current: int | None = handle
        while current is not None:
            chain.append(current)
            current = self._nodes[current].parent
        chain.reverse()
        return chain

    def world_transform(self, handle: int) -> NDArray[np.float64]:
        """Compose local transforms from the library root down to ``handle``."""
        result = np.eye(4, dtype=np.float64)
        for current in self.ancestry(handle):
            result = result @ self._nodes[current].local_transform()
        return result

    def __repr__(self) -> str:
        return (
            f"NodeLibrary({len(self._nodes)} nodes, "
            f"{len(self._by_id)} ids, {len(self._roots)} roots)"
        )
