"""Scene hierarchy, transforms and asset metadata.

This module provides the node arena built from ``<visual_scene>`` elements,
the transform operations attached to nodes, and document-wide asset info.
"""

from .asset import AssetInfo, UpAxis, read_asset_info
from .node import Node, NodeLibrary
from .transform import (
    Transform,
    TransformKind,
    apply_to_points,
    compose_transforms,
    read_transform,
)

__all__ = [
    "AssetInfo",
    "UpAxis",
    "read_asset_info",
    "Node",
    "NodeLibrary",
    "Transform",
    "TransformKind",
    "apply_to_points",
    "compose_transforms",
    "read_transform",
]
