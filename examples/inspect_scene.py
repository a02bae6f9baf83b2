#!/usr/bin/env python3
"""Example: Parse a COLLADA document and print world-space node positions.

This script demonstrates the basic workflow for daeparse:
1. Parse a document into node, data and asset libraries
2. Walk the active visual scene and compose world matrices
3. Read vertex positions through a source's accessor

Run with: python examples/inspect_scene.py model.dae
"""

import sys

import numpy as np

from daeparse import ColladaError, parse_file
from daeparse.scene.transform import apply_to_points


def main():
    if len(sys.argv) < 2:
        print("usage: inspect_scene.py DOCUMENT")
        return 2

    print("daeparse - Scene Inspection Example")
    print("=" * 40)

    print(f"\n1. Parsing {sys.argv[1]}...")
    try:
        result = parse_file(sys.argv[1])
    except ColladaError as e:
        print(f"   Failed: {e}")
        return 1

    stats = result.stats()
    print(f"   Nodes: {stats['num_nodes']}, arrays: {stats['num_arrays']}")
    print(f"   Unit: {result.asset.unit_size:g} m, up axis: {result.asset.up_axis.value}")

    if result.root is None:
        print("\nNo active scene.")
        return 0

    # Convert everything to meters with Y up
    to_y_up = result.asset.to_y_up_matrix()
    scale = result.asset.unit_size

    print(f"\n2. World positions in scene '{result.root_node.label}':")
    for depth, node in result.nodes.iter_subtree(result.root):
        world = to_y_up @ result.nodes.world_transform(node.handle)
        origin = world[:3, 3] * scale
        print(f"   {'  ' * depth}{node.label}: {np.round(origin, 4)}")

    print("\n3. Geometry sources:")
    for geometry in result.geometries.values():
        for source_id in geometry.sources:
            try:
                values = result.resolve(source_id)
            except ColladaError as e:
                print(f"   {source_id}: unresolved ({e})")
                continue
            print(f"   {source_id}: {values.shape[0]} x {values.shape[1]}")
            if values.shape[1] == 3 and len(values):
                points = apply_to_points(to_y_up, values) * scale
                print(f"      bounds: {points.min(axis=0)} to {points.max(axis=0)}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
