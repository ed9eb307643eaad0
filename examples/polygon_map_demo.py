#!/usr/bin/env python3
"""
Demonstration of polygon map generation.

Samples random sites, relaxes them with Lloyd's algorithm and prints what
the resulting tessellation looks like.
"""

import numpy as np

from polygon_map import MapConfig, generate_polygon_map
from polygon_map.config import Settings
from polygon_map.utils import configure_logging


def main():
    settings = Settings()
    configure_logging(settings.log_level, "console")

    config = MapConfig.from_settings(settings)

    print("=== Polygon Map Demo ===\n")

    print("1. Generating relaxed polygon map...")
    polygon_map = generate_polygon_map(config, seed=settings.seed)
    diagram = polygon_map.diagram
    print(f"   - Box: {config.width}x{config.height}")
    print(f"   - Sites sampled: {len(polygon_map.initial_sites)}")
    print(f"   - Cells: {len(diagram.cells)}")
    print(f"   - Edges: {len(diagram.edges)}")
    print(f"   - Circle events: {diagram.circle_event_count}")

    print("\n2. Lloyd's relaxation progress...")
    for i, displacement in enumerate(polygon_map.displacements, 1):
        print(f"   - Iteration {i}: total displacement {displacement:.2f}")

    print("\n3. Cell statistics...")
    areas = np.array([cell.area for cell in diagram.cells])
    print(f"   - Total area: {diagram.total_area():.2f} (box {config.box.area:.2f})")
    print(f"   - Mean cell area: {areas.mean():.2f}")
    print(f"   - Area std dev: {areas.std():.2f}")
    print(f"   - Smallest/largest: {areas.min():.2f} / {areas.max():.2f}")
    closed = [cell for cell in diagram.cells if cell.is_closed]
    vertex_counts = [len(cell.boundary_array()) for cell in closed]
    print(f"   - Closed polygons: {len(closed)}, mean vertex count {np.mean(vertex_counts):.2f}")
    lengths = np.linalg.norm(np.diff(diagram.edges_array(), axis=1)[:, 0], axis=1)
    print(f"   - Mean edge length: {lengths.mean():.2f}")

    print("\n4. Comparing with an unrelaxed map...")
    unrelaxed = generate_polygon_map(config._replace(lloyd_iterations=0), seed=settings.seed)
    raw_areas = np.array([cell.area for cell in unrelaxed.diagram.cells])
    print(f"   - Area std dev without relaxation: {raw_areas.std():.2f}")
    print(f"   - Area std dev with relaxation: {areas.std():.2f}")


if __name__ == "__main__":
    main()
