"""
Site sampling and Lloyd's relaxation.

Lloyd's algorithm repeatedly moves every site to the centroid of its
Voronoi cell and rebuilds the diagram, spreading the sites more evenly and
producing rounder cells.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..utils.random import get_prng, set_random_seed
from .alea_prng import AleaPRNG
from .geometry import Rectangle, Vector
from .voronoi import VoronoiDiagram, build_voronoi, unique_sites

logger = structlog.get_logger()


class MapConfig(NamedTuple):
    """Configuration for polygon map generation."""
    width: float
    height: float
    samples: int
    lloyd_iterations: int = 2

    @classmethod
    def from_settings(cls, settings) -> "MapConfig":
        return cls(
            width=settings.map_width,
            height=settings.map_height,
            samples=settings.samples,
            lloyd_iterations=settings.lloyd_iterations,
        )

    @property
    def box(self) -> Rectangle:
        return Rectangle(0, 0, self.width, self.height)


@dataclass
class RelaxationResult:
    """Outcome of a Lloyd relaxation run."""
    diagram: VoronoiDiagram
    sites: List[Vector]
    displacements: List[float] = field(default_factory=list)

    @property
    def iterations(self) -> int:
        return len(self.displacements)


@dataclass
class PolygonMap:
    """A relaxed Voronoi tessellation of the map box."""
    config: MapConfig
    seed: str
    initial_sites: List[Vector]
    diagram: VoronoiDiagram
    displacements: List[float] = field(default_factory=list)

    @property
    def cells(self):
        return self.diagram.cells

    @property
    def edges(self):
        return self.diagram.edges


def sample_sites(box: Rectangle, count: int, prng: Optional[AleaPRNG] = None) -> List[Vector]:
    """
    Draw sites uniformly over the box.

    Duplicate draws collapse, so fewer than `count` sites may come back.

    Args:
        box: Sampling area
        count: Number of draws
        prng: Random source, the shared generator when omitted

    Returns:
        Unique sites in draw order
    """
    if count <= 0:
        raise ValueError(f"Sample count must be positive, got {count}")
    prng = prng or get_prng()
    return unique_sites(box.sample(prng) for _ in range(count))


def site_displacement(sites: Sequence[Vector], targets: Sequence[Vector]) -> float:
    """Total distance between paired sites and targets."""
    if not sites:
        return 0.0
    a = np.array([[s.x, s.y] for s in sites])
    b = np.array([[t.x, t.y] for t in targets])
    return float(np.linalg.norm(a - b, axis=1).sum())


def relax_sites(sites: Sequence[Vector], box: Rectangle) -> Tuple[VoronoiDiagram, List[Vector], float]:
    """
    One Lloyd step.

    Returns:
        Tuple of (diagram of the given sites, centroid sites, total displacement)
    """
    diagram = build_voronoi(sites, box)
    centroids = diagram.centroids()
    displacement = site_displacement(diagram.sites, centroids)
    # Coincident centroids collapse into one site
    return diagram, unique_sites(centroids), displacement


def lloyd_relaxation(sites: Sequence[Vector], box: Rectangle, iterations: int) -> RelaxationResult:
    """
    Apply Lloyd's relaxation.

    Runs `iterations` relaxation steps, then builds the diagram of the final
    site set, so iterations + 1 diagrams are constructed in total.

    Args:
        sites: Initial sites
        box: Bounding box
        iterations: Number of relaxation steps (0 builds the initial diagram)

    Returns:
        RelaxationResult with the final diagram and the displacement history
    """
    if iterations < 0:
        raise ValueError(f"Iteration count cannot be negative, got {iterations}")

    logger.info("Starting Lloyd's relaxation", iterations=iterations, sites=len(sites))

    current = list(sites)
    displacements = []
    for iteration in range(iterations):
        _, current, displacement = relax_sites(current, box)
        displacements.append(displacement)
        logger.info("Relaxation iteration complete",
                    iteration=iteration + 1,
                    sites=len(current),
                    displacement=round(displacement, 4))

    diagram = build_voronoi(current, box)
    return RelaxationResult(diagram=diagram, sites=current, displacements=displacements)


def generate_polygon_map(config: MapConfig, seed: str = None) -> PolygonMap:
    """
    Sample sites over the map box and relax their Voronoi tessellation.

    Args:
        config: Map configuration
        seed: Seed of the Alea random source

    Returns:
        PolygonMap with the final diagram
    """
    seed = seed or "default"
    logger.info("Generating polygon map",
                width=config.width, height=config.height,
                samples=config.samples, iterations=config.lloyd_iterations, seed=seed)

    box = config.box
    prng = set_random_seed(seed)
    initial_sites = sample_sites(box, config.samples, prng)

    result = lloyd_relaxation(initial_sites, box, config.lloyd_iterations)

    logger.info("Polygon map generated",
                cells=len(result.diagram.cells),
                edges=len(result.diagram.edges))

    return PolygonMap(
        config=config,
        seed=seed,
        initial_sites=initial_sites,
        diagram=result.diagram,
        displacements=result.displacements,
    )
