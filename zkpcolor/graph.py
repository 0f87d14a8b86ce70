"""
Graph model and 3-colorable topology generation.

Vertices are plain integer ids. Edges keep their insertion order because the
verifier challenges edges by index; adjacency queries go through a
``networkx.Graph`` kept in step with the edge list.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import networkx as nx

from .base import BaseChallenger
from .config import ZKPConfig
from .solver import ColoringResult, ColoringSolver, ExactColoringSolver

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


def edge_key(u: int, v: int) -> Edge:
    """Normalized (min, max) key of an unordered edge."""
    return (u, v) if u < v else (v, u)


class Graph:
    """
    Vertex set plus an ordered, indexable edge list.

    No self-loops, no parallel edges, and every edge references existing
    vertices. ``outer_ring`` and ``inner_ring`` record the ring partition the
    generator used; a hand-built graph has everything on the outer ring.
    """

    def __init__(self, vertices: Iterable[int] = (), edges: Iterable[Edge] = (),
                 outer_ring: Optional[Sequence[int]] = None,
                 inner_ring: Sequence[int] = ()):
        self._graph = nx.Graph()
        self._edges: List[Edge] = []
        self._index: Dict[Edge, int] = {}

        for vertex in vertices:
            self.add_vertex(vertex)
        for u, v in edges:
            self.add_edge(u, v)

        self.outer_ring = tuple(outer_ring) if outer_ring is not None else tuple(self.vertices)
        self.inner_ring = tuple(inner_ring)

    @classmethod
    def cycle(cls, n: int) -> "Graph":
        """Plain n-cycle on vertices 0..n-1."""
        vertices = list(range(n))
        return cls(vertices, _ring_edges(vertices))

    def add_vertex(self, vertex: int) -> None:
        self._graph.add_node(vertex)

    def add_edge(self, u: int, v: int) -> bool:
        """
        Append edge (u, v). Returns False when it would be a self-loop or a
        duplicate of an existing unordered pair; nothing is added then.
        """
        if u not in self._graph or v not in self._graph:
            raise ValueError(f"Edge ({u}, {v}) references a missing vertex")
        if u == v:
            return False
        key = edge_key(u, v)
        if key in self._index:
            return False
        self._index[key] = len(self._edges)
        self._edges.append((u, v))
        self._graph.add_edge(u, v)
        return True

    @property
    def vertices(self) -> List[int]:
        return list(self._graph.nodes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def number_of_vertices(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def number_of_edges(self) -> int:
        return len(self._edges)

    def edge(self, index: int) -> Edge:
        return self._edges[index]

    def edge_index(self, u: int, v: int) -> Optional[int]:
        return self._index.get(edge_key(u, v))

    def has_vertex(self, vertex: int) -> bool:
        return vertex in self._graph

    def has_edge(self, u: int, v: int) -> bool:
        return edge_key(u, v) in self._index

    def neighbors(self, vertex: int) -> List[int]:
        return list(self._graph.neighbors(vertex))

    def degree(self, vertex: int) -> int:
        return self._graph.degree(vertex)

    def is_connected(self) -> bool:
        if self.number_of_vertices == 0:
            return False
        return nx.is_connected(self._graph)

    def to_networkx(self) -> nx.Graph:
        """Independent copy for callers that want networkx algorithms."""
        return self._graph.copy()

    def __len__(self):
        return self.number_of_vertices

    def __repr__(self):
        return f"Graph(vertices={self.number_of_vertices}, edges={self.number_of_edges})"


def _ring_edges(ring: Sequence[int]) -> List[Edge]:
    n = len(ring)
    return [(ring[i], ring[(i + 1) % n]) for i in range(n)]


def _rings(vertex_count: int, outer_size: int) -> Tuple[List[int], List[int]]:
    if vertex_count <= outer_size:
        return list(range(vertex_count)), []
    return list(range(outer_size)), list(range(outer_size, vertex_count))


def _spoke(inner_position: int, inner_count: int, outer_size: int) -> int:
    # Inner vertex i hangs off the outer vertex at the proportional position.
    return (inner_position * outer_size) // inner_count


def build_topology(vertex_count: int, config: ZKPConfig, rng: random.Random) -> Graph:
    """
    One randomized topology.

    Up to ``outer_ring_size`` vertices form a single ring with random chords
    two steps ahead, plus chords four steps ahead from even vertices only
    (odd ones would close 4-cliques). Larger graphs get an outer and an inner
    ring joined by spokes, with random chords on the outer ring.
    """
    outer, inner = _rings(vertex_count, config.outer_ring_size)
    graph = Graph(outer + inner, outer_ring=outer, inner_ring=inner)

    for u, v in _ring_edges(outer):
        graph.add_edge(u, v)

    if not inner:
        n = len(outer)
        for i in range(n):
            if rng.random() < config.skip_two_probability:
                graph.add_edge(i, (i + 2) % n)
        for i in range(0, n, 2):
            if rng.random() < config.skip_four_probability:
                graph.add_edge(i, (i + 4) % n)
        return graph

    for u, v in _ring_edges(inner):
        graph.add_edge(u, v)

    outer_size = len(outer)
    for i, vertex in enumerate(inner):
        first = _spoke(i, len(inner), outer_size)
        graph.add_edge(vertex, first)
        if rng.random() < config.spoke_probability:
            graph.add_edge(vertex, (first + 1) % outer_size)

    for i in range(outer_size):
        if rng.random() < config.outer_chord_probability:
            graph.add_edge(i, (i + 2) % outer_size)

    return graph


def build_cycle_topology(vertex_count: int, config: ZKPConfig) -> Graph:
    """Rings and spokes only, with no random chords."""
    outer, inner = _rings(vertex_count, config.outer_ring_size)
    graph = Graph(outer + inner, outer_ring=outer, inner_ring=inner)
    for u, v in _ring_edges(outer) + _ring_edges(inner):
        graph.add_edge(u, v)
    for i, vertex in enumerate(inner):
        graph.add_edge(vertex, _spoke(i, len(inner), len(outer)))
    return graph


@dataclass
class GenerationResult:
    """A generated graph together with the coloring found for it."""
    graph: Graph
    coloring: ColoringResult
    attempts: int
    used_fallback: bool = False

    @property
    def degraded(self) -> bool:
        return not self.coloring.success


def generate_graph(vertex_count: int, config: Optional[ZKPConfig] = None,
                   rng: Optional[random.Random] = None,
                   solver: Optional[ColoringSolver] = None,
                   exact_solver: Optional[ExactColoringSolver] = None) -> GenerationResult:
    """
    Build a topology the solver can 3-color.

    Random topologies are retried up to ``max_generation_attempts`` times.
    After that the rings-and-spokes topology is used and recolored; if the
    randomized solver cannot color even that, CP-SAT is asked (when
    ``exact_fallback`` is on) before settling for the degraded coloring.
    """
    if vertex_count < 1:
        raise ValueError("vertex_count must be at least 1")
    config = config or ZKPConfig()
    rng = rng or random.Random()
    solver = solver or ColoringSolver(config.max_coloring_attempts, rng=rng)

    for attempt in range(1, config.max_generation_attempts + 1):
        graph = build_topology(vertex_count, config, rng)
        result = solver.solve(graph)
        if result.success:
            logger.debug("Generated %r after %d attempt(s)", graph, attempt)
            return GenerationResult(graph, result, attempt)
        logger.debug("Topology attempt %d not colorable by solver, regenerating", attempt)

    logger.info("No colorable random topology after %d attempts, using cycle topology",
                config.max_generation_attempts)
    graph = build_cycle_topology(vertex_count, config)
    result = solver.solve(graph)
    if not result.success and config.exact_fallback:
        exact = (exact_solver or ExactColoringSolver()).solve(graph)
        if exact.success:
            result = exact
    return GenerationResult(graph, result, config.max_generation_attempts, used_fallback=True)


class GraphChallenger(BaseChallenger):
    """
    Challenger that publishes a freshly generated 3-colorable graph.
    """

    def __init__(self, vertex_count: int, config: Optional[ZKPConfig] = None,
                 rng: Optional[random.Random] = None,
                 solver: Optional[ColoringSolver] = None,
                 exact_solver: Optional[ExactColoringSolver] = None):
        self.vertex_count = vertex_count
        self.config = config or ZKPConfig()
        self.rng = rng or random.Random()
        self.solver = solver
        self.exact_solver = exact_solver

    def challenge(self) -> GenerationResult:
        return generate_graph(self.vertex_count, self.config, self.rng,
                              self.solver, self.exact_solver)
