"""
Coloring solvers.

``ColoringSolver`` is the prover's everyday solver: a randomized sequential
pass with bounded retries. ``ExactColoringSolver`` uses OR-Tools CP-SAT and
either finds a coloring or proves that none exists.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Optional

from ortools.sat.python import cp_model

from .base import BaseSolver
from .config import NUM_COLORS
from .errors import ProtocolStatus, SolverError

logger = logging.getLogger(__name__)

Coloring = Dict[int, int]


@dataclass
class ColoringResult:
    """
    Outcome of a coloring run.

    ``success`` is False for the ``id mod 3`` fallback, which is not
    guaranteed to be a proper coloring and must not be presented as one.
    """
    coloring: Coloring = field(default_factory=dict)
    success: bool = False
    attempts: int = 0
    method: str = "greedy"

    @property
    def status(self) -> ProtocolStatus:
        return ProtocolStatus.SUCCESS if self.success else ProtocolStatus.NO_COLORING_FOUND


def is_valid_coloring(graph, coloring: Coloring) -> bool:
    """True when every edge joins two colored vertices of different colors."""
    for u, v in graph.edges:
        if u not in coloring or v not in coloring:
            return False
        if coloring[u] == coloring[v]:
            return False
    return True


class ColoringSolver(BaseSolver):
    """
    - solve(graph): visit vertices in ascending id order, excluding colors
      already used by colored neighbors.
    - A vertex no neighbor constrains yet gets a uniformly random color; a
      constrained vertex gets the lowest-index color still available.
    - A pass that meets a vertex with all colors excluded is abandoned and the
      whole pass is retried, up to max_attempts times.
    """

    def __init__(self, max_attempts: int = 1000, rng: Optional[random.Random] = None,
                 num_colors: int = NUM_COLORS):
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()
        self.num_colors = num_colors

    def solve(self, challenge) -> ColoringResult:
        graph = challenge
        for attempt in range(1, self.max_attempts + 1):
            coloring = self._attempt(graph)
            if coloring is not None and is_valid_coloring(graph, coloring):
                return ColoringResult(coloring, True, attempt, "greedy")

        logger.info("No valid %d-coloring found for %r after %d attempts, "
                    "falling back to id mod %d", self.num_colors, graph,
                    self.max_attempts, self.num_colors)
        fallback = {vertex: vertex % self.num_colors for vertex in graph.vertices}
        return ColoringResult(fallback, False, self.max_attempts, "fallback")

    def _attempt(self, graph) -> Optional[Coloring]:
        coloring: Coloring = {}
        for vertex in sorted(graph.vertices):
            used = {coloring[n] for n in graph.neighbors(vertex) if n in coloring}
            available = [c for c in range(self.num_colors) if c not in used]
            if not available:
                return None
            if used:
                coloring[vertex] = available[0]
            else:
                coloring[vertex] = self.rng.choice(available)
        return coloring


class ExactColoringSolver(BaseSolver):
    """
    Solve the graph k-coloring feasibility problem using CP-SAT:
     - Each vertex has an integer var in [0..k-1]
     - For each edge (u,v), color[u] != color[v]
    An infeasible model means the graph has no k-coloring at all.
    """

    def __init__(self, num_colors: int = NUM_COLORS, time_limit: Optional[float] = None):
        self.num_colors = num_colors
        self.time_limit = time_limit

    def solve(self, challenge) -> ColoringResult:
        graph = challenge
        model = cp_model.CpModel()

        color_vars = {v: model.new_int_var(0, self.num_colors - 1, f'color_{v}')
                      for v in graph.vertices}
        for (u, v) in graph.edges:
            model.add(color_vars[u] != color_vars[v])

        solver = cp_model.CpSolver()
        if self.time_limit is not None:
            solver.parameters.max_time_in_seconds = self.time_limit
        status = solver.solve(model)

        if status == cp_model.FEASIBLE or status == cp_model.OPTIMAL:
            coloring = {v: solver.value(var) for v, var in color_vars.items()}
            return ColoringResult(coloring, True, 1, "exact")
        if status == cp_model.INFEASIBLE:
            logger.info("CP-SAT proved %r has no %d-coloring", graph, self.num_colors)
            return ColoringResult({}, False, 1, "exact")
        if status == cp_model.UNKNOWN:
            logger.warning("CP-SAT gave up on %r within the time limit", graph)
            return ColoringResult({}, False, 1, "exact")
        raise SolverError(f"CP-SAT returned {solver.status_name(status)}",
                          ProtocolStatus.NO_COLORING_FOUND)
