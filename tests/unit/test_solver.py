"""
Unit tests for the coloring solvers.
"""

import itertools
import random

import networkx as nx
import pytest

from zkpcolor.errors import ProtocolStatus
from zkpcolor.graph import Graph
from zkpcolor.solver import (
    ColoringResult,
    ColoringSolver,
    ExactColoringSolver,
    is_valid_coloring,
)


def complete_graph(n):
    return Graph(range(n), itertools.combinations(range(n), 2))


class TestIsValidColoring:
    """Test coloring validation."""

    def test_proper_coloring(self):
        graph = Graph.cycle(4)
        assert is_valid_coloring(graph, {0: 0, 1: 1, 2: 0, 3: 1})

    def test_conflicting_edge(self):
        graph = Graph.cycle(4)
        assert not is_valid_coloring(graph, {0: 0, 1: 0, 2: 1, 3: 2})

    def test_uncolored_vertex(self):
        graph = Graph.cycle(4)
        assert not is_valid_coloring(graph, {0: 0, 1: 1, 2: 0})

    def test_edgeless_graph(self):
        assert is_valid_coloring(Graph([0, 1]), {0: 0, 1: 0})


class TestColoringSolver:
    """Test the randomized sequential solver."""

    def test_colors_odd_cycle(self):
        """Test an odd cycle gets a proper coloring."""
        graph = Graph.cycle(7)
        result = ColoringSolver(rng=random.Random(1)).solve(graph)

        assert result.success
        assert result.status == ProtocolStatus.SUCCESS
        assert result.method == "greedy"
        assert result.attempts >= 1
        assert is_valid_coloring(graph, result.coloring)

    def test_constrained_vertex_takes_lowest_color(self):
        """Test constrained vertices get the lowest available color."""
        graph = Graph([0, 1, 2], [(0, 1), (1, 2)])
        for seed in range(20):
            coloring = ColoringSolver(rng=random.Random(seed)).solve(graph).coloring
            assert coloring[1] == min({0, 1, 2} - {coloring[0]})
            assert coloring[2] == min({0, 1, 2} - {coloring[1]})

    def test_unconstrained_vertex_is_random(self):
        """Test an unconstrained vertex is not always given the same color."""
        graph = Graph([0])
        seen = {ColoringSolver(rng=random.Random(seed)).solve(graph).coloring[0]
                for seed in range(60)}

        assert seen == {0, 1, 2}

    def test_k4_falls_back(self):
        """Test an uncolorable graph yields the flagged id mod 3 fallback."""
        graph = complete_graph(4)
        result = ColoringSolver(max_attempts=5, rng=random.Random(0)).solve(graph)

        assert not result.success
        assert result.status == ProtocolStatus.NO_COLORING_FOUND
        assert result.method == "fallback"
        assert result.attempts == 5
        assert result.coloring == {0: 0, 1: 1, 2: 2, 3: 0}
        assert not is_valid_coloring(graph, result.coloring)

    def test_default_result(self):
        result = ColoringResult()
        assert not result.success
        assert result.coloring == {}


class TestExactColoringSolver:
    """Test the CP-SAT solver."""

    def test_petersen_graph(self):
        """Test a 3-colorable graph is solved."""
        petersen = nx.petersen_graph()
        graph = Graph(petersen.nodes, petersen.edges)
        result = ExactColoringSolver().solve(graph)

        assert result.success
        assert result.method == "exact"
        assert is_valid_coloring(graph, result.coloring)
        assert set(result.coloring.values()) <= {0, 1, 2}

    def test_k4_is_infeasible(self):
        """Test CP-SAT proves K4 has no 3-coloring."""
        result = ExactColoringSolver().solve(complete_graph(4))

        assert not result.success
        assert result.coloring == {}

    @pytest.mark.parametrize("num_colors,expected", [(3, False), (4, True)])
    def test_color_count(self, num_colors, expected):
        """Test the number of colors is honored."""
        result = ExactColoringSolver(num_colors=num_colors).solve(complete_graph(4))
        assert result.success is expected
