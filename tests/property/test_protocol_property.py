"""
Property-based tests for the proof protocol using Hypothesis.
"""

import asyncio
import random

from hypothesis import given, settings, strategies as st

from zkpcolor.commitment import check_commitment, commit
from zkpcolor.engine import ZKPEngine, soundness_confidence
from zkpcolor.graph import edge_key, generate_graph
from zkpcolor.solver import is_valid_coloring

vertex_ids = st.integers(min_value=0, max_value=10_000)
colors = st.integers(min_value=0, max_value=2)
nonces = st.text(min_size=1, max_size=40)


@given(vertex_ids, colors, nonces)
def test_commitment_opens(vertex_id, color, nonce):
    assert check_commitment(vertex_id, color, nonce, commit(vertex_id, color, nonce))


@given(vertex_ids, colors, colors, nonces)
def test_commitment_binds_color(vertex_id, color, other, nonce):
    digest = commit(vertex_id, color, nonce)
    assert check_commitment(vertex_id, other, nonce, digest) is (color == other)


@given(vertex_ids, colors, nonces, nonces)
def test_commitment_binds_nonce(vertex_id, color, nonce, other):
    digest = commit(vertex_id, color, nonce)
    assert check_commitment(vertex_id, color, other, digest) is (nonce == other)


@given(st.integers(min_value=1, max_value=200), st.integers(min_value=0, max_value=300))
def test_confidence_non_decreasing(edge_count, rounds):
    here = soundness_confidence(edge_count, rounds)
    assert 0.0 <= here <= 100.0
    assert soundness_confidence(edge_count, rounds + 1) >= here


@settings(max_examples=40, deadline=None)
@given(st.integers(min_value=1, max_value=20), st.integers(min_value=0, max_value=2**32))
def test_generated_graph_is_simple_and_colored(vertex_count, seed):
    result = generate_graph(vertex_count, rng=random.Random(seed))
    graph = result.graph

    keys = [edge_key(u, v) for u, v in graph.edges]
    assert len(keys) == len(set(keys))
    assert all(u != v for u, v in graph.edges)
    assert not result.degraded
    assert is_valid_coloring(graph, result.coloring.coloring)


async def play(vertex_count, seed, rounds):
    engine = ZKPEngine(rng=random.Random(seed))
    await engine.new_session(vertex_count)
    original = engine.colors
    for _ in range(rounds):
        await engine.select_edge(engine.pick_challenge())
        result = await engine.verify()
        assert result.is_valid
        await engine.scramble_colors()
        assert is_valid_coloring(engine.graph, engine.colors)
    return original, engine


@settings(max_examples=20, deadline=None)
@given(st.integers(min_value=2, max_value=16), st.integers(min_value=0, max_value=2**32),
       st.integers(min_value=1, max_value=8))
def test_rounds_keep_color_classes(vertex_count, seed, rounds):
    """Color classes survive any number of rounds; only their labels move."""
    original, engine = asyncio.run(play(vertex_count, seed, rounds))
    current = engine.colors

    mapping = {}
    for vertex, color in original.items():
        assert mapping.setdefault(color, current[vertex]) == current[vertex]
    assert len(set(mapping.values())) == len(mapping)
    stats = engine.get_confidence()
    assert stats.rounds == stats.successes == rounds
