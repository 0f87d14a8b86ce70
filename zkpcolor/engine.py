"""
Interactive proof session.

``ZKPEngine`` owns one graph, its secret coloring and the live commitment
set, and walks the protocol::

    UNINITIALIZED -> COMMITTED -> CHALLENGED -> VERIFIED -> COMMITTED -> ...

Mutating operations are coroutines serialized by a single ``asyncio.Lock``,
so a challenge is never answered against a commitment set that is being
rebuilt. Protocol outcomes come back as ``ProtocolStatus`` values.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from .base import BaseVerifier
from .commitment import (
    CommitmentAudit,
    CommitmentScheme,
    check_commitment,
)
from .config import NUM_COLORS, ZKPConfig
from .errors import ProtocolStatus
from .graph import Graph, GenerationResult, GraphChallenger
from .solver import (
    ColoringResult,
    ColoringSolver,
    ExactColoringSolver,
    is_valid_coloring,
)

logger = logging.getLogger(__name__)


class ProtocolState(Enum):
    UNINITIALIZED = "uninitialized"
    COMMITTED = "committed"
    CHALLENGED = "challenged"
    VERIFIED = "verified"


@dataclass(frozen=True)
class Opening:
    """What the prover discloses for one vertex of a challenged edge."""
    vertex_id: int
    color: int
    nonce: str


@dataclass
class VerificationResult:
    """Result of answering one challenge."""
    status: ProtocolStatus
    is_valid: bool = False
    vertices: Tuple[int, ...] = ()
    colors: Tuple[int, ...] = ()
    edge_index: Optional[int] = None
    commitments_verified: bool = False
    degraded: bool = False

    @classmethod
    def not_applicable(cls) -> "VerificationResult":
        return cls(status=ProtocolStatus.NOT_APPLICABLE)

    @property
    def is_applicable(self) -> bool:
        return self.status != ProtocolStatus.NOT_APPLICABLE


def soundness_confidence(edge_count: int, rounds: int) -> float:
    """
    Percent probability that a prover without a valid 3-coloring would have
    been caught in at least one of ``rounds`` challenges:
    ``1 - (1 - 1/|E|)^rounds``.
    """
    if edge_count <= 0 or rounds <= 0:
        return 0.0
    return (1.0 - (1.0 - 1.0 / edge_count) ** rounds) * 100.0


@dataclass
class ConfidenceReport:
    rounds: int = 0
    successes: int = 0
    confidence: float = 0.0
    success_rate: float = 0.0
    edge_count: int = 0
    degraded: bool = False

    @property
    def formula(self) -> str:
        return f"1-(1-1/{self.edge_count})^{self.rounds}"


class EdgeVerifier(BaseVerifier):
    """
    - pick_edge_index(): choose the edge to challenge uniformly at random.
    - store_commitments(): keep the digests the prover published this round.
    - verify(edge_index, openings): check both openings against the stored
      digests, then check the two colors differ.
    """

    def __init__(self, rng: Optional[random.Random] = None, digest_length: Optional[int] = None):
        self.rng = rng or random.Random()
        self.digest_length = digest_length
        self.last_commitments: Dict[int, str] = {}

    def pick_edge_index(self, edge_count: int) -> Optional[int]:
        if edge_count <= 0:
            return None
        return self.rng.randrange(edge_count)

    def store_commitments(self, commitments: Mapping[int, str]) -> None:
        self.last_commitments = dict(commitments)

    def verify(self, challenge, solution) -> ProtocolStatus:
        opened_u, opened_v = solution
        for opening in (opened_u, opened_v):
            stored = self.last_commitments.get(opening.vertex_id)
            if stored is None or not check_commitment(opening.vertex_id, opening.color,
                                                      opening.nonce, stored, self.digest_length):
                logger.warning("Commitment for vertex %d did not open on edge %s",
                               opening.vertex_id, challenge)
                return ProtocolStatus.COMMITMENT_MISMATCH

        # The two colors must differ
        if opened_u.color == opened_v.color:
            return ProtocolStatus.INVALID_COLORING
        return ProtocolStatus.SUCCESS


class ZKPEngine:
    """A single, self-contained proof session."""

    def __init__(self, config: Optional[ZKPConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or ZKPConfig()
        self.config.validate()
        self._rng = rng or random.Random()
        self._solver = ColoringSolver(self.config.max_coloring_attempts, rng=self._rng)
        self._exact_solver = ExactColoringSolver()
        self._scheme = CommitmentScheme(self.config.nonce_bytes, self.config.digest_length)
        self._verifier = EdgeVerifier(self._rng, self.config.digest_length)
        self._lock = asyncio.Lock()
        self._graph: Optional[Graph] = None
        self._coloring: Dict[int, int] = {}
        self._degraded = False
        self._last_permutation: Optional[Tuple[int, ...]] = None
        self._reset_round_state()

    def _reset_round_state(self) -> None:
        self._state = ProtocolState.UNINITIALIZED
        self._selected_edge: Optional[int] = None
        self._revealed = set()
        self._all_revealed = False
        self._rounds = 0
        self._successes = 0

    # Session lifecycle

    async def new_session(self, vertex_count: Optional[int] = None) -> GenerationResult:
        """Generate, color and commit a fresh graph. Ends COMMITTED."""
        if vertex_count is None:
            vertex_count = self.config.default_vertex_count
        if vertex_count < 1:
            raise ValueError("vertex_count must be at least 1")
        async with self._lock:
            self._reset_round_state()
            challenger = GraphChallenger(vertex_count, self.config, self._rng,
                                         self._solver, self._exact_solver)
            generation = challenger.challenge()
            await self._install(generation.graph, generation.coloring)
            logger.info("New session: %r (generation attempts: %d, cycle fallback: %s)",
                        generation.graph, generation.attempts, generation.used_fallback)
            return generation

    async def load_session(self, graph: Graph,
                           coloring: Optional[Union[Mapping[int, int], Sequence[int]]] = None
                           ) -> ColoringResult:
        """
        Start a session on a caller-supplied graph. Without a coloring the
        randomized solver colors it; a supplied coloring that is not proper
        makes the session degraded.
        """
        if coloring is None:
            result = self._solver.solve(graph)
        else:
            if isinstance(coloring, Sequence):
                coloring = dict(enumerate(coloring))
            missing = [v for v in graph.vertices if v not in coloring]
            if missing:
                raise ValueError(f"Coloring has no color for vertices {missing}")
            if any(not 0 <= coloring[v] < NUM_COLORS for v in graph.vertices):
                raise ValueError(f"Colors must be in 0..{NUM_COLORS - 1}")
            colors = {v: coloring[v] for v in graph.vertices}
            result = ColoringResult(colors, is_valid_coloring(graph, colors), 0, "supplied")
        async with self._lock:
            self._reset_round_state()
            await self._install(graph, result)
            logger.info("Loaded session: %r", graph)
            return result

    async def _install(self, graph: Graph, result: ColoringResult) -> None:
        await self._scheme.create_commitments(result.coloring)
        self._graph = graph
        self._coloring = dict(result.coloring)
        self._revealed = set()
        self._all_revealed = False
        self._selected_edge = None
        self._degraded = not result.success
        self._last_permutation = None
        self._verifier.store_commitments(self._scheme.digests)
        self._state = ProtocolState.COMMITTED
        if self._degraded:
            logger.warning("Session is DEGRADED: the committed coloring is not a verified "
                           "3-coloring (%s)", result.method)

    # Protocol rounds

    async def select_edge(self, edge_index: int) -> ProtocolStatus:
        """Challenge one edge by index and reveal its endpoints."""
        async with self._lock:
            if self._state != ProtocolState.COMMITTED:
                return ProtocolStatus.NOT_APPLICABLE
            if (isinstance(edge_index, bool) or not isinstance(edge_index, int)
                    or not 0 <= edge_index < self._graph.number_of_edges):
                logger.info("Rejected challenge for edge index %r (graph has %d edges)",
                            edge_index, self._graph.number_of_edges)
                return ProtocolStatus.INVALID_EDGE_INDEX
            u, v = self._graph.edge(edge_index)
            self._selected_edge = edge_index
            self._revealed.update((u, v))
            self._state = ProtocolState.CHALLENGED
            return ProtocolStatus.SUCCESS

    async def verify(self) -> VerificationResult:
        """Answer the pending challenge and update the round statistics."""
        async with self._lock:
            if self._state != ProtocolState.CHALLENGED:
                return VerificationResult.not_applicable()
            edge_index = self._selected_edge
            openings = self._open(edge_index)
            status = self._verifier.verify(edge_index, openings)
            is_valid = status.is_success

            self._rounds += 1
            if is_valid:
                self._successes += 1
            self._state = ProtocolState.VERIFIED

            result = VerificationResult(
                status=status,
                is_valid=is_valid,
                vertices=tuple(o.vertex_id for o in openings),
                colors=tuple(o.color for o in openings),
                edge_index=edge_index,
                commitments_verified=status != ProtocolStatus.COMMITMENT_MISMATCH,
                degraded=self._degraded,
            )
            logger.info("Round %d: edge %d %s -> %s", self._rounds, edge_index,
                        result.vertices, "PASS" if is_valid else status.name)
            return result

    async def scramble_colors(self) -> ProtocolStatus:
        """
        Relabel every color class with one random permutation and commit to
        the result with fresh nonces. Clears the challenge and all reveals.
        """
        async with self._lock:
            if self._state not in (ProtocolState.COMMITTED, ProtocolState.VERIFIED):
                return ProtocolStatus.NOT_APPLICABLE
            permutation = list(range(NUM_COLORS))
            self._rng.shuffle(permutation)
            coloring = {v: permutation[c] for v, c in self._coloring.items()}

            await self._scheme.create_commitments(coloring)
            self._coloring = coloring
            self._last_permutation = tuple(permutation)
            self._verifier.store_commitments(self._scheme.digests)
            self._revealed.clear()
            self._all_revealed = False
            self._selected_edge = None
            self._state = ProtocolState.COMMITTED
            logger.debug("Colors scrambled with permutation %s", self._last_permutation)
            return ProtocolStatus.SUCCESS

    def pick_challenge(self) -> Optional[int]:
        """An edge index chosen by the verifier, or None for an edgeless graph."""
        if self._graph is None:
            return None
        return self._verifier.pick_edge_index(self._graph.number_of_edges)

    def _open(self, edge_index: int) -> Tuple[Opening, Opening]:
        u, v = self._graph.edge(edge_index)
        return tuple(Opening(w, self._coloring[w], self._scheme.record(w).nonce) for w in (u, v))

    def open_challenge(self) -> Optional[Tuple[Opening, Opening]]:
        """Openings for the currently challenged edge, if there is one."""
        if self._selected_edge is None:
            return None
        return self._open(self._selected_edge)

    # Display toggles; these never touch rounds or commitments

    def reveal_all(self) -> ProtocolStatus:
        if self._graph is None or self._state == ProtocolState.UNINITIALIZED:
            return ProtocolStatus.NOT_APPLICABLE
        self._revealed = set(self._graph.vertices)
        self._all_revealed = True
        return ProtocolStatus.SUCCESS

    def hide_all(self) -> ProtocolStatus:
        self._revealed.clear()
        self._all_revealed = False
        return ProtocolStatus.SUCCESS

    # Statistics and audits

    def get_confidence(self) -> ConfidenceReport:
        edge_count = self._graph.number_of_edges if self._graph is not None else 0
        if edge_count == 0:
            return ConfidenceReport(degraded=self._degraded)
        return ConfidenceReport(
            rounds=self._rounds,
            successes=self._successes,
            confidence=soundness_confidence(edge_count, self._rounds),
            success_rate=(self._successes / self._rounds * 100.0) if self._rounds else 0.0,
            edge_count=edge_count,
            degraded=self._degraded,
        )

    @staticmethod
    def check_commitment(vertex_id: int, color: int, nonce: str, expected_digest: str,
                         digest_length: Optional[int] = None) -> bool:
        return check_commitment(vertex_id, color, nonce, expected_digest, digest_length)

    def audit_commitment(self, vertex_id: int, color: int, nonce: str,
                         digest: Optional[str] = None) -> CommitmentAudit:
        """
        Manual check of one commitment against the published digest (or
        ``digest``). Vertex ids and colors outside the session are rejected.
        """
        if self._graph is None or not self._graph.has_vertex(vertex_id):
            max_id = max(self._graph.vertices) if self._graph is not None and len(self._graph) else 0
            return CommitmentAudit(ProtocolStatus.INVALID_INPUT, vertex_id, color, nonce,
                                   message=f"Vertex ID must be between 0 and {max_id}")
        if not 0 <= color < NUM_COLORS:
            return CommitmentAudit(ProtocolStatus.INVALID_INPUT, vertex_id, color, nonce,
                                   message="Color must be 0, 1, or 2")
        if not nonce:
            return CommitmentAudit(ProtocolStatus.INVALID_INPUT, vertex_id, color, nonce,
                                   message="Nonce must not be empty")
        return self._scheme.audit(vertex_id, color, nonce, digest)

    def check_colorability(self) -> bool:
        """Whether CP-SAT can 3-color the session graph at all."""
        if self._graph is None:
            return False
        return self._exact_solver.solve(self._graph).success

    # Read-only views

    @property
    def state(self) -> ProtocolState:
        return self._state

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @property
    def vertices(self) -> List[int]:
        return self._graph.vertices if self._graph is not None else []

    @property
    def edges(self) -> List[Tuple[int, int]]:
        return self._graph.edges if self._graph is not None else []

    @property
    def selected_edge(self) -> Optional[int]:
        return self._selected_edge

    @property
    def revealed(self) -> FrozenSet[int]:
        return frozenset(self._revealed)

    @property
    def all_revealed(self) -> bool:
        return self._all_revealed

    def is_revealed(self, vertex_id: int) -> bool:
        return vertex_id in self._revealed

    def color_of(self, vertex_id: int) -> Optional[int]:
        return self._coloring.get(vertex_id)

    def visible_color(self, vertex_id: int) -> Optional[int]:
        """Color a renderer may show: None while the vertex is hidden."""
        if vertex_id not in self._revealed:
            return None
        return self._coloring.get(vertex_id)

    @property
    def colors(self) -> Dict[int, int]:
        return dict(self._coloring)

    @property
    def commitments(self) -> Dict[int, str]:
        return self._scheme.digests

    @property
    def nonces(self) -> Dict[int, str]:
        return self._scheme.nonces

    @property
    def last_permutation(self) -> Optional[Tuple[int, ...]]:
        return self._last_permutation

    @property
    def stats(self) -> ConfidenceReport:
        return self.get_confidence()
