"""
Interactive zero-knowledge proof of graph 3-colorability.

A prover commits to a secret 3-coloring, the verifier challenges one edge at
a time, and only that edge's two colors are opened. Colors are relabeled and
recommitted between rounds, so repeated rounds build confidence without
revealing the coloring.
"""

from .auto import AutoProver
from .commitment import (
    CommitmentAudit,
    CommitmentRecord,
    CommitmentScheme,
    check_commitment,
    commit,
)
from .config import COLOR_NAMES, NUM_COLORS, ZKPConfig
from .engine import (
    ConfidenceReport,
    EdgeVerifier,
    Opening,
    ProtocolState,
    VerificationResult,
    ZKPEngine,
    soundness_confidence,
)
from .errors import ProtocolStatus, SolverError, ZKPColorError
from .graph import Graph, GenerationResult, GraphChallenger, generate_graph
from .solver import ColoringResult, ColoringSolver, ExactColoringSolver, is_valid_coloring

__version__ = "0.1.0"

__all__ = [
    "AutoProver",
    "COLOR_NAMES",
    "ColoringResult",
    "ColoringSolver",
    "CommitmentAudit",
    "CommitmentRecord",
    "CommitmentScheme",
    "ConfidenceReport",
    "EdgeVerifier",
    "ExactColoringSolver",
    "GenerationResult",
    "Graph",
    "GraphChallenger",
    "NUM_COLORS",
    "Opening",
    "ProtocolState",
    "ProtocolStatus",
    "SolverError",
    "VerificationResult",
    "ZKPColorError",
    "ZKPConfig",
    "ZKPEngine",
    "check_commitment",
    "commit",
    "generate_graph",
    "is_valid_coloring",
    "soundness_confidence",
]
