"""
Role interfaces for the interactive proof.

A challenger publishes the statement (a graph), a solver plays the prover's
private part (finding a coloring), and a verifier checks what the prover
opens in response to a challenge.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .engine import Opening
    from .errors import ProtocolStatus
    from .graph import GenerationResult, Graph
    from .solver import ColoringResult


class BaseChallenger(ABC):
    @abstractmethod
    def challenge(self) -> "GenerationResult":
        """Publish a fresh graph together with the prover's private coloring."""


class BaseSolver(ABC):
    @abstractmethod
    def solve(self, challenge: "Graph") -> "ColoringResult":
        """
        Color the graph. The result reports whether the coloring is proper,
        so a fallback is never mistaken for a real solution.
        """


class BaseVerifier(ABC):
    @abstractmethod
    def verify(self, challenge: int, solution: Sequence["Opening"]) -> "ProtocolStatus":
        """Check the two openings for the challenged edge index."""
