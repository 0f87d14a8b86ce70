"""Configuration for graph generation, coloring, commitments and auto mode."""

from dataclasses import dataclass
from typing import Optional

NUM_COLORS = 3
COLOR_NAMES = ("Red", "Teal", "Yellow")


@dataclass
class ZKPConfig:
    """Configuration for a proof session."""
    # Topology generation
    default_vertex_count: int = 8
    outer_ring_size: int = 8
    max_generation_attempts: int = 50
    skip_two_probability: float = 0.6
    skip_four_probability: float = 0.3
    spoke_probability: float = 0.5
    outer_chord_probability: float = 0.4

    # Coloring
    max_coloring_attempts: int = 1000
    exact_fallback: bool = True

    # Commitments
    nonce_bytes: int = 16
    # Truncated digests are a display simplification; None keeps all 64 hex chars.
    digest_length: Optional[int] = None

    # Auto mode
    auto_interval: float = 0.2
    target_confidence: float = 99.9

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.default_vertex_count < 1:
            raise ValueError("default_vertex_count must be positive")
        if self.outer_ring_size < 3:
            raise ValueError("outer_ring_size must be at least 3")
        if self.max_generation_attempts <= 0:
            raise ValueError("max_generation_attempts must be positive")
        if self.max_coloring_attempts <= 0:
            raise ValueError("max_coloring_attempts must be positive")
        for name in ("skip_two_probability", "skip_four_probability",
                     "spoke_probability", "outer_chord_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1")
        if self.nonce_bytes < 8:
            raise ValueError("nonce_bytes must be at least 8 bytes")
        if self.digest_length is not None and not 16 <= self.digest_length <= 64:
            raise ValueError("digest_length must be between 16 and 64")
        if self.auto_interval < 0:
            raise ValueError("auto_interval must not be negative")
        if not 0.0 < self.target_confidence < 100.0:
            raise ValueError("target_confidence must be between 0 and 100")
