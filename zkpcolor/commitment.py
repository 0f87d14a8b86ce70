"""
Hash commitments binding each vertex to its color.

A commitment is SHA-256 over ``"{vertex_id}-{color}-{nonce}"``. The nonce
hides the color until it is opened; the hash binds the prover to it. Every
commit and every check goes through ``commit``; there is no second hash.
"""

import asyncio
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .config import COLOR_NAMES
from .errors import ProtocolStatus

logger = logging.getLogger(__name__)

FULL_DIGEST_LENGTH = 64
MIN_DIGEST_LENGTH = 16


def commitment_input(vertex_id: int, color: int, nonce: str) -> str:
    return f"{vertex_id}-{color}-{nonce}"


def commit(vertex_id: int, color: int, nonce: str, digest_length: Optional[int] = None) -> str:
    """
    Hex SHA-256 digest of the vertex/color/nonce triple.

    ``digest_length`` keeps only a hex prefix. Short digests are easier to
    read on screen but weaken binding; they are a teaching aid only.
    """
    digest = hashlib.sha256(commitment_input(vertex_id, color, nonce).encode("utf-8")).hexdigest()
    if digest_length:
        return digest[:digest_length]
    return digest


def digests_equal(calculated: str, expected: str) -> bool:
    return hmac.compare_digest(calculated.encode("utf-8"), expected.encode("utf-8"))


def check_commitment(vertex_id: int, color: int, nonce: str, expected_digest: str,
                     digest_length: Optional[int] = None) -> bool:
    """
    Recompute the digest and compare it with ``expected_digest``.

    Works without any session. The full 64-char digest is expected unless
    the caller names the truncated ``digest_length`` the commitment was made
    with; a prefix of a full digest does not open on its own.
    """
    if not expected_digest:
        return False
    length = digest_length or FULL_DIGEST_LENGTH
    if not MIN_DIGEST_LENGTH <= length <= FULL_DIGEST_LENGTH:
        return False
    expected = expected_digest.strip().lower()
    if len(expected) != length:
        return False
    calculated = commit(vertex_id, color, nonce, length)
    return digests_equal(calculated, expected)


@dataclass(frozen=True)
class CommitmentRecord:
    nonce: str
    digest: str


@dataclass
class CommitmentAudit:
    """Step-by-step account of one commitment check."""
    status: ProtocolStatus
    vertex_id: Optional[int] = None
    color: Optional[int] = None
    nonce: Optional[str] = None
    input_string: Optional[str] = None
    calculated: Optional[str] = None
    stored: Optional[str] = None
    message: str = ""

    @property
    def match(self) -> bool:
        return self.status == ProtocolStatus.SUCCESS

    @property
    def color_name(self) -> Optional[str]:
        if self.color is None or not 0 <= self.color < len(COLOR_NAMES):
            return None
        return COLOR_NAMES[self.color]


class CommitmentScheme:
    """
    Holds the live commitment set for one session.

    ``create_commitments`` replaces the whole set at once with fresh nonces;
    records from earlier colorings are dropped, never reused.
    """

    def __init__(self, nonce_bytes: int = 16, digest_length: Optional[int] = None):
        self.nonce_bytes = nonce_bytes
        self.digest_length = digest_length
        self.generation = 0
        self._records: Dict[int, CommitmentRecord] = {}

    def new_nonce(self) -> str:
        return secrets.token_hex(self.nonce_bytes)

    def commit(self, vertex_id: int, color: int, nonce: str) -> str:
        return commit(vertex_id, color, nonce, self.digest_length)

    def build_records(self, coloring: Mapping[int, int]) -> Dict[int, CommitmentRecord]:
        records = {}
        for vertex_id, color in coloring.items():
            nonce = self.new_nonce()
            records[vertex_id] = CommitmentRecord(nonce, self.commit(vertex_id, color, nonce))
        return records

    async def create_commitments(self, coloring: Mapping[int, int]) -> Dict[int, CommitmentRecord]:
        """
        Commit to every vertex of ``coloring``.

        Hashing runs in a worker thread; the previous set stays in place until
        the new one is complete, so no caller sees a half-built set.
        """
        records = await asyncio.to_thread(self.build_records, dict(coloring))
        self._records = records
        self.generation += 1
        logger.debug("Created commitment set #%d for %d vertices", self.generation, len(records))
        return dict(records)

    def clear(self) -> None:
        self._records = {}

    def record(self, vertex_id: int) -> Optional[CommitmentRecord]:
        return self._records.get(vertex_id)

    @property
    def digests(self) -> Dict[int, str]:
        return {v: r.digest for v, r in self._records.items()}

    @property
    def nonces(self) -> Dict[int, str]:
        return {v: r.nonce for v, r in self._records.items()}

    def verify(self, vertex_id: int, color: int, nonce: str, digest: Optional[str] = None) -> bool:
        """Check an opening against ``digest``, or against the stored digest."""
        if digest is None:
            record = self._records.get(vertex_id)
            if record is None:
                return False
            digest = record.digest
        return digests_equal(self.commit(vertex_id, color, nonce), digest)

    def audit(self, vertex_id: int, color: int, nonce: str,
              digest: Optional[str] = None) -> CommitmentAudit:
        """
        Recompute a commitment and report every intermediate value.
        Without a digest to compare against, the stored one is used; if
        there is none the status is NOT_APPLICABLE.
        """
        if digest is None:
            record = self._records.get(vertex_id)
            digest = record.digest if record else None
        audit = CommitmentAudit(
            status=ProtocolStatus.NOT_APPLICABLE,
            vertex_id=vertex_id,
            color=color,
            nonce=nonce,
            input_string=commitment_input(vertex_id, color, nonce),
            calculated=self.commit(vertex_id, color, nonce),
            stored=digest,
        )
        if digest is None:
            audit.message = "No commitment to compare against"
        elif digests_equal(audit.calculated, digest):
            audit.status = ProtocolStatus.SUCCESS
            audit.message = (f"Vertex {vertex_id} was committed to color {color} "
                             f"({audit.color_name}) with nonce {nonce!r}")
        else:
            audit.status = ProtocolStatus.COMMITMENT_MISMATCH
            audit.message = "Calculated digest does not match the commitment"
        return audit
