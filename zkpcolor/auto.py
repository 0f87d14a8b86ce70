"""
Auto mode: keep challenging random edges until the target confidence.
"""

import asyncio
import logging
from typing import List, Optional

from .engine import ProtocolState, VerificationResult, ZKPEngine
from .errors import ProtocolStatus

logger = logging.getLogger(__name__)


class AutoProver:
    """
    Drives rounds on an engine from a background task.

    Each round scrambles the previous round's colors (if any), lets the
    verifier pick an edge, and verifies it. ``stop()`` only prevents further
    rounds: a round that has started always runs to completion.
    """

    def __init__(self, engine: ZKPEngine, interval: Optional[float] = None,
                 target_confidence: Optional[float] = None,
                 max_rounds: Optional[int] = None):
        self.engine = engine
        self.interval = engine.config.auto_interval if interval is None else interval
        self.target_confidence = (engine.config.target_confidence
                                  if target_confidence is None else target_confidence)
        self.max_rounds = max_rounds
        self.history: List[VerificationResult] = []
        self._task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self) -> None:
        """Request a stop and wait for the round in flight to finish."""
        self._stopping.set()
        if self._task is not None:
            await self._task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def run_round(self) -> Optional[VerificationResult]:
        """One full challenge round; None when there is nothing to challenge."""
        engine = self.engine
        if engine.state == ProtocolState.VERIFIED:
            await engine.scramble_colors()

        edge_index = engine.pick_challenge()
        if edge_index is None:
            return None
        if await engine.select_edge(edge_index) != ProtocolStatus.SUCCESS:
            return None

        result = await engine.verify()
        self.history.append(result)
        return result

    def _target_reached(self) -> bool:
        return self.engine.get_confidence().confidence >= self.target_confidence

    async def _run(self) -> None:
        logger.info("Auto mode started - targeting %.1f%% confidence", self.target_confidence)
        rounds = 0
        try:
            while not self._stopping.is_set():
                result = await self.run_round()
                if result is None:
                    logger.info("Auto mode has no edge to challenge")
                    break
                rounds += 1
                stats = self.engine.get_confidence()
                logger.info("[AUTO] Edge V%d <-> V%d %s, confidence %.1f%%",
                            result.vertices[0], result.vertices[1],
                            "valid" if result.is_valid else "INVALID", stats.confidence)
                if self._target_reached():
                    logger.info("Target confidence %.1f%% reached", self.target_confidence)
                    break
                if self.max_rounds is not None and rounds >= self.max_rounds:
                    break
                try:
                    await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            logger.info("Auto mode stopped after %d round(s)", rounds)
