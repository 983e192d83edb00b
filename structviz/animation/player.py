"""Pacing helpers that advance a traversal on the host's schedule.

The traversal itself never sleeps.  :class:`StepPlayer` supplies the delay
between steps, either blocking (``run``) or cooperatively inside an event loop
(``play``).  An interval of ``0`` drains the traversal without waiting, which
keeps tests synchronous.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from .steps import Step, StepKind
from .traversal import Traversal

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.5

StepCallback = Callable[[Step], None]


class StepPlayer:
    """Feed a traversal's steps to *on_step* with a fixed delay between them."""

    def __init__(
        self,
        traversal: Traversal,
        *,
        interval: float = DEFAULT_INTERVAL,
        on_step: Optional[StepCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self.traversal = traversal
        self.interval = interval
        self._on_step = on_step
        self._sleep = sleep

    def advance(self) -> Optional[Step]:
        """Produce a single step and notify the callback."""

        step = self.traversal.advance()
        if step is not None and self._on_step is not None:
            self._on_step(step)
        return step

    def run(self) -> List[Step]:
        """Play every remaining step, sleeping between consecutive steps."""

        played: List[Step] = []
        while True:
            step = self.advance()
            if step is None:
                break
            played.append(step)
            if self.interval and step.kind is not StepKind.COMPLETED:
                self._sleep(self.interval)
        logger.debug("Played %d steps (cancelled=%s)", len(played), self.traversal.cancelled)
        return played

    async def play(self) -> List[Step]:
        """Coroutine variant of :meth:`run` that yields to the event loop.

        Cancelling the traversal from another task stops playback after the
        current delay.
        """

        played: List[Step] = []
        while True:
            step = self.advance()
            if step is None:
                break
            played.append(step)
            if step.kind is not StepKind.COMPLETED:
                await asyncio.sleep(self.interval)
        logger.debug("Played %d steps (cancelled=%s)", len(played), self.traversal.cancelled)
        return played
