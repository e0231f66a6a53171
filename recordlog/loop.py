"""
Request loop pumping the bus transport.

The loop alternates between two states: ``DRAINING`` runs queued work one
unit at a time until the transport reports nothing left, and ``IDLE`` blocks
until more work arrives or the idle timeout elapses. A ``TransportFatal``
from either call ends the loop and propagates to the caller.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import TYPE_CHECKING

from recordlog.errors import TransportFatal

if TYPE_CHECKING:
    from recordlog.bus.transport import Transport

logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    DRAINING = "draining"
    IDLE = "idle"
    STOPPED = "stopped"


class RequestLoop:
    """Single consumer of the transport's work queue."""

    def __init__(self, transport: "Transport", idle_timeout: float | None = None) -> None:
        self._transport = transport
        self._idle_timeout = idle_timeout
        self._stopping = False
        self.state = LoopState.STOPPED
        self.processed = 0

    def stop(self) -> None:
        """Ask the loop to return after the current unit of work."""

        logger.info("Request loop stop requested")
        self._stopping = True
        self._transport.wake()

    async def run(self) -> None:
        self.state = LoopState.DRAINING
        try:
            while not self._stopping:
                if self.state is LoopState.DRAINING:
                    if self._transport.process():
                        self.processed += 1
                        # Let replies and inbound messages move between units.
                        await asyncio.sleep(0)
                        continue
                    self.state = LoopState.IDLE
                else:
                    await self._transport.wait(self._idle_timeout)
                    self.state = LoopState.DRAINING
        except TransportFatal as exc:
            logger.error("Failed to process bus: %s", exc)
            raise
        finally:
            self.state = LoopState.STOPPED

        logger.info("Request loop stopped after %d request(s)", self.processed)
