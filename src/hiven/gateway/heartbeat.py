"""
gateway/heartbeat.py — Gateway Heartbeat Ticker

Enqueues a Heartbeat frame on the egress pipe every `interval`, on a fixed
schedule from the moment it starts, until the dispatcher sets the stop event. The wait is a wait_for on the stop event,
so a stop request wakes the ticker mid-sleep and no final beat is sent.

A full egress pipe makes the ticker wait (a late beat beats a dropped one);
a closed egress pipe means the session is tearing down and the ticker
returns quietly.
"""

from __future__ import annotations

import asyncio

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from hiven.gateway.protocol import Heartbeat as HeartbeatFrame
from hiven.observability.logger import get_logger

log = get_logger(__name__)


class Heartbeat:
    def __init__(
        self,
        egress: MemoryObjectSendStream,
        interval: float,
        stop: asyncio.Event,
    ):
        if interval <= 0:
            raise ValueError("heartbeat interval must be > 0")
        self._egress = egress
        self._interval = interval
        self._stop = stop
        self.beats = 0

    @property
    def interval(self) -> float:
        return self._interval

    async def run(self) -> None:
        """Beat until stopped. Always closes its egress handle on the way out."""
        log.debug("gateway.heartbeat.start", interval_s=self._interval)
        loop = asyncio.get_running_loop()
        # Beats are due at start + k * interval; send latency does not push
        # later beats back.
        next_at = loop.time()
        try:
            while True:
                next_at += self._interval
                try:
                    await asyncio.wait_for(
                        self._stop.wait(), timeout=max(0.0, next_at - loop.time())
                    )
                    log.debug("gateway.heartbeat.stopped", beats=self.beats)
                    return
                except asyncio.TimeoutError:
                    pass

                try:
                    await self._egress.send(HeartbeatFrame())
                except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                    log.debug("gateway.heartbeat.egress_closed", beats=self.beats)
                    return
                self.beats += 1

                # After a stall longer than a period, restart the schedule
                # instead of sending the missed beats back to back.
                if loop.time() - next_at > self._interval:
                    next_at = loop.time()
        finally:
            self._egress.close()
