"""Latency and fault injection for the simulated account service."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional


class LatencyHook:
    """Awaitable hook run before each account operation.

    Args:
        delay_seconds: Seconds to sleep on every call. Zero skips the sleep.
        fault: Optional callable receiving the operation name; whatever it
            raises propagates to the caller of the operation.
    """

    def __init__(self, delay_seconds: float = 0.0, fault: Optional[Callable[[str], None]] = None) -> None:
        self.delay_seconds = delay_seconds
        self.fault = fault

    async def __call__(self, operation: str) -> None:
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        if self.fault is not None:
            self.fault(operation)
