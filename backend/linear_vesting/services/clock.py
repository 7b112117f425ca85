"""Trusted time sources for grant operations.

Operations never read the clock themselves: the API layer reads it once per
request and passes the value in, so a single invocation always sees one time.
"""
import time
from typing import Optional

import structlog

from linear_vesting.config import get_settings
from linear_vesting.services.solana_client import SolanaClient, get_solana_client

logger = structlog.get_logger()


class Clock:
    """Source of the current unix timestamp in seconds"""

    async def now(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):
    """Host wall clock"""

    async def now(self) -> int:
        return int(time.time())


class ClusterClock(Clock):
    """Block time of the latest confirmed slot on the configured cluster"""

    def __init__(self, solana_client: Optional[SolanaClient] = None):
        self._solana_client = solana_client

    async def now(self) -> int:
        solana_client = self._solana_client or await get_solana_client()
        slot = await solana_client.get_slot()
        block_time = await solana_client.get_block_time(slot)
        if block_time is None:
            raise RuntimeError(f"No block time available for slot {slot}")
        logger.debug("Read cluster clock", slot=slot, block_time=block_time)
        return block_time


def clock_from_settings() -> Clock:
    """Build the clock selected by ``clock_source``"""
    source = get_settings().clock_source
    if source == "system":
        return SystemClock()
    if source == "cluster":
        return ClusterClock()
    raise ValueError(f"Unknown clock source: {source}")
