"""
Periodic reclaim of expired store entries. Lookups enforce expiry on their own.
"""
import asyncio
import logging

from credential_server.state import AppState

logger = logging.getLogger(__name__)


def sweep_expired(state: AppState) -> int:
    """Sweep every store once. Returns the total number of entries dropped."""
    return sum(store.sweep() for store in state.stores())


async def sweep_forever(state: AppState, interval_seconds: float) -> None:
    """Run sweep_expired every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = sweep_expired(state)
        if removed:
            logger.debug("Expiry sweep removed %d entries", removed)
