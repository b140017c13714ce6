import asyncio, logging, time
from contextlib import asynccontextmanager

from playground.core.enums import Language

logger = logging.getLogger(__name__)


class ExecutionGate:
    """Serialises stage+build+run cycles for one language.

    The template workspace is shared by every request for the language, so
    only the holder of the gate may touch it. ``asyncio.Lock`` wakes waiters
    in arrival order.
    """

    def __init__(self, language: Language):
        self.language = language
        self._lock = asyncio.Lock()
        self._waiting = 0

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @property
    def waiting(self) -> int:
        return self._waiting

    @asynccontextmanager
    async def hold(self):
        started = time.monotonic()
        self._waiting += 1
        try:
            await self._lock.acquire()
        finally:
            self._waiting -= 1
        logger.debug(
            "gate %s acquired after %.3fs (%d waiting)",
            self.language.value,
            time.monotonic() - started,
            self._waiting,
        )
        try:
            yield self
        finally:
            self._lock.release()
            logger.debug("gate %s released", self.language.value)
