import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from taskhub.config import settings

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs ``callback`` once per quiet period with the latest pushed value.

    Each ``push`` cancels the pending timer (or a still-running callback) and
    starts a new one, so a burst of keystrokes produces a single query.
    """

    def __init__(self, callback: Callable[[Any], Awaitable[None]], delay: Optional[float] = None):
        self.callback = callback
        self.delay = settings.search_debounce_seconds if delay is None else delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def push(self, value: Any) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(value))

    async def _fire(self, value: Any) -> None:
        await asyncio.sleep(self.delay)
        try:
            await self.callback(value)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}")

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None
