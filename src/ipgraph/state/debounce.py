"""
Debounced writes from filter controls to the store.

Sliders and checkboxes emit many intermediate values. The writer collects
them and applies a single merged ``set_filters`` once input has been quiet
for the debounce window. Correctness never depends on the window: a
``flush`` applies whatever is pending immediately.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from .store import GraphViewStore

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.15


class Debouncer:
    """
    Runs ``callback`` once, ``delay`` seconds after the last ``call``.

    Must be used from within a running asyncio event loop.
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Run a pending callback now."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self.callback()


class DebouncedFilterWriter:
    """Coalesces partial filter updates into one store write per quiet period."""

    def __init__(self, store: GraphViewStore, delay: float = DEFAULT_DEBOUNCE_SECONDS):
        self.store = store
        self._pending: Dict[str, Any] = {}
        self._debouncer = Debouncer(delay, self._apply)

    @property
    def delay(self) -> float:
        return self._debouncer.delay

    @property
    def pending(self) -> Dict[str, Any]:
        return dict(self._pending)

    def update(self, **partial: Any) -> None:
        self._pending.update(partial)
        self._debouncer.call()

    def flush(self) -> None:
        self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()
        self._pending.clear()

    def _apply(self) -> None:
        updates, self._pending = self._pending, {}
        if updates:
            logger.debug(f"Applying debounced filter update: {sorted(updates)}")
            self.store.set_filters(**updates)
