# src/taskboard/board/debounce.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Trailing debounce built on one pending-call token.

    Each call cancels the previously scheduled invocation (if any) and schedules
    a new one after `wait` seconds of quiet. Must be called from a running event loop.
    """

    def __init__(self, func: Callable[..., Any], wait: float) -> None:
        self._func = func
        self._wait = max(0.0, float(wait))
        self._pending: asyncio.TimerHandle | None = None
        self._pending_args: tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending_args = args
        self._pending = loop.call_later(self._wait, self._fire)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def flush(self) -> None:
        """Run the pending invocation now (no-op when nothing is pending)."""
        if self._pending is None:
            return
        self.cancel()
        self._invoke()

    def _fire(self) -> None:
        self._pending = None
        self._invoke()

    def _invoke(self) -> None:
        args, self._pending_args = self._pending_args, ()
        try:
            self._func(*args)
        except Exception:
            logger.exception("Debounced call failed.")
