"""Synchronous listener registry shared by record sources."""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ListenerRegistry(Generic[T]):
    """Delivers payloads to subscribers on the caller's thread.

    A failing listener is logged and skipped; remaining listeners still
    receive the payload.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._listeners: List[Callable[[T], None]] = []
        self._logger = logger or logging.getLogger(__name__)

    def add(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, payload: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                self._logger.exception(
                    "listener_failed",
                    extra={"listener": getattr(listener, "__qualname__", repr(listener))},
                )

    def __len__(self) -> int:
        return len(self._listeners)
