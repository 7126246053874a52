"""
stores/tasks.py

Request lifetime helpers shared by the stores.

- CancelToken / RequestScope: a page visit owns a scope; once the page is left
  the scope is closed and late responses must not touch store state.
- InflightCoalescer: concurrent callers asking for the same key share one
  in-flight call and its outcome.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """Set once; checked by a store before it applies a response."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()


def is_cancelled(token: Optional[CancelToken]) -> bool:
    return token is not None and token.cancelled


class RequestScope:
    """All tokens handed out for one page visit."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._lock = threading.Lock()
        self._tokens: list[CancelToken] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def token(self) -> CancelToken:
        token = CancelToken()
        with self._lock:
            if self._closed:
                token.cancel()
            else:
                self._tokens.append(token)
        return token

    def close(self) -> None:
        with self._lock:
            self._closed = True
            tokens, self._tokens = self._tokens, []
        for t in tokens:
            t.cancel()
        if tokens:
            logger.debug("Scope '%s' closed, %d pending request(s) cancelled", self.name, len(tokens))


class InflightCoalescer:
    """Runs at most one call per key at a time; joiners wait for its result."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inflight: dict[Hashable, Future] = {}

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._inflight

    def run(self, key: Hashable, fn: Callable[[], T]) -> T:
        with self._lock:
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future

        if not owner:
            logger.debug("Joining in-flight request %r", key)
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._inflight.pop(key, None)
