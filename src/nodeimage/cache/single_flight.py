"""Per-key call de-duplication.

Concurrent callers asking for the same key while a call is in flight wait for
that call and share its result (or its exception) instead of issuing their
own remote request.

Public API:
    SingleFlight: In-flight call de-duplicator
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class _Call:
    """One in-flight call and its outcome."""

    def __init__(self):
        self.done = threading.Event()
        self.result: Any = None
        self.error: BaseException | None = None


class SingleFlight:
    """Share one execution of ``fn`` among concurrent callers of a key.

    Nothing is remembered once the call completes; caching the result is the
    caller's job.

    Example:
        >>> flight = SingleFlight()
        >>> flight.do("AKSUbuntu/2204gen2containerd", resolve)
    """

    def __init__(self):
        self._calls: dict[str, _Call] = {}
        self._lock = threading.Lock()

    def do(self, key: str, fn: Callable[[], Any]) -> Any:
        """Run fn for key, or wait for the in-flight run.

        Args:
            key: De-duplication key
            fn: Zero-argument callable to execute

        Returns:
            Result of fn

        Raises:
            Exception: Whatever fn raised, re-raised in every waiter
        """
        with self._lock:
            call = self._calls.get(key)
            leader = call is None
            if leader:
                call = _Call()
                self._calls[key] = call

        if not leader:
            logger.debug(f"Waiting for in-flight lookup: {key}")
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result

        try:
            call.result = fn()
        except BaseException as e:
            call.error = e
            raise
        finally:
            with self._lock:
                del self._calls[key]
            call.done.set()
        return call.result


__all__ = ["SingleFlight"]
