# viewer/markdown/once.py
"""
At-most-once initializers with a memoized outcome.

``OnceGuard`` wraps a zero-argument producer. The producer body runs on the
first call only; every call, including ones made while an async producer is
still pending, observes the same outcome. Failures are cached too, so a
producer that raised is never invoked again for the lifetime of the guard.

Async outcomes are kept in a ``concurrent.futures.Future``. Template tags
render through ``async_to_sync``, which gives every request thread its own
event loop, so each call hands back an asyncio future bound to the caller's
loop that settles when the shared one does.
"""

import asyncio
import concurrent.futures
import inspect
import threading


class OnceGuard:
    def __init__(self, producer):
        self._producer = producer
        self._is_async = inspect.iscoroutinefunction(producer)
        self._lock = threading.Lock()
        self._called = False
        self._result = None
        self._error = None
        self.__name__ = getattr(producer, "__name__", "once")
        self.__doc__ = getattr(producer, "__doc__", None)

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self):
        with self._lock:
            if not self._called:
                self._called = True
                if self._is_async:
                    self._result = concurrent.futures.Future()
                    task = asyncio.ensure_future(self._producer())
                    task.add_done_callback(self._settle)
                else:
                    try:
                        self._result = self._producer()
                    except Exception as exc:
                        self._error = exc

        if self._error is not None:
            raise self._error
        if self._is_async:
            return asyncio.wrap_future(self._result)
        return self._result

    def _settle(self, task):
        if task.cancelled():
            # The requester went away before the producer finished; the next
            # call starts over instead of inheriting the cancellation.
            with self._lock:
                self._called = False
            self._result.cancel()
        elif task.exception() is not None:
            self._result.set_exception(task.exception())
        else:
            self._result.set_result(task.result())

    def __repr__(self):
        return f"<OnceGuard {self.__name__} called={self._called}>"


def once(producer):
    """Decorator form of ``OnceGuard``."""
    return OnceGuard(producer)
