from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar, cast

T = TypeVar("T")

_UNSET = object()


class Lazy(Generic[T]):
    """Deferred value computed on first access and memoized afterwards.

    Declare a field as ``Injected[Lazy[Service]]`` to receive a ``Lazy`` that
    asks the container for ``Service`` only when ``.value`` is first read.
    Initialization is guarded by a lock, so the producer runs at most once even
    when several threads read ``.value`` concurrently. An exception raised by
    the producer propagates and leaves the cell uninitialized.

    Examples:
        .. code-block:: python

            class Report:
                database: Injected[Lazy[Database]]

                def rows(self) -> list[str]:
                    return self.database.value.query()

    """

    __slots__ = ("_lock", "_producer", "_value")

    def __init__(self, producer: Callable[[], T]) -> None:
        self._producer: Callable[[], T] | None = producer
        self._value: object = _UNSET
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        value = self._value
        if value is not _UNSET:
            return cast("T", value)
        with self._lock:
            if self._value is _UNSET:
                producer = cast("Callable[[], T]", self._producer)
                self._value = producer()
                self._producer = None
            return cast("T", self._value)

    def is_initialized(self) -> bool:
        """Return whether the value has been computed."""
        return self._value is not _UNSET

    def __repr__(self) -> str:
        if self.is_initialized():
            return f"Lazy({self._value!r})"
        return "Lazy(<uninitialized>)"
