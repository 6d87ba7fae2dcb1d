from __future__ import annotations

from collections.abc import Callable
from typing import Generic, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)
T = TypeVar("T")


@runtime_checkable
class Provider(Protocol[T_co]):
    """Object that produces a fresh lookup of ``T`` on every ``get()`` call.

    Declare a field as ``Injected[Provider[Service]]`` to receive one. Nothing
    is memoized: every call goes back to the container.
    """

    def get(self) -> T_co: ...


class CallableProvider(Generic[T]):
    """Adapt a zero-argument callable to the :class:`Provider` protocol."""

    __slots__ = ("_function",)

    def __init__(self, function: Callable[[], T]) -> None:
        self._function = function

    def get(self) -> T:
        return self._function()

    def __call__(self) -> T:
        return self._function()

    def __repr__(self) -> str:
        return f"CallableProvider({self._function!r})"
