from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ContainerProtocol(Protocol):
    """Lookup contract an ``Injector`` needs from its backing container.

    Every verb is keyed by a concrete type expression and an optional tag. The
    plain verbs raise the container's own resolution error when no binding
    matches (or when resolution fails, for example on a dependency cycle).
    The ``*_or_none`` verbs return ``None`` instead when no binding matches.
    Binding storage, scopes and cycle detection are the container's business.
    """

    def instance(self, type_key: Any, tag: Any = None) -> Any:
        """Return a value bound to ``type_key``."""

    def instance_or_none(self, type_key: Any, tag: Any = None) -> Any | None:
        """Return a value bound to ``type_key``, or ``None`` when unbound."""

    def factory(self, arg_type: Any, type_key: Any, tag: Any = None) -> Callable[[Any], Any]:
        """Return a one-argument factory producing ``type_key`` from ``arg_type``."""

    def factory_or_none(
        self,
        arg_type: Any,
        type_key: Any,
        tag: Any = None,
    ) -> Callable[[Any], Any] | None:
        """Return a one-argument factory, or ``None`` when unbound."""

    def provider(self, type_key: Any, tag: Any = None) -> Callable[[], Any]:
        """Return a zero-argument callable producing ``type_key``."""

    def provider_or_none(self, type_key: Any, tag: Any = None) -> Callable[[], Any] | None:
        """Return a zero-argument callable, or ``None`` when unbound."""
