"""Recording in-memory container used across markwire tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from markwire.bindings import TypeBinding


class BindingNotFoundError(LookupError):
    """Resolution error raised by ``FakeContainer`` for unbound keys."""


class FakeContainer:
    """In-memory container recording every lookup it receives."""

    def __init__(self) -> None:
        self.providers: dict[TypeBinding, Callable[[], Any]] = {}
        self.factories: dict[tuple[Any, TypeBinding], Callable[[Any], Any]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def bind(self, type_key: Any, value: Any, *, tag: Any = None) -> None:
        self.providers[TypeBinding(type_key, tag)] = lambda: value

    def bind_provider(self, type_key: Any, provider: Callable[[], Any], *, tag: Any = None) -> None:
        self.providers[TypeBinding(type_key, tag)] = provider

    def bind_factory(
        self,
        arg_type: Any,
        type_key: Any,
        factory: Callable[[Any], Any],
        *,
        tag: Any = None,
    ) -> None:
        self.factories[(arg_type, TypeBinding(type_key, tag))] = factory

    def instance(self, type_key: Any, tag: Any = None) -> Any:
        self.calls.append(("instance", (type_key, tag)))
        return self._provider(type_key, tag)()

    def instance_or_none(self, type_key: Any, tag: Any = None) -> Any | None:
        self.calls.append(("instance_or_none", (type_key, tag)))
        provider = self.providers.get(TypeBinding(type_key, tag))
        return None if provider is None else provider()

    def factory(self, arg_type: Any, type_key: Any, tag: Any = None) -> Callable[[Any], Any]:
        self.calls.append(("factory", (arg_type, type_key, tag)))
        factory = self.factories.get((arg_type, TypeBinding(type_key, tag)))
        if factory is None:
            msg = f"No factory bound for ({arg_type!r}) -> {type_key!r} tagged {tag!r}"
            raise BindingNotFoundError(msg)
        return factory

    def factory_or_none(
        self,
        arg_type: Any,
        type_key: Any,
        tag: Any = None,
    ) -> Callable[[Any], Any] | None:
        self.calls.append(("factory_or_none", (arg_type, type_key, tag)))
        return self.factories.get((arg_type, TypeBinding(type_key, tag)))

    def provider(self, type_key: Any, tag: Any = None) -> Callable[[], Any]:
        self.calls.append(("provider", (type_key, tag)))
        return self._provider(type_key, tag)

    def provider_or_none(self, type_key: Any, tag: Any = None) -> Callable[[], Any] | None:
        self.calls.append(("provider_or_none", (type_key, tag)))
        return self.providers.get(TypeBinding(type_key, tag))

    def _provider(self, type_key: Any, tag: Any) -> Callable[[], Any]:
        provider = self.providers.get(TypeBinding(type_key, tag))
        if provider is None:
            msg = f"No binding found for {type_key!r} tagged {tag!r}"
            raise BindingNotFoundError(msg)
        return provider

