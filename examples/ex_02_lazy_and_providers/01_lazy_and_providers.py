"""Deferred and repeated lookups.

This topic demonstrates:

1. ``Lazy[T]`` postponing the container lookup until ``.value`` is read.
2. ``Provider[T]`` asking the container on every ``get()``.
3. ``ProviderFun`` and ``FactoryFun`` exposing container functions as callables.
4. ``Maybe[T]`` and ``T | None`` resolving to ``None`` when nothing is bound.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any

from markwire import (
    FactoryFun,
    Injected,
    Injector,
    Lazy,
    Maybe,
    Provider,
    ProviderFun,
    TypeBinding,
)


class CountingContainer:
    """Dict-backed container that counts how often it was asked for an instance."""

    def __init__(self) -> None:
        self.lookups = 0
        self.providers: dict[TypeBinding, Callable[[], Any]] = {}
        self.factories: dict[tuple[Any, TypeBinding], Callable[[Any], Any]] = {}

    def instance(self, type_key: Any, tag: Any = None) -> Any:
        self.lookups += 1
        return self.providers[TypeBinding(type_key, tag)]()

    def instance_or_none(self, type_key: Any, tag: Any = None) -> Any | None:
        provider = self.providers.get(TypeBinding(type_key, tag))
        return None if provider is None else provider()

    def factory(self, arg_type: Any, type_key: Any, tag: Any = None) -> Callable[[Any], Any]:
        return self.factories[(arg_type, TypeBinding(type_key, tag))]

    def factory_or_none(
        self,
        arg_type: Any,
        type_key: Any,
        tag: Any = None,
    ) -> Callable[[Any], Any] | None:
        return self.factories.get((arg_type, TypeBinding(type_key, tag)))

    def provider(self, type_key: Any, tag: Any = None) -> Callable[[], Any]:
        return self.providers[TypeBinding(type_key, tag)]

    def provider_or_none(self, type_key: Any, tag: Any = None) -> Callable[[], Any] | None:
        return self.providers.get(TypeBinding(type_key, tag))


class Connection:
    created = 0

    def __init__(self) -> None:
        Connection.created += 1
        self.number = Connection.created


class Metrics:
    pass


class Request:
    def __init__(self, path: str) -> None:
        self.path = path


class Handler:
    def __init__(self, request: Request) -> None:
        self.request = request


class Service:
    connection: Injected[Lazy[Connection]]
    connections: Injected[Provider[Connection]]
    connect: Injected[Annotated[Callable[[], Connection], ProviderFun()]]
    handler_for: Injected[Annotated[Callable[[Request], Handler], FactoryFun()]]
    metrics: Injected[Maybe[Metrics]]
    fallback: Injected[Metrics | None]


def main() -> None:
    container = CountingContainer()
    container.providers[TypeBinding(Connection)] = Connection
    container.factories[(Request, TypeBinding(Handler))] = Handler

    service = Service()
    Injector(container).inject(service)

    print(f"lookups_before_value={container.lookups}")  # => lookups_before_value=0
    print(f"lazy_number={service.connection.value.number}")  # => lazy_number=1
    print(f"lazy_cached={service.connection.value.number}")  # => lazy_cached=1
    print(f"lookups_after_value={container.lookups}")  # => lookups_after_value=1

    first = service.connections.get()
    second = service.connections.get()
    print(f"provider_fresh={first is not second}")  # => provider_fresh=True
    print(f"provider_fun_number={service.connect().number}")  # => provider_fun_number=4

    handler = service.handler_for(Request("/health"))
    print(f"handler_path={handler.request.path}")  # => handler_path=/health

    print(f"metrics={service.metrics!r}")  # => metrics=None
    print(f"fallback={service.fallback!r}")  # => fallback=None


if __name__ == "__main__":
    main()
