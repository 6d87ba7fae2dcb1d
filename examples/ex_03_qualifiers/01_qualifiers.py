"""Tagged bindings with qualifier markers.

``Named(value)`` tags a lookup out of the box. Any other marker class can be
turned into a qualifier with ``Injector.register_qualifier``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any

from markwire import (
    Injected,
    Injector,
    MarkwireAmbiguousConstructorError,
    Named,
    TypeBinding,
    constructor,
    inject,
)


class TaggedContainer:
    def __init__(self, providers: dict[TypeBinding, Callable[[], Any]]) -> None:
        self._providers = providers

    def instance(self, type_key: Any, tag: Any = None) -> Any:
        return self._providers[TypeBinding(type_key, tag)]()

    def instance_or_none(self, type_key: Any, tag: Any = None) -> Any | None:
        provider = self._providers.get(TypeBinding(type_key, tag))
        return None if provider is None else provider()

    def factory(self, arg_type: Any, type_key: Any, tag: Any = None) -> Callable[[Any], Any]:
        raise LookupError(type_key)

    def factory_or_none(self, arg_type: Any, type_key: Any, tag: Any = None) -> None:
        return None

    def provider(self, type_key: Any, tag: Any = None) -> Callable[[], Any]:
        return self._providers[TypeBinding(type_key, tag)]

    def provider_or_none(self, type_key: Any, tag: Any = None) -> Callable[[], Any] | None:
        return self._providers.get(TypeBinding(type_key, tag))


@dataclass(frozen=True)
class Region:
    code: str


class Storage:
    primary: Injected[Annotated[str, Named("primary")]]
    replica: Injected[Annotated[str, Named("replica")]]
    bucket: Injected[Annotated[str, Region("eu")]]


class Mailer:
    def __init__(self, sender: str) -> None:
        self.sender = sender

    @constructor
    @classmethod
    def for_region(cls, sender: Annotated[str, Region("us")]) -> Mailer:
        return cls(sender=sender.upper())


class RegionalMailer(Mailer):
    @inject
    @classmethod
    def for_region(cls, sender: Annotated[str, Region("us")]) -> RegionalMailer:
        return cls(sender=sender.upper())


def main() -> None:
    container = TaggedContainer(
        {
            TypeBinding(str, "primary"): lambda: "db-1",
            TypeBinding(str, "replica"): lambda: "db-2",
            TypeBinding(str, "region:eu"): lambda: "bucket-eu",
            TypeBinding(str, "region:us"): lambda: "mail-us",
        },
    )
    injector = Injector(container)
    injector.register_qualifier(Region, lambda marker: f"region:{marker.code}")

    storage = Storage()
    injector.inject(storage)
    print(f"primary={storage.primary}")  # => primary=db-1
    print(f"replica={storage.replica}")  # => replica=db-2
    print(f"bucket={storage.bucket}")  # => bucket=bucket-eu

    try:
        injector.new_instance(Mailer)
    except MarkwireAmbiguousConstructorError as error:
        print(f"error={type(error).__name__}")  # => error=MarkwireAmbiguousConstructorError

    mailer = injector.new_instance(RegionalMailer)
    print(f"sender={mailer.sender}")  # => sender=MAIL-US


if __name__ == "__main__":
    main()
