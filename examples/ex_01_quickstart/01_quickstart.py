"""Quickstart: marking members and letting an Injector fill them.

Mark fields with ``Injected[T]`` and methods with ``@inject``, hand the
injector any object that answers the container lookups, and let it
populate existing objects or construct new ones.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from markwire import Injected, Injector, TypeBinding, inject


class DictContainer:
    """Smallest container that answers the six lookups from a dict of providers."""

    def __init__(self, providers: dict[TypeBinding, Callable[[], Any]]) -> None:
        self._providers = providers

    def instance(self, type_key: Any, tag: Any = None) -> Any:
        return self._providers[TypeBinding(type_key, tag)]()

    def instance_or_none(self, type_key: Any, tag: Any = None) -> Any | None:
        provider = self.provider_or_none(type_key, tag)
        return None if provider is None else provider()

    def factory(self, arg_type: Any, type_key: Any, tag: Any = None) -> Callable[[Any], Any]:
        raise LookupError(type_key)

    def factory_or_none(self, arg_type: Any, type_key: Any, tag: Any = None) -> None:
        return None

    def provider(self, type_key: Any, tag: Any = None) -> Callable[[], Any]:
        return self._providers[TypeBinding(type_key, tag)]

    def provider_or_none(self, type_key: Any, tag: Any = None) -> Callable[[], Any] | None:
        return self._providers.get(TypeBinding(type_key, tag))


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class Clock:
    def now(self) -> str:
        return "12:00"


class Report:
    database: Injected[Database]

    def __init__(self) -> None:
        self.stamp = "never"

    @inject
    def set_clock(self, clock: Clock) -> None:
        self.stamp = clock.now()


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


def main() -> None:
    database = Database()
    container = DictContainer(
        {
            TypeBinding(Database): lambda: database,
            TypeBinding(Clock): Clock,
        },
    )
    injector = Injector(container)

    report = Report()
    injector.inject(report)
    print(f"db_host={report.database.host}")  # => db_host=localhost
    print(f"stamp={report.stamp}")  # => stamp=12:00

    repository = injector.new_instance(UserRepository)
    print(f"shared_database={repository.database is database}")  # => shared_database=True

    built = injector.new_instance(Report)
    print(f"constructed_and_injected={built.stamp}")  # => constructed_and_injected=12:00


if __name__ == "__main__":
    main()
