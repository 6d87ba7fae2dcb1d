from __future__ import annotations

from typing import Any


class MarkwireError(Exception):
    """Represent a base class for all markwire-specific failures.

    Catch this type when you want to handle any markwire error path without
    matching each concrete exception class individually. Errors raised by the
    backing container while resolving a value are never wrapped in this type.
    """


class MarkwireConfigurationError(MarkwireError):
    """Signal an injection setup that can never succeed.

    Raised while classifying injection points, before the container is asked
    for anything. Retrying does not help: fix the class declaration instead.
    """


class MarkwireAmbiguousConstructorError(MarkwireConfigurationError):
    """Signal that no single construction path can be chosen for a class.

    Raised by ``Injector.new_instance`` when a class declares several
    constructors (``__init__`` plus ``@constructor`` classmethods) and none or
    more than one of them is marked with ``@inject``.

    Typical fix is marking exactly one constructor with ``@inject``.
    """

    def __init__(self, cls: type[Any], reason: str | None = None) -> None:
        self.cls = cls
        if reason is None:
            reason = "must either have only one constructor or an @inject annotated constructor"
        super().__init__(f"Class {cls.__module__}.{cls.__qualname__} {reason}")


class MarkwireInvalidInjectionPointError(MarkwireConfigurationError):
    """Signal a function-shaped marker on a point whose type does not fit.

    Raised when ``ProviderFun`` annotates something other than
    ``Callable[[], T]`` or ``FactoryFun`` annotates something other than
    ``Callable[[A], T]``.
    """

    def __init__(self, point: object, expected: str) -> None:
        self.point = point
        self.expected = expected
        super().__init__(f"When visiting {point}, {expected}")


class MarkwireAnnotationResolutionError(MarkwireConfigurationError):
    """Signal that type hints of an injectable member cannot be evaluated.

    Common triggers are forward references to names that are not importable
    from the declaring module, such as classes defined inside a function body
    combined with ``from __future__ import annotations``.
    """

    def __init__(self, owner: object, cause: Exception) -> None:
        self.owner = owner
        self.cause = cause
        super().__init__(f"Cannot resolve type hints of {owner!r}: {cause}")
