from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

INJECT_ATTRIBUTE = "__markwire_inject__"
CONSTRUCTOR_ATTRIBUTE = "__markwire_constructor__"


class _FlagMarker:
    """Stateless marker: instances of one marker class are interchangeable."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class InjectMarker(_FlagMarker):
    """Mark a field as an injection point.

    Usually attached through ``Injected[T]`` rather than spelled out.
    """


class Named(NamedTuple):
    """Qualify an injection point with a tag.

    ``Named`` is registered as a qualifier on every ``Injector``: its ``value``
    becomes the tag passed to the container, so two bindings of the same type
    can be told apart.

    Examples:
        .. code-block:: python

            class Widget:
                name: Injected[Annotated[str, Named("gear")]]

    """

    value: Any


class OrNull(_FlagMarker):
    """Resolve to ``None`` instead of failing when the container has no binding."""


class ErasedBinding(_FlagMarker):
    """Look the point up by its raw class, ignoring generic type arguments."""


class ProviderFun(_FlagMarker):
    """Inject a ``Callable[[], T]`` that asks the container on every call."""


class FactoryFun(_FlagMarker):
    """Inject a ``Callable[[A], T]`` backed by a container factory binding."""


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a field for container-driven injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectMarker()]``.

    Examples:
        .. code-block:: python

            class Service:
                repository: Injected[Repository]
    """

    Maybe = Union[T, T]  # noqa: UP007,PYI016
    """Mark a dependency as optional.

    At runtime ``Maybe[T]`` becomes ``Annotated[T, OrNull()]``.
    """

else:

    class Injected:
        """Mark a field for container-driven injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectMarker()]``.
        Metadata already attached to ``T`` with ``Annotated`` is preserved.

        Examples:
            .. code-block:: python

                class Service:
                    repository: Injected[Repository]
                    cache: Injected[Maybe[Cache]]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectMarker]:
            return _append_metadata(item, InjectMarker())

    class Maybe:
        """Mark a dependency as optional.

        At runtime ``Maybe[T]`` resolves to ``Annotated[T, OrNull()]``.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, OrNull]:
            return _append_metadata(item, OrNull())


def inject(function: F) -> F:
    """Mark a method or a constructor for injection.

    On an instance method every parameter is resolved from the container and
    the method is called on the receiver by ``Injector.inject``. On
    ``__init__`` or on a classmethod the member becomes the construction path
    used by ``Injector.new_instance``.
    """
    target = function.__func__ if isinstance(function, (classmethod, staticmethod)) else function
    setattr(target, INJECT_ATTRIBUTE, True)
    return function


def constructor(function: F) -> F:
    """Declare a classmethod as an alternative constructor of its class.

    Works above or below ``@classmethod``. Marked functions that are not
    classmethods are ignored by constructor discovery.
    """
    target = function.__func__ if isinstance(function, classmethod) else function
    setattr(target, CONSTRUCTOR_ATTRIBUTE, True)
    return function


def is_inject_marked(member: Any) -> bool:
    """Return True when a function (or the function of a classmethod) carries ``@inject``."""
    if isinstance(member, (classmethod, staticmethod)):
        member = member.__func__
    return getattr(member, INJECT_ATTRIBUTE, False) is True


def is_constructor_marked(member: Any) -> bool:
    if isinstance(member, classmethod):
        member = member.__func__
    return getattr(member, CONSTRUCTOR_ATTRIBUTE, False) is True


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``(T, metadata)``."""
    if get_origin(annotation) is not Annotated:
        return annotation, ()
    annotation_args = get_args(annotation)
    return annotation_args[0], tuple(annotation_args[1:])


def has_marker(metadata: tuple[Any, ...], marker_kind: type[Any]) -> bool:
    return any(isinstance(item, marker_kind) for item in metadata)


def _append_metadata(item: Any, marker: object) -> Any:
    inner, metadata = split_annotated(item)
    return build_annotated((inner, *metadata, marker))


def build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
