"""Turn declared type hints into concrete container lookup keys.

A container is queried with a :class:`TypeBinding`: a concrete type expression
plus an optional tag. Declared hints may still contain open parts, either a
``TypeVar`` of a generic class or an explicit :class:`Wildcard`
(``Extends[T]``, ``Super[T]``). Those parts are replaced by their bounds
before any lookup happens.

Produced values are bound through their upper bound, while values consumed by
a factory are bound through their lower bound. ``Callable[[Super[Event]],
Extends[Handler]]`` therefore asks the container for a factory taking
``Event`` and returning ``Handler``.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

from typing_extensions import TypeIs

from markwire.markers import split_annotated

T = TypeVar("T")

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_NONE_TYPE = type(None)


@dataclass(frozen=True, slots=True)
class TypeBinding:
    """Key of one container lookup: a concrete type and an optional tag."""

    type: Any
    tag: Any = None


@dataclass(frozen=True, slots=True)
class Wildcard:
    """Open type argument with explicit bounds.

    ``Wildcard()`` accepts anything, ``Extends[T]`` accepts ``T`` or a
    subtype, ``Super[T]`` accepts ``T`` or a supertype. Only the first bound of
    each side is used for lookups.
    """

    upper_bounds: tuple[Any, ...] = (Any,)
    lower_bounds: tuple[Any, ...] = ()

    def __repr__(self) -> str:
        if self.lower_bounds:
            return f"Super[{_type_repr(self.lower_bounds[0])}]"
        if self.upper_bounds and self.upper_bounds[0] is not Any:
            return f"Extends[{_type_repr(self.upper_bounds[0])}]"
        return "Wildcard()"


if TYPE_CHECKING:
    Extends = Union[T, T]  # noqa: UP007,PYI016
    Super = Union[T, T]  # noqa: UP007,PYI016

else:

    class Extends:
        """Upper-bounded wildcard: ``Extends[T]`` is ``Wildcard(upper_bounds=(T,))``."""

        def __class_getitem__(cls, item: Any) -> Wildcard:
            return Wildcard(upper_bounds=(item,))

    class Super:
        """Lower-bounded wildcard: ``Super[T]`` is ``Wildcard(lower_bounds=(T,))``."""

        def __class_getitem__(cls, item: Any) -> Wildcard:
            return Wildcard(upper_bounds=(object,), lower_bounds=(item,))


def is_open(value: Any) -> TypeIs[Wildcard | TypeVar]:
    """Return True for a bare wildcard or ``TypeVar``."""
    return isinstance(value, (Wildcard, TypeVar))


def upper_bound(value: Any) -> Any:
    """Return the upper bound of an open type, or the value itself."""
    if isinstance(value, Wildcard):
        return value.upper_bounds[0] if value.upper_bounds else Any
    if isinstance(value, TypeVar):
        if value.__bound__ is not None:
            return value.__bound__
        if value.__constraints__:
            return Union[value.__constraints__]  # noqa: UP007
        return Any
    return value


def lower_bound(value: Any) -> Any:
    """Return the lower bound of an open type, falling back to its upper bound."""
    if isinstance(value, Wildcard) and value.lower_bounds:
        return value.lower_bounds[0]
    return upper_bound(value)


def raw_type(value: Any) -> Any:
    """Return the non-parameterized class behind a type expression.

    ``list[int]`` becomes ``list``, ``Annotated[Foo, ...]`` becomes ``Foo`` and
    an open type becomes the raw type of its upper bound. Unions have no single
    raw class and are returned unchanged.
    """
    value, _ = split_annotated(value)
    if is_open(value):
        return raw_type(upper_bound(value))
    origin = get_origin(value)
    if origin is None or origin in _UNION_ORIGINS:
        return value
    return origin


def concretize(value: Any) -> Any:
    """Replace every open type inside ``value`` by its upper bound.

    Expressions without open parts are returned as the very same object, so
    equal hints keep producing equal keys.
    """
    if is_open(value):
        return concretize(upper_bound(value))

    origin = get_origin(value)
    if origin is None:
        return value
    arguments = get_args(value)
    if not arguments:
        return value

    if origin is Annotated:
        inner = concretize(arguments[0])
        if inner is arguments[0]:
            return value
        return Annotated[(inner, *arguments[1:])]  # type: ignore[valid-type]

    concrete_arguments = tuple(_concretize_argument(argument) for argument in arguments)
    if all(new is old for new, old in zip(concrete_arguments, arguments, strict=True)):
        return value
    if origin in _UNION_ORIGINS:
        return Union[concrete_arguments]  # noqa: UP007
    # typing aliases (typing.List, typing.Callable, user generics) keep their own family.
    copy_with = getattr(type(value), "copy_with", None)
    if copy_with is not None:
        return copy_with(value, _flatten_arguments(concrete_arguments))
    return _rebuild_alias(origin=origin, args=concrete_arguments, fallback=value)


def strip_none(value: Any) -> tuple[Any, bool]:
    """Turn ``T | None`` into ``(T, True)``; other types come back as ``(value, False)``."""
    if get_origin(value) not in _UNION_ORIGINS:
        return value, False
    arguments = get_args(value)
    if _NONE_TYPE not in arguments:
        return value, False
    remaining = tuple(argument for argument in arguments if argument is not _NONE_TYPE)
    return Union[remaining], True  # noqa: UP007


def bound_type(value: Any, *, erase: bool) -> Any:
    """Bind a produced type: its raw class when erasing, else its concrete upper bound."""
    if erase:
        return raw_type(value)
    return concretize(value)


def lower_type(value: Any) -> Any:
    """Bind a consumed type through its lower bound. Never erased."""
    return concretize(lower_bound(value))


def _concretize_argument(argument: Any) -> Any:
    # Callable parameter lists come back from get_args as plain lists.
    if isinstance(argument, list):
        concrete = [concretize(item) for item in argument]
        if all(new is old for new, old in zip(concrete, argument, strict=True)):
            return argument
        return concrete
    return concretize(argument)


def _flatten_arguments(arguments: tuple[Any, ...]) -> tuple[Any, ...]:
    flattened: list[Any] = []
    for argument in arguments:
        if isinstance(argument, list):
            flattened.extend(argument)
        else:
            flattened.append(argument)
    return tuple(flattened)


def _rebuild_alias(*, origin: Any, args: tuple[Any, ...], fallback: Any) -> Any:
    try:
        if len(args) == 1:
            return origin[args[0]]
        return origin[args]
    except TypeError:
        return fallback


def _type_repr(value: Any) -> str:
    if isinstance(value, type):
        return value.__qualname__
    return repr(value)
