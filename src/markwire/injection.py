from __future__ import annotations

import inspect
import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from markwire.bindings import raw_type, strip_none
from markwire.exceptions import (
    MarkwireAnnotationResolutionError,
    MarkwireInvalidInjectionPointError,
)
from markwire.markers import (
    InjectMarker,
    build_annotated,
    has_marker,
    is_constructor_marked,
    is_inject_marked,
    split_annotated,
)

if TYPE_CHECKING:
    from typing_extensions import Self

_SKIPPED_PARAMETER_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_RESOLUTION_ERRORS = (AttributeError, NameError, SyntaxError, TypeError)
_INJECTION_MARKER_NAMES = ("Injected", "InjectMarker")

logger = logging.getLogger(__name__)


class InjectionPoint(ABC):
    """One location that receives a container-supplied value.

    A point is described by its type hint. ``Annotated`` metadata on the hint
    is the point's annotation set; the rest is its generic type.
    """

    __slots__ = ()

    hint: Any

    @property
    def generic_type(self) -> Any:
        return split_annotated(self.hint)[0]

    @property
    def declared_type(self) -> Any:
        """Raw class of the generic type; the ``None`` arm of ``T | None`` is ignored."""
        return raw_type(strip_none(self.generic_type)[0])

    @property
    def annotations(self) -> tuple[Any, ...]:
        return split_annotated(self.hint)[1]

    def has_annotation(self, marker_kind: type[Any]) -> bool:
        return has_marker(self.annotations, marker_kind)

    @abstractmethod
    def __str__(self) -> str: ...


@dataclass(frozen=True, slots=True)
class FieldInjectionPoint(InjectionPoint):
    owner: type[Any]
    name: str
    hint: Any

    def __str__(self) -> str:
        return f"field {self.name!r} of {_qualified_name(self.owner)}"


@dataclass(frozen=True, slots=True)
class MethodParameterInjectionPoint(InjectionPoint):
    function: Callable[..., Any]
    index: int
    parameter: inspect.Parameter
    hint: Any

    def __str__(self) -> str:
        return (
            f"parameter {self.index + 1} ({self.parameter.name!r}) of "
            f"{_qualified_name(self.function)}"
        )


@dataclass(frozen=True, slots=True)
class ConstructorParameterInjectionPoint(InjectionPoint):
    owner: type[Any]
    function: Callable[..., Any]
    index: int
    parameter: inspect.Parameter
    hint: Any

    def __str__(self) -> str:
        return (
            f"parameter {self.index + 1} ({self.parameter.name!r}) of constructor "
            f"{_qualified_name(self.function)} of {_qualified_name(self.owner)}"
        )


@dataclass(frozen=True, slots=True)
class UnwrappedInjectionPoint(InjectionPoint):
    """Inner point of a wrapper such as ``Lazy[T]``.

    Carries the outer point's annotations plus any written inside the wrapper,
    and reports itself as the outer point.
    """

    outer: InjectionPoint
    hint: Any

    @classmethod
    def of(
        cls,
        outer: InjectionPoint,
        inner_type: Any,
        inner_metadata: tuple[Any, ...] = (),
    ) -> Self:
        metadata = (*outer.annotations, *inner_metadata)
        hint = build_annotated((inner_type, *metadata)) if metadata else inner_type
        return cls(outer=outer, hint=hint)

    def __str__(self) -> str:
        return str(self.outer)


ParameterInjectionPoint = MethodParameterInjectionPoint | ConstructorParameterInjectionPoint


@dataclass(frozen=True, slots=True)
class InjectableField:
    owner: type[Any]
    name: str
    point: FieldInjectionPoint


@dataclass(frozen=True, slots=True)
class InjectableMethod:
    owner: type[Any]
    name: str
    function: Callable[..., Any]
    points: tuple[MethodParameterInjectionPoint, ...]


@dataclass(frozen=True, slots=True)
class InjectableConstructor:
    """A construction path: ``__init__`` or a classmethod constructor."""

    owner: type[Any]
    name: str
    function: Callable[..., Any]
    is_marked: bool

    def create(self, args: Sequence[Any], kwargs: dict[str, Any]) -> Any:
        if self.name == "__init__":
            return self.owner(*args, **kwargs)
        return getattr(self.owner, self.name)(*args, **kwargs)


@dataclass(slots=True)
class InjectableMembersInspector:
    """Enumerate the injectable members a single class declares itself."""

    def declared_fields(self, cls: type[Any]) -> tuple[InjectableField, ...]:
        """Return fields annotated with ``Injected[...]`` in the class body, in declaration order.

        Annotations are evaluated one by one. An annotation that cannot be
        evaluated is an error only when it names an injection marker; plain
        fields typed with ``TYPE_CHECKING``-only names are skipped.
        """
        raw_annotations = inspect.get_annotations(cls)
        if not raw_annotations:
            return ()
        module = sys.modules.get(cls.__module__)
        globalns = vars(module) if module is not None else {}
        localns = dict(vars(cls))

        fields: list[InjectableField] = []
        for name, raw in raw_annotations.items():
            try:
                hint = _evaluate_annotation(raw, globalns, localns)
            except _RESOLUTION_ERRORS as error:
                if not _names_injection_marker(raw):
                    logger.debug("Skipping unresolvable annotation of %r.%s: %s", cls, name, error)
                    continue
                raise MarkwireAnnotationResolutionError(cls, error) from error
            _, metadata = split_annotated(hint)
            if not has_marker(metadata, InjectMarker):
                continue
            point = FieldInjectionPoint(owner=cls, name=name, hint=hint)
            fields.append(InjectableField(owner=cls, name=name, point=point))
        return tuple(fields)

    def declared_methods(self, cls: type[Any]) -> tuple[InjectableMethod, ...]:
        """Return ``@inject`` instance methods defined in the class body, in declaration order."""
        methods: list[InjectableMethod] = []
        for name, member in vars(cls).items():
            if name == "__init__" or not inspect.isfunction(member):
                continue
            if not is_inject_marked(member):
                continue
            points = tuple(
                MethodParameterInjectionPoint(
                    function=member,
                    index=index,
                    parameter=parameter,
                    hint=hint,
                )
                for index, parameter, hint in self._parameters(member, skip_first=True)
            )
            methods.append(
                InjectableMethod(owner=cls, name=name, function=member, points=points),
            )
        return tuple(methods)

    def declared_constructors(self, cls: type[Any]) -> tuple[InjectableConstructor, ...]:
        """Return ``__init__`` followed by the classmethods declared as constructors."""
        init = cls.__init__
        constructors = [
            InjectableConstructor(
                owner=cls,
                name="__init__",
                function=init,
                is_marked=is_inject_marked(init),
            ),
        ]
        for name, member in vars(cls).items():
            if not isinstance(member, classmethod):
                continue
            if not (is_inject_marked(member) or is_constructor_marked(member)):
                continue
            constructors.append(
                InjectableConstructor(
                    owner=cls,
                    name=name,
                    function=member.__func__,
                    is_marked=is_inject_marked(member),
                ),
            )
        return tuple(constructors)

    def constructor_points(
        self,
        constructor: InjectableConstructor,
    ) -> tuple[ConstructorParameterInjectionPoint, ...]:
        """Return one injection point per parameter of the selected constructor."""
        if constructor.function is object.__init__:
            return ()
        return tuple(
            ConstructorParameterInjectionPoint(
                owner=constructor.owner,
                function=constructor.function,
                index=index,
                parameter=parameter,
                hint=hint,
            )
            for index, parameter, hint in self._parameters(constructor.function, skip_first=True)
        )

    def _parameters(
        self,
        function: Callable[..., Any],
        *,
        skip_first: bool,
    ) -> list[tuple[int, inspect.Parameter, Any]]:
        raw_annotations = inspect.get_annotations(function)
        globalns = getattr(inspect.unwrap(function), "__globals__", {})

        parameters = list(inspect.signature(function).parameters.values())
        if skip_first:
            parameters = parameters[1:]

        # Only parameters are evaluated: the return annotation may name TYPE_CHECKING-only types.
        resolved: list[tuple[int, inspect.Parameter, Any]] = []
        for index, parameter in enumerate(parameters):
            if parameter.kind in _SKIPPED_PARAMETER_KINDS:
                continue
            if parameter.name not in raw_annotations:
                msg = (
                    f"parameter {index + 1} ({parameter.name!r}) of {_qualified_name(function)}"
                )
                raise MarkwireInvalidInjectionPointError(
                    msg,
                    "injected parameters must carry a type annotation",
                )
            try:
                hint = _evaluate_annotation(raw_annotations[parameter.name], globalns, None)
            except _RESOLUTION_ERRORS as error:
                raise MarkwireAnnotationResolutionError(function, error) from error
            resolved.append((index, parameter, hint))
        return resolved


def bind_arguments(
    points: Sequence[ParameterInjectionPoint],
    values: Sequence[Any],
) -> tuple[list[Any], dict[str, Any]]:
    """Split resolved values into positional and keyword-only call arguments."""
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for point, value in zip(points, values, strict=True):
        if point.parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[point.parameter.name] = value
        else:
            args.append(value)
    return args, kwargs


def _evaluate_annotation(
    raw: Any,
    globalns: dict[str, Any],
    localns: dict[str, Any] | None,
) -> Any:
    hint = eval(raw, globalns, localns) if isinstance(raw, str) else raw  # noqa: S307
    return type(None) if hint is None else hint


def _names_injection_marker(raw: Any) -> bool:
    return isinstance(raw, str) and any(name in raw for name in _INJECTION_MARKER_NAMES)


def _qualified_name(value: Any) -> str:
    module = getattr(value, "__module__", None)
    qualname = getattr(value, "__qualname__", repr(value))
    if module is None:
        return qualname
    return f"{module}.{qualname}"
