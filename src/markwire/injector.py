from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar, cast

from markwire.classifier import InjectionPointClassifier
from markwire.container_interface import ContainerProtocol
from markwire.exceptions import MarkwireAmbiguousConstructorError
from markwire.injection import (
    InjectableConstructor,
    InjectableField,
    InjectableMembersInspector,
    InjectableMethod,
    bind_arguments,
)
from markwire.qualifiers import QualifierRegistry

T = TypeVar("T")
M = TypeVar("M")

MemberAccessor = Callable[[Any], None]
ConstructorAccessor = Callable[[], Any]

logger = logging.getLogger(__name__)


class Injector:
    """Inject container values into objects marked with markwire markers.

    Fields annotated with ``Injected[...]`` are assigned, ``@inject`` methods
    are called with resolved arguments, and ``new_instance`` builds objects
    through their ``@inject`` (or sole) constructor. Every lookup goes through
    ``container``, which owns bindings, scopes and cycle detection.

    Accessors are compiled once per class and cached for the lifetime of the
    injector. Concurrent first use of a class may compile it twice; the first
    published result wins and both results behave the same.

    Examples:
        .. code-block:: python

            class Widget:
                name: Injected[Annotated[str, Named("gear")]]


            injector = Injector(container)
            widget = injector.new_instance(Widget)

    """

    def __init__(
        self,
        container: ContainerProtocol,
        *,
        qualifiers: Mapping[type[Any], Callable[[Any], Any]] | None = None,
    ) -> None:
        self._container = container
        self._qualifiers = QualifierRegistry()
        for marker_kind, extractor in (qualifiers or {}).items():
            self._qualifiers.register(marker_kind, extractor)
        self._classifier = InjectionPointClassifier(self._qualifiers)
        self._inspector = InjectableMembersInspector()
        self._member_accessors: dict[type[Any], tuple[MemberAccessor, ...]] = {}
        self._constructors: dict[type[Any], ConstructorAccessor] = {}

    @property
    def container(self) -> ContainerProtocol:
        return self._container

    @property
    def qualifiers(self) -> QualifierRegistry:
        return self._qualifiers

    def register_qualifier(self, marker_kind: type[M], extractor: Callable[[M], Any]) -> None:
        """Use instances of ``marker_kind`` as qualifiers, tagged by ``extractor(marker)``.

        Call before the first ``inject``/``new_instance`` touching affected
        classes: compiled accessors are never rebuilt.
        """
        self._qualifiers.register(marker_kind, extractor)

    def inject(self, receiver: object) -> None:
        """Inject all ``Injected[...]`` fields and ``@inject`` methods of ``receiver``.

        Members are processed own class first, then up the MRO; within a class
        fields come before methods. A failing lookup propagates as is and
        leaves already injected members in place.
        """
        for accessor in self._find_member_accessors(type(receiver)):
            accessor(receiver)

    def new_instance(self, cls: type[T], *, inject_fields: bool = True) -> T:
        """Create ``cls`` through its injection constructor.

        Args:
            cls: Class to instantiate.
            inject_fields: Whether to run ``inject`` on the new instance.

        Raises:
            MarkwireAmbiguousConstructorError: If no single constructor can be
                selected.

        """
        instance = cast("T", self._find_constructor(cls)())
        if inject_fields:
            self.inject(instance)
        return instance

    def _find_member_accessors(self, cls: type[Any]) -> tuple[MemberAccessor, ...]:
        cached = self._member_accessors.get(cls)
        if cached is not None:
            return cached
        return self._create_member_accessors(cls)

    def _create_member_accessors(self, cls: type[Any]) -> tuple[MemberAccessor, ...]:
        mro = cls.__mro__
        levels: list[tuple[type[Any], list[MemberAccessor]]] = []
        inherited: tuple[MemberAccessor, ...] = ()
        for position, klass in enumerate(mro):
            if klass is object:
                break
            if position > 0:
                cached = self._member_accessors.get(klass)
                if cached is not None and klass.__mro__ == mro[position:]:
                    logger.debug("Reusing %d cached accessors of %r for %r", len(cached), klass, cls)
                    inherited = cached
                    break
            levels.append((klass, self._declared_member_accessors(klass)))

        accessors = inherited
        for position in reversed(range(len(levels))):
            klass, own = levels[position]
            accessors = (*own, *accessors)
            # A superclass list is only reusable when its MRO is the tail of ours.
            if klass.__mro__ == mro[position:]:
                accessors = self._member_accessors.setdefault(klass, accessors)

        logger.debug("Compiled %d member accessors for %r", len(accessors), cls)
        return accessors

    def _declared_member_accessors(self, cls: type[Any]) -> list[MemberAccessor]:
        accessors = [self._field_accessor(field) for field in self._inspector.declared_fields(cls)]
        accessors.extend(
            self._method_accessor(method) for method in self._inspector.declared_methods(cls)
        )
        return accessors

    def _field_accessor(self, field: InjectableField) -> MemberAccessor:
        getter = self._classifier.classify(field.point)
        container = self._container
        name = field.name

        def set_field(receiver: Any) -> None:
            setattr(receiver, name, getter(container))

        return set_field

    def _method_accessor(self, method: InjectableMethod) -> MemberAccessor:
        getters = tuple(self._classifier.classify(point) for point in method.points)
        container = self._container
        points = method.points
        function = method.function

        def call_method(receiver: Any) -> None:
            args, kwargs = bind_arguments(points, [getter(container) for getter in getters])
            function(receiver, *args, **kwargs)

        return call_method

    def _find_constructor(self, cls: type[Any]) -> ConstructorAccessor:
        cached = self._constructors.get(cls)
        if cached is not None:
            return cached
        return self._constructors.setdefault(cls, self._create_constructor(cls))

    def _create_constructor(self, cls: type[Any]) -> ConstructorAccessor:
        constructor = self._select_constructor(cls)
        points = self._inspector.constructor_points(constructor)
        getters = tuple(self._classifier.classify(point) for point in points)
        container = self._container

        def construct() -> Any:
            args, kwargs = bind_arguments(points, [getter(container) for getter in getters])
            return constructor.create(args, kwargs)

        logger.debug("Selected constructor %r of %r", constructor.name, cls)
        return construct

    def _select_constructor(self, cls: type[Any]) -> InjectableConstructor:
        candidates = self._inspector.declared_constructors(cls)
        marked = [candidate for candidate in candidates if candidate.is_marked]
        if len(marked) == 1:
            return marked[0]
        if marked:
            names = ", ".join(candidate.name for candidate in marked)
            raise MarkwireAmbiguousConstructorError(
                cls,
                f"has several @inject annotated constructors: {names}",
            )
        if len(candidates) == 1:
            return candidates[0]
        raise MarkwireAmbiguousConstructorError(cls)
