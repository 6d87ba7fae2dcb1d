"""Compile injection points into container getters.

Each point is classified once into one of five shapes (lazy, provider
function, provider object, factory function, plain instance), each either
required or optional. The result is a getter that only performs the lookup.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, get_args, get_origin

from markwire.bindings import TypeBinding, bound_type, lower_type, strip_none
from markwire.container_interface import ContainerProtocol
from markwire.exceptions import MarkwireInvalidInjectionPointError
from markwire.injection import InjectionPoint, UnwrappedInjectionPoint
from markwire.lazy import Lazy
from markwire.markers import ErasedBinding, FactoryFun, OrNull, ProviderFun, split_annotated
from markwire.providers import CallableProvider, Provider
from markwire.qualifiers import QualifierRegistry

Getter = Callable[[ContainerProtocol], Any]

_CALLABLE_ORIGIN = get_origin(Callable[[], Any])


class InjectionPointClassifier:
    """Decide the shape of an injection point and build its getter."""

    def __init__(self, qualifiers: QualifierRegistry) -> None:
        self._qualifiers = qualifiers

    def classify(self, point: InjectionPoint) -> Getter:
        tag = self._qualifiers.extract_tag(point.annotations)
        should_erase = point.has_annotation(ErasedBinding)
        generic_type, is_none_union = strip_none(point.generic_type)
        is_optional = is_none_union or point.has_annotation(OrNull)
        declared_type = point.declared_type

        # Lazy goes first: it may wrap any of the other shapes.
        if declared_type is Lazy:
            wrapped = _type_arguments(generic_type, point, "Lazy[T]")[0]
            inner, inner_metadata = split_annotated(wrapped)
            if is_none_union:
                inner_metadata = (*inner_metadata, OrNull())
            inner_point = UnwrappedInjectionPoint.of(
                point,
                bound_type(inner, erase=should_erase),
                inner_metadata,
            )
            inner_getter = self.classify(inner_point)

            def lazy_getter(container: ContainerProtocol) -> Lazy[Any]:
                return Lazy(lambda: inner_getter(container))

            return lazy_getter

        if point.has_annotation(ProviderFun):
            if declared_type is not _CALLABLE_ORIGIN or not _has_parameter_count(generic_type, 0):
                raise MarkwireInvalidInjectionPointError(
                    point,
                    "ProviderFun annotated members must be of type Callable[[], T]",
                )
            binding = TypeBinding(bound_type(get_args(generic_type)[1], erase=should_erase), tag)
            if is_optional:
                return lambda container: container.provider_or_none(binding.type, binding.tag)
            return lambda container: container.provider(binding.type, binding.tag)

        if declared_type is Provider:
            provided = _type_arguments(generic_type, point, "Provider[T]")[0]
            binding = TypeBinding(bound_type(provided, erase=should_erase), tag)
            if is_optional:

                def optional_provider_getter(container: ContainerProtocol) -> Provider[Any] | None:
                    function = container.provider_or_none(binding.type, binding.tag)
                    return None if function is None else CallableProvider(function)

                return optional_provider_getter
            return lambda container: CallableProvider(container.provider(binding.type, binding.tag))

        if point.has_annotation(FactoryFun):
            if declared_type is not _CALLABLE_ORIGIN or not _has_parameter_count(generic_type, 1):
                raise MarkwireInvalidInjectionPointError(
                    point,
                    "FactoryFun annotated members must be of type Callable[[A], T]",
                )
            parameters, result = get_args(generic_type)
            arg_type = lower_type(parameters[0])
            binding = TypeBinding(bound_type(result, erase=should_erase), tag)
            if is_optional:
                return lambda container: container.factory_or_none(
                    arg_type,
                    binding.type,
                    binding.tag,
                )
            return lambda container: container.factory(arg_type, binding.type, binding.tag)

        binding = TypeBinding(bound_type(generic_type, erase=should_erase), tag)
        if is_optional:
            return lambda container: container.instance_or_none(binding.type, binding.tag)
        return lambda container: container.instance(binding.type, binding.tag)


def _type_arguments(generic_type: Any, point: InjectionPoint, expected: str) -> tuple[Any, ...]:
    arguments = get_args(generic_type)
    if not arguments:
        raise MarkwireInvalidInjectionPointError(
            point,
            f"{expected} members must declare their type argument",
        )
    return arguments


def _has_parameter_count(generic_type: Any, count: int) -> bool:
    arguments = get_args(generic_type)
    if len(arguments) != 2:  # noqa: PLR2004
        return False
    parameters = arguments[0]
    return isinstance(parameters, list) and len(parameters) == count
