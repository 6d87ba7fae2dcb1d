from markwire.bindings import Extends, Super, TypeBinding, Wildcard
from markwire.container_interface import ContainerProtocol
from markwire.exceptions import (
    MarkwireAmbiguousConstructorError,
    MarkwireAnnotationResolutionError,
    MarkwireConfigurationError,
    MarkwireError,
    MarkwireInvalidInjectionPointError,
)
from markwire.injector import Injector
from markwire.lazy import Lazy
from markwire.markers import (
    ErasedBinding,
    FactoryFun,
    Injected,
    InjectMarker,
    Maybe,
    Named,
    OrNull,
    ProviderFun,
    constructor,
    inject,
)
from markwire.providers import CallableProvider, Provider
from markwire.qualifiers import QualifierRegistry

__all__ = [
    "CallableProvider",
    "ContainerProtocol",
    "ErasedBinding",
    "Extends",
    "FactoryFun",
    "InjectMarker",
    "Injected",
    "Injector",
    "Lazy",
    "MarkwireAmbiguousConstructorError",
    "MarkwireAnnotationResolutionError",
    "MarkwireConfigurationError",
    "MarkwireError",
    "MarkwireInvalidInjectionPointError",
    "Maybe",
    "Named",
    "OrNull",
    "Provider",
    "ProviderFun",
    "QualifierRegistry",
    "Super",
    "TypeBinding",
    "Wildcard",
    "constructor",
    "inject",
]
