from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Annotated

import pytest

from markwire.exceptions import MarkwireAnnotationResolutionError
from markwire.injection import (
    ConstructorParameterInjectionPoint,
    FieldInjectionPoint,
    InjectableMembersInspector,
    MethodParameterInjectionPoint,
    UnwrappedInjectionPoint,
    bind_arguments,
)
from markwire.markers import ErasedBinding, Injected, InjectMarker, Maybe, Named, OrNull, inject

if TYPE_CHECKING:
    from decimal import Decimal


class Database:
    pass


class Settings:
    pass


class Service:
    primary: Injected[Annotated[Database, Named("primary")]]
    cache: Injected[list[Database]]
    plain: Database
    counter: int = 0

    def __init__(self, settings: Settings, *, retries: int = 3) -> None:
        self.settings = settings
        self.retries = retries

    @inject
    def configure(self, database: Maybe[Database], *extras: object, **options: object) -> None:
        self.database = database

    @inject
    @staticmethod
    def helper(database: Database) -> None:
        pass

    def untouched(self, database: Database) -> None:
        pass


class Receipt:
    total: Decimal
    paid: Injected[Database]
    note: str


class BrokenReceipt:
    total: Injected[Decimal]


class Checkout:
    @inject
    def pay(self, total: Decimal) -> None:
        pass


class TestInjectionPoints:
    def test_field_point_splits_hint(self) -> None:
        hint = Injected[Annotated[list[Database], Named("primary"), ErasedBinding()]]
        point = FieldInjectionPoint(owner=Service, name="primary", hint=hint)

        assert point.generic_type == list[Database]
        assert point.declared_type is list
        assert point.annotations == (Named("primary"), ErasedBinding(), InjectMarker())
        assert point.has_annotation(ErasedBinding)
        assert not point.has_annotation(OrNull)
        assert str(point) == f"field 'primary' of {__name__}.Service"

    def test_parameter_points_describe_their_position(self) -> None:
        parameter = inspect.signature(Service.configure).parameters["database"]
        method_point = MethodParameterInjectionPoint(
            function=Service.configure,
            index=0,
            parameter=parameter,
            hint=Database,
        )
        constructor_point = ConstructorParameterInjectionPoint(
            owner=Service,
            function=Service.__init__,
            index=0,
            parameter=parameter,
            hint=Database,
        )

        assert str(method_point) == f"parameter 1 ('database') of {__name__}.Service.configure"
        assert str(constructor_point) == (
            f"parameter 1 ('database') of constructor {__name__}.Service.__init__ "
            f"of {__name__}.Service"
        )
        assert method_point.annotations == ()

    def test_unwrapped_point_merges_metadata_and_reports_outer(self) -> None:
        outer = FieldInjectionPoint(
            owner=Service,
            name="primary",
            hint=Annotated[Database, Named("primary")],
        )

        inner = UnwrappedInjectionPoint.of(outer, Settings, (OrNull(),))

        assert inner.generic_type is Settings
        assert inner.annotations == (Named("primary"), OrNull())
        assert str(inner) == str(outer)

    def test_declared_type_ignores_none_arm(self) -> None:
        point = FieldInjectionPoint(owner=Service, name="cache", hint=list[Database] | None)

        assert point.declared_type is list

    def test_unwrapped_point_without_metadata_is_plain(self) -> None:
        outer = FieldInjectionPoint(owner=Service, name="plain", hint=Database)

        inner = UnwrappedInjectionPoint.of(outer, Settings)

        assert inner.hint is Settings


class TestInspector:
    def test_declared_fields_only_include_injected_annotations(self) -> None:
        fields = InjectableMembersInspector().declared_fields(Service)

        assert [field.name for field in fields] == ["primary", "cache"]
        assert fields[1].point.generic_type == list[Database]

    def test_unresolvable_plain_field_is_skipped(self) -> None:
        fields = InjectableMembersInspector().declared_fields(Receipt)

        assert [field.name for field in fields] == ["paid"]

    def test_unresolvable_injected_field_is_an_error(self) -> None:
        with pytest.raises(MarkwireAnnotationResolutionError, match="Decimal") as exc_info:
            InjectableMembersInspector().declared_fields(BrokenReceipt)

        assert exc_info.value.owner is BrokenReceipt

    def test_unresolvable_method_parameter_is_an_error(self) -> None:
        with pytest.raises(MarkwireAnnotationResolutionError, match="Decimal"):
            InjectableMembersInspector().declared_methods(Checkout)

    def test_class_without_annotations_has_no_fields(self) -> None:
        assert InjectableMembersInspector().declared_fields(Database) == ()

    def test_declared_methods_skip_unmarked_and_static(self) -> None:
        methods = InjectableMembersInspector().declared_methods(Service)

        assert [method.name for method in methods] == ["configure"]
        points = methods[0].points
        assert [point.parameter.name for point in points] == ["database"]
        assert points[0].generic_type is Database
        assert points[0].has_annotation(OrNull)

    def test_constructor_points_cover_keyword_only_parameters(self) -> None:
        inspector = InjectableMembersInspector()
        (constructor,) = inspector.declared_constructors(Service)

        points = inspector.constructor_points(constructor)

        assert constructor.name == "__init__"
        assert not constructor.is_marked
        assert [point.parameter.name for point in points] == ["settings", "retries"]
        assert [point.generic_type for point in points] == [Settings, int]

    def test_object_init_has_no_parameters(self) -> None:
        inspector = InjectableMembersInspector()
        (constructor,) = inspector.declared_constructors(Database)

        assert inspector.constructor_points(constructor) == ()


def test_bind_arguments_splits_keyword_only_values() -> None:
    inspector = InjectableMembersInspector()
    (constructor,) = inspector.declared_constructors(Service)
    points = inspector.constructor_points(constructor)
    settings = Settings()

    args, kwargs = bind_arguments(points, [settings, 5])

    assert args == [settings]
    assert kwargs == {"retries": 5}
