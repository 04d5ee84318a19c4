from dataclasses import dataclass

import pytest

from components import Dependency, NotAQualifier, Skywalker
from wiring import (
    Component,
    ComponentRef,
    CyclicDependenciesFoundError,
    IllegalComponentError,
    Named,
    Provider,
    inject,
    qualifier,
)
from wiring.annotations import is_injection_point, is_qualifier


def test_component_ref_of_plain_type_is_direct():
    ref = ComponentRef.of(Dependency)

    assert ref.component == Component(Dependency)
    assert ref.container is None
    assert not ref.is_container


def test_component_ref_of_provider_wraps_the_provided_type():
    ref = ComponentRef.of(Provider[Dependency], Named("ChosenOne"))

    assert ref.is_container
    assert ref.container is Provider
    assert ref.type is Dependency
    assert ref.qualifier == Named("ChosenOne")


def test_provider_ref_and_direct_ref_are_distinct():
    assert ComponentRef.of(Provider[Dependency]) != ComponentRef.of(Dependency)
    assert ComponentRef.of(Provider[Dependency]) == ComponentRef.of(Provider[Dependency])


def test_other_generic_aliases_are_plain_types():
    ref = ComponentRef.of(list[Dependency])

    assert not ref.is_container
    assert ref.type == list[Dependency]


def test_qualifiers_are_compared_by_value():
    assert Component(Dependency, Named("ChosenOne")) == Component(Dependency, Named("ChosenOne"))
    assert hash(Component(Dependency, Named("ChosenOne"))) == hash(
        Component(Dependency, Named("ChosenOne"))
    )
    assert Component(Dependency, Skywalker()) == Component(Dependency, Skywalker())


def test_qualified_and_unqualified_components_are_distinct():
    assert Component(Dependency) != Component(Dependency, Named("ChosenOne"))
    assert Component(Dependency, Named("ChosenOne")) != Component(Dependency, Skywalker())


def test_qualifier_instances_are_recognised():
    @qualifier
    @dataclass(frozen=True)
    class Primary:
        pass

    assert is_qualifier(Named("ChosenOne"))
    assert is_qualifier(Primary())
    assert not is_qualifier(Named)
    assert not is_qualifier(NotAQualifier())
    assert not is_qualifier("ChosenOne")


def test_provider_resolves_on_every_call():
    calls = []
    provider = Provider(lambda: calls.append(1) or len(calls))

    assert calls == []
    assert provider() == 1
    assert provider.get() == 2


def test_inject_marks_functions_and_alternate_constructors():
    @inject
    def install(self):
        pass

    marked = inject(classmethod(lambda cls: cls()))

    assert is_injection_point(install)
    assert is_injection_point(marked)
    assert not is_injection_point(lambda: None)


def test_inject_requires_class_to_declare_init():
    class WithoutInit:
        pass

    with pytest.raises(IllegalComponentError):
        inject(WithoutInit)


def test_cyclic_error_reports_distinct_types():
    error = CyclicDependenciesFoundError(
        [Component(Dependency), Component(Dependency, Named("ChosenOne"))]
    )

    assert error.components == {Dependency}


def test_component_str_includes_qualifier():
    assert str(Component(Dependency)) == "Dependency"
    assert str(Component(Dependency, Named("x"))) == "Dependency [Named(value='x')]"
    assert str(ComponentRef.of(Provider[Dependency])) == "Provider[Dependency]"
