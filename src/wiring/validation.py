"""Validation of the dependency graph formed by a set of bindings.

Each bound component is a node; each component it requires is an edge. The
graph must be complete (every required component bound) and acyclic, except
for edges through a ``Provider[...]``, which defer resolution and therefore
cannot take part in a construction cycle.
"""

from typing import Mapping

from loguru import logger

from wiring.domain import Component, ComponentProvider
from wiring.errors import CyclicDependenciesFoundError, DependencyNotFoundError

__all__ = ["check_dependencies"]


def check_dependencies(providers: Mapping[Component, ComponentProvider]) -> None:
    """Check the dependencies of every bound component.

    Args:
        providers: Mapping from bound components to their providers.

    Raises:
        DependencyNotFoundError: If a component requires a component that is
            not bound, including one it requires through a ``Provider``.
        CyclicDependenciesFoundError: If components require each other, directly
            or transitively, other than through a ``Provider``.
    """
    checked: set[Component] = set()
    for component in providers:
        _check(component, providers, [component], checked)
    logger.debug(f"Validated dependencies of {len(providers)} components")


def _check(
    component: Component,
    providers: Mapping[Component, ComponentProvider],
    visiting: list[Component],
    checked: set[Component],
) -> None:
    # A checked component reaches no cycle and no missing dependency.
    if component in checked:
        return
    for dependency in providers[component].dependencies:
        if dependency.component not in providers:
            raise DependencyNotFoundError(component, dependency.component)
        if dependency.is_container:
            continue
        if dependency.component in visiting:
            raise CyclicDependenciesFoundError(visiting)

        visiting.append(dependency.component)
        _check(dependency.component, providers, visiting, checked)
        visiting.pop()
    checked.add(component)
