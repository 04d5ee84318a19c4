"""Exceptions raised while configuring, validating or resolving components."""

from typing import Any, Iterable

__all__ = [
    "DependencyError",
    "IllegalComponentError",
    "DependencyNotFoundError",
    "CyclicDependenciesFoundError",
    "ConstructionError",
]


class DependencyError(Exception):
    """Base class for every error raised by the container."""

    pass


class IllegalComponentError(DependencyError):
    """Raised when a component or one of its injection points is misdeclared."""

    pass


class DependencyNotFoundError(DependencyError):
    """Raised when a bound component requires a component that is not bound.

    Attributes:
        component: The component declaring the dependency.
        dependency: The component that could not be found.
    """

    def __init__(self, component: Any, dependency: Any):
        super().__init__(f"Dependency {dependency} of component {component} not found")
        self.component = component
        self.dependency = dependency


class CyclicDependenciesFoundError(DependencyError):
    """Raised when bound components depend on each other in a cycle.

    Attributes:
        components: The distinct types taking part in the cycle.
    """

    def __init__(self, visiting: Iterable[Any]):
        self.components = frozenset(component.type for component in visiting)
        super().__init__(
            f"Cyclic dependencies found between {sorted(map(_type_name, self.components))}"
        )


class ConstructionError(DependencyError):
    """Raised when user code fails while a component is being built.

    The underlying exception is available as ``cause`` and ``__cause__``.
    """

    def __init__(self, component: Any, cause: BaseException):
        super().__init__(f"Failed to construct {_type_name(component)}: {cause!r}")
        self.component = component
        self.cause = cause


def _type_name(t: Any) -> str:
    return getattr(t, "__qualname__", None) or str(t)
