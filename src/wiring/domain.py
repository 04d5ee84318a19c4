"""Domain models used throughout the container."""

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    Protocol,
    TypeVar,
    get_args,
    get_origin,
)

__all__ = ["Component", "ComponentRef", "ComponentProvider", "Provider"]

T = TypeVar("T")


class Provider(Generic[T]):
    """A deferred handle on a component.

    Declaring a dependency as ``Provider[T]`` instead of ``T`` postpones the
    construction of ``T`` until the provider is called, which is what allows
    two components to refer to each other.
    """

    def __init__(self, factory: Callable[[], T]):
        self._factory = factory

    def get(self) -> T:
        return self._factory()

    def __call__(self) -> T:
        return self.get()


@dataclass(frozen=True)
class Component:
    """A bindable slot: a type plus an optional qualifier.

    Attributes:
        type: The type (or typing construct) the slot provides.
        qualifier: An optional qualifier instance narrowing the slot.
    """

    type: Any
    qualifier: Optional[Any] = None

    def __str__(self) -> str:
        name = getattr(self.type, "__qualname__", None) or str(self.type)
        return name if self.qualifier is None else f"{name} [{self.qualifier!r}]"


@dataclass(frozen=True)
class ComponentRef:
    """A reference to a component, either direct or through a container.

    Attributes:
        component: The referenced component.
        container: ``Provider`` when the component is referenced through a
            deferred provider, otherwise ``None``.

    Example:
        >>> ComponentRef.of(Provider[Database]).component
        Component(type=<class 'Database'>, qualifier=None)
    """

    component: Component
    container: Optional[type] = None

    @classmethod
    def of(cls, component_type: Any, qualifier: Optional[Any] = None) -> "ComponentRef":
        if get_origin(component_type) is Provider:
            (wrapped,) = get_args(component_type)
            return cls(Component(wrapped, qualifier), Provider)
        return cls(Component(component_type, qualifier))

    @property
    def type(self) -> Any:
        return self.component.type

    @property
    def qualifier(self) -> Optional[Any]:
        return self.component.qualifier

    @property
    def is_container(self) -> bool:
        return self.container is not None

    def __str__(self) -> str:
        if self.is_container:
            return f"{self.container.__name__}[{self.component}]"
        return str(self.component)


class ComponentProvider(Protocol):
    """Strategy producing the value bound to a component."""

    @property
    def dependencies(self) -> list[ComponentRef]:
        """Components that must be resolvable before ``get`` is called."""
        ...

    def get(self, context: Any) -> Any:
        ...
