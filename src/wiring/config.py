"""Binding of components to the values or classes that provide them."""

import inspect
import threading
from typing import Any, Callable, Optional, get_origin

from loguru import logger

from wiring.annotations import is_qualifier, is_singleton
from wiring.context import Context
from wiring.domain import Component, ComponentProvider, ComponentRef, Provider
from wiring.errors import IllegalComponentError
from wiring.injection import InjectionProvider
from wiring.validation import check_dependencies

__all__ = ["ContextConfig"]


class ContextConfig:
    """Registry of bindings, frozen into a validated :class:`Context` on demand.

    Binding the same component twice replaces the earlier binding.

    Example:
        >>> config = ContextConfig()
        >>> config.bind(Database, InMemoryDatabase)
        >>> config.bind(Settings, Settings(debug=True))
        >>> config.bind(Cache, RedisCache, Named("sessions"))
        >>> context = config.get_context()
        >>> context.get(Database)
    """

    def __init__(self):
        self._providers: dict[Component, ComponentProvider] = {}

    def bind(self, component_type: Any, target: Any, *qualifiers: Any) -> None:
        """Bind a component type to an instance or to an injectable class.

        Args:
            component_type: The type under which the component is looked up.
            target: A class, built through its injection points on each lookup
                (once, if it is marked ``@singleton``), or any other object,
                returned as is.
            *qualifiers: Qualifiers under which the component is bound. Each
                qualifier creates a separate binding sharing the same target.

        Raises:
            IllegalComponentError: If ``target`` is ``None`` or an illegal
                component class, if ``component_type`` is a ``Provider``, or if
                any of ``qualifiers`` is not a qualifier.
        """
        if get_origin(component_type) is Provider:
            raise IllegalComponentError(
                f"Cannot bind {component_type}: providers are derived from the components they provide"
            )
        illegal = [q for q in qualifiers if not is_qualifier(q)]
        if illegal:
            raise IllegalComponentError(f"{illegal} are not qualifiers")

        provider = _make_provider(target)
        components = [Component(component_type, q) for q in qualifiers] or [
            Component(component_type)
        ]
        for component in components:
            self._register(component, provider)

    def component(self, component_type: Optional[Any] = None, *qualifiers: Any) -> Callable:
        """Decorator binding a class, under its own type unless another is given.

        Example:
            >>> @config.component(Database)
            ... class InMemoryDatabase(Database):
            ...     pass
        """

        def decorator(cls: type) -> type:
            self.bind(cls if component_type is None else component_type, cls, *qualifiers)
            return cls

        return decorator

    def get_context(self) -> Context:
        """Validate the bindings and return a context over a snapshot of them.

        Raises:
            DependencyNotFoundError: If a bound component requires a component
                that is not bound.
            CyclicDependenciesFoundError: If bound components require each
                other other than through a ``Provider``.
        """
        providers = dict(self._providers)
        check_dependencies(providers)

        scoped: dict[ComponentProvider, ComponentProvider] = {}
        for component, provider in providers.items():
            if isinstance(provider, _SingletonProvider):
                if provider not in scoped:
                    scoped[provider] = provider.renewed()
                providers[component] = scoped[provider]

        logger.debug(f"Created context with {len(providers)} components")
        return Context(providers)

    def _register(self, component: Component, provider: ComponentProvider) -> None:
        if component in self._providers:
            logger.warning(f"Replacing binding of {component}: {self._providers[component]!r}")
        self._providers[component] = provider
        logger.debug(f"Bound {component} to {provider!r}")


def _make_provider(target: Any) -> ComponentProvider:
    if target is None:
        raise IllegalComponentError("Cannot bind a component to None")
    if inspect.isclass(target):
        provider = InjectionProvider(target)
        return _SingletonProvider(provider) if is_singleton(target) else provider
    return _InstanceProvider(target)


class _InstanceProvider:
    def __init__(self, instance: Any):
        self._instance = instance

    @property
    def dependencies(self) -> list[ComponentRef]:
        return []

    def get(self, context: Context) -> Any:
        return self._instance

    def __repr__(self) -> str:
        return f"_InstanceProvider({self._instance!r})"


class _SingletonProvider:
    """Builds its component once and returns that instance on every lookup."""

    def __init__(self, provider: ComponentProvider):
        self._provider = provider
        self._lock = threading.RLock()
        self._instance = None
        self._built = False

    @property
    def dependencies(self) -> list[ComponentRef]:
        return self._provider.dependencies

    def get(self, context: Context) -> Any:
        with self._lock:
            if not self._built:
                self._instance = self._provider.get(context)
                self._built = True
            return self._instance

    def renewed(self) -> "_SingletonProvider":
        """A provider sharing the injection metadata but none of the state."""
        return _SingletonProvider(self._provider)

    def __repr__(self) -> str:
        return f"_SingletonProvider({self._provider!r})"
