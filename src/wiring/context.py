"""The resolved, validated view of a set of bindings."""

from types import MappingProxyType
from typing import Any, Mapping, Optional

from wiring.domain import Component, ComponentProvider, ComponentRef, Provider

__all__ = ["Context"]


class Context:
    """Answers lookups for components bound in a :class:`ContextConfig`.

    Contexts are created by :meth:`ContextConfig.get_context`, which validates
    the bindings first, so every dependency declared by a bound component can
    be resolved. Values are built lazily on lookup.

    Example:
        >>> context = config.get_context()
        >>> service = context.get(Service)
        >>> deferred = context.get(Provider[Service])
        >>> deferred() is not None
        True
    """

    def __init__(self, providers: Mapping[Component, ComponentProvider]):
        self._providers = MappingProxyType(dict(providers))

    def get(self, ref: Any) -> Optional[Any]:
        """Resolve a component.

        Args:
            ref: A :class:`ComponentRef`, or a type (``Provider[T]`` included),
                which is looked up without a qualifier.

        Returns:
            The component, a :class:`Provider` for it when ``ref`` is a
            provider reference, or ``None`` if it is not bound.
        """
        if not isinstance(ref, ComponentRef):
            ref = ComponentRef.of(ref)

        provider = self._providers.get(ref.component)
        if provider is None:
            return None
        if ref.is_container:
            return Provider(lambda: provider.get(self))
        return provider.get(self)

    def __getitem__(self, ref: Any) -> Any:
        component = self.get(ref)
        if component is None:
            raise KeyError(ref)
        return component

    def __contains__(self, ref: Any) -> bool:
        if not isinstance(ref, ComponentRef):
            ref = ComponentRef.of(ref)
        return ref.component in self._providers
