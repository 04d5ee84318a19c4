"""Markers used to declare injection points, qualifiers and scopes.

Injection points are declared with :func:`inject`::

    class Service:
        cache: Annotated[Cache, inject]

        @inject
        def __init__(self, db: Annotated[Database, Named("primary")]):
            ...

        @inject
        def install(self, printer: Provider[Printer]):
            ...
"""

import inspect
from dataclasses import dataclass
from typing import Any, TypeVar

from wiring.errors import IllegalComponentError

__all__ = [
    "inject",
    "qualifier",
    "singleton",
    "Named",
    "is_injection_point",
    "is_qualifier",
    "is_singleton",
]

T = TypeVar("T")


def inject(target: T) -> T:
    """Mark a constructor, method or class as an injection point.

    Applied to a class, the class's own ``__init__`` is marked, which lets
    generated initialisers (e.g. those written by ``@dataclass``) take part in
    constructor injection. Fields are marked by using ``inject`` as
    ``Annotated`` metadata instead.

    Raises:
        IllegalComponentError: If a class without its own ``__init__`` is given.
    """
    if inspect.isclass(target):
        init = vars(target).get("__init__")
        if init is None:
            raise IllegalComponentError(
                f"{target.__qualname__} declares no __init__ to mark for injection"
            )
        init.__inject__ = True
    elif isinstance(target, (classmethod, staticmethod)):
        target.__func__.__inject__ = True
    else:
        target.__inject__ = True
    return target


def is_injection_point(member: Any) -> bool:
    member = getattr(member, "__func__", member)
    return getattr(member, "__inject__", False) is True


def qualifier(cls: type) -> type:
    """Class decorator declaring that instances of ``cls`` are qualifiers.

    Qualifiers are compared by value, so qualifier classes should be frozen
    dataclasses (or otherwise implement ``__eq__`` and ``__hash__``).

    Example:
        >>> @qualifier
        ... @dataclass(frozen=True)
        ... class Primary:
        ...     pass
    """
    cls.__qualifier__ = True
    return cls


def is_qualifier(obj: Any) -> bool:
    return not inspect.isclass(obj) and getattr(type(obj), "__qualifier__", False) is True


def singleton(cls: type) -> type:
    """Construct at most one instance of ``cls`` per binding."""
    cls.__singleton__ = True
    return cls


def is_singleton(cls: type) -> bool:
    return vars(cls).get("__singleton__", False) is True


@qualifier
@dataclass(frozen=True)
class Named:
    """Qualifier distinguishing components of the same type by name."""

    value: str
