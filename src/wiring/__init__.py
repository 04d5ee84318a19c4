"""Wiring dependency injection container.

Wiring builds object graphs from bindings between component types and the
instances or classes providing them. Classes declare what they need through
injection points (constructor, fields and methods marked with ``inject``),
and the whole binding set is validated up front: missing dependencies and
construction cycles are reported when the context is created, not when a
component is first looked up.

Key Features:
    - Constructor, field and method injection driven by standard type hints
    - Qualifiers (``Annotated[T, Named("...")]``) to tell components of one type apart
    - ``Provider[T]`` dependencies to defer construction and break cycles
    - Eager detection of missing and cyclic dependencies
    - Optional ``@singleton`` scope

Basic Usage:
    >>> from typing import Annotated
    >>> from wiring import ContextConfig, inject, Named
    >>>
    >>> class Service:
    ...     @inject
    ...     def __init__(self, db: Annotated[Database, Named("primary")]):
    ...         self.db = db
    >>>
    >>> config = ContextConfig()
    >>> config.bind(Database, Database(), Named("primary"))
    >>> config.bind(Service, Service)
    >>> service = config.get_context().get(Service)

The package consists of several modules:
    - config: Binding registry and context creation
    - context: Lookup of bound components
    - injection: Injection point extraction and component construction
    - validation: Dependency graph checks
    - annotations: ``inject``, ``qualifier``, ``singleton`` and ``Named``
    - domain: Core domain models (Component, ComponentRef, Provider)
    - errors: Framework-specific exceptions

Logging goes through loguru and is disabled by default; call
``logger.enable("wiring")`` to see it.
"""

from loguru import logger

from wiring.annotations import Named, inject, qualifier, singleton
from wiring.config import ContextConfig
from wiring.context import Context
from wiring.domain import Component, ComponentRef, Provider
from wiring.errors import (
    ConstructionError,
    CyclicDependenciesFoundError,
    DependencyError,
    DependencyNotFoundError,
    IllegalComponentError,
)

__all__ = [
    "Component",
    "ComponentRef",
    "ConstructionError",
    "Context",
    "ContextConfig",
    "CyclicDependenciesFoundError",
    "DependencyError",
    "DependencyNotFoundError",
    "IllegalComponentError",
    "Named",
    "Provider",
    "inject",
    "qualifier",
    "singleton",
]

logger.disable("wiring")
