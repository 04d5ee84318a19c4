"""Extraction of injection points from component classes, and their construction.

An :class:`InjectionProvider` inspects a concrete class once, when it is bound,
and records:

- the constructor to call (the single ``@inject`` constructor, or an
  argument-less ``__init__``),
- the ``Annotated[T, inject]`` fields, base class first,
- the ``@inject`` methods, base class first, with overridden methods
  collected at most once.

Each injection point lists the components it requires as :class:`ComponentRef`
objects, which is all the container needs to validate the dependency graph
before anything is built.
"""

import inspect
import re
from dataclasses import dataclass, is_dataclass
from typing import (
    Annotated,
    Any,
    Callable,
    Final,
    Iterator,
    Optional,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from loguru import logger

from wiring.annotations import inject, is_injection_point, is_qualifier
from wiring.domain import Component, ComponentRef
from wiring.errors import (
    ConstructionError,
    DependencyError,
    DependencyNotFoundError,
    IllegalComponentError,
)

__all__ = ["Injectable", "InjectionProvider"]

_UNSUPPORTED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
)


@dataclass(frozen=True)
class Injectable:
    """A single injection point and the components it requires.

    Attributes:
        name: The constructor, field or method name.
        element: What gets invoked: the class or alternate constructor for
            constructors, the declared function for methods, ``None`` for fields.
        parameters: Names under which the required components are passed.
        required: The components required, in declaration order.
    """

    name: str
    element: Optional[Callable]
    parameters: tuple[str, ...]
    required: tuple[ComponentRef, ...]


class InjectionProvider:
    """Builds instances of a concrete class through its injection points.

    Raises:
        IllegalComponentError: If the class cannot be injected: it is abstract
            or a protocol, has several injectable constructors or none usable,
            has immutable injected fields, generic injected methods, or an
            injection point carrying more than one qualifier.
    """

    def __init__(self, component: type):
        if not inspect.isclass(component):
            raise IllegalComponentError(f"{component!r} is not a class")
        if inspect.isabstract(component) or getattr(component, "_is_protocol", False):
            raise IllegalComponentError(
                f"{component.__qualname__} is abstract and cannot be instantiated"
            )

        self.component = component
        self.inject_constructor = _inject_constructor(component)
        self.inject_fields = _inject_fields(component)
        self.inject_methods = _inject_methods(component)

        logger.debug(
            f"Injection points of {component.__qualname__}: "
            f"constructor={self.inject_constructor.name}, "
            f"fields={[f.name for f in self.inject_fields]}, "
            f"methods={[m.name for m in self.inject_methods]}"
        )

    @property
    def dependencies(self) -> list[ComponentRef]:
        """Every component required by the constructor, fields and methods."""
        return [
            ref
            for injectable in (
                self.inject_constructor,
                *self.inject_fields,
                *self.inject_methods,
            )
            for ref in injectable.required
        ]

    def get(self, context) -> Any:
        """Construct a new instance, resolving its dependencies from ``context``.

        Raises:
            DependencyNotFoundError: If ``context`` cannot supply a dependency.
            ConstructionError: If the constructor, a field assignment or an
                injected method raises.
        """
        instance = self._invoke(
            self.inject_constructor.element,
            **self._arguments(self.inject_constructor, context),
        )
        for field in self.inject_fields:
            (value,) = self._arguments(field, context).values()
            self._invoke(setattr, instance, field.name, value)
        for method in self.inject_methods:
            self._invoke(method.element, instance, **self._arguments(method, context))
        return instance

    def _arguments(self, injectable: Injectable, context) -> dict[str, Any]:
        arguments = {}
        for name, ref in zip(injectable.parameters, injectable.required):
            value = context.get(ref)
            if value is None:
                raise DependencyNotFoundError(Component(self.component), ref.component)
            arguments[name] = value
        return arguments

    def _invoke(self, func: Callable, *args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except DependencyError:
            raise
        except Exception as e:
            raise ConstructionError(self.component, e) from e

    def __repr__(self) -> str:
        return f"InjectionProvider({self.component.__qualname__})"


def _inject_constructor(component: type) -> Injectable:
    marked = [
        (name, member)
        for name, member in _constructors(component)
        if is_injection_point(member)
    ]
    if len(marked) > 1:
        raise IllegalComponentError(
            f"{component.__qualname__} declares more than one injectable constructor: "
            f"{[name for name, _ in marked]}"
        )
    if not marked:
        return _default_constructor(component)

    name, member = marked[0]
    if name == "__init__":
        return _injectable(member, component, bound=True)
    return _injectable(
        member.__func__,
        getattr(component, name),
        bound=isinstance(member, classmethod),
    )


def _constructors(component: type) -> Iterator[tuple[str, Any]]:
    """Yield ``__init__`` followed by the alternate constructors visible on the class."""
    yield "__init__", component.__init__
    seen = set()
    for current in component.__mro__:
        for name, member in vars(current).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(member, (classmethod, staticmethod)):
                yield name, member


def _default_constructor(component: type) -> Injectable:
    try:
        signature = inspect.signature(component)
    except (TypeError, ValueError) as e:
        raise IllegalComponentError(
            f"Cannot inspect the constructor of {component.__qualname__}"
        ) from e

    required = [
        parameter.name
        for parameter in signature.parameters.values()
        if parameter.default is inspect.Parameter.empty
        and parameter.kind
        not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if required:
        raise IllegalComponentError(
            f"{component.__qualname__} has neither an injectable constructor "
            f"nor a constructor without arguments (requires {required})"
        )
    return Injectable("__init__", component, (), ())


def _inject_fields(component: type) -> list[Injectable]:
    frozen = is_dataclass(component) and component.__dataclass_params__.frozen
    fields = []

    for current in reversed(_ancestry(component)):
        for name, annotation in inspect.get_annotations(current).items():
            where = f"field {current.__qualname__}.{name}"
            try:
                hint = _field_hint(current, name, annotation)
            except NameError as e:
                if _mentions_inject(annotation):
                    raise IllegalComponentError(
                        f"Cannot resolve annotation of injected {where}: {e}"
                    ) from e
                logger.debug(f"Ignoring unresolvable annotation of {where}: {e}")
                continue
            _, metadata, final = _unwrap(hint)
            if not any(m is inject for m in metadata):
                continue
            if final or frozen:
                raise IllegalComponentError(f"Injected {where} is immutable")
            ref = _to_component_ref(hint, where)
            fields.append(Injectable(name, None, (name,), (ref,)))

    return fields


def _field_hint(owner: type, name: str, annotation: Any) -> Any:
    """Resolve the annotation of one field, leaving the class's other fields alone."""
    single = type(
        owner.__name__,
        (),
        {"__module__": owner.__module__, "__annotations__": {name: annotation}},
    )
    return get_type_hints(single, localns=dict(vars(owner)), include_extras=True)[name]


def _mentions_inject(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return re.search(r"\binject\b", annotation) is not None
    return any(m is inject for m in _unwrap(annotation)[1])


def _inject_methods(component: type) -> list[Injectable]:
    """Collect injectable methods, most derived class first, then reverse by level.

    A method is skipped when a more derived class already contributed an
    injectable method with the same signature, or when the component class
    itself redeclares it without marking it.
    """
    unmarked_overrides = {
        _override_key(name, member)
        for name, member in vars(component).items()
        if _is_method(name, member) and not is_injection_point(member)
    }

    collected = set()
    levels = []
    for current in _ancestry(component):
        level = []
        for name, member in vars(current).items():
            if not (_is_method(name, member) and is_injection_point(member)):
                continue
            key = _override_key(name, member)
            if key in collected or key in unmarked_overrides:
                continue
            level.append((key, member))
        collected.update(key for key, _ in level)
        levels.append((current, [member for _, member in level]))

    methods = []
    for current, level in reversed(levels):
        for member in level:
            injectable = _injectable(member, member, bound=True)
            if _declares_type_parameters(current, member):
                raise IllegalComponentError(
                    f"Injected method {current.__qualname__}.{member.__name__} "
                    f"declares type parameters"
                )
            methods.append(_dispatched(component, member, injectable))
    return methods


def _dispatched(component: type, member: Callable, injectable: Injectable) -> Injectable:
    """Point a collected method at the implementation the component resolves.

    An unmarked override in an intermediate class replaces the body of the
    marked method it overrides, while keeping its injection point. Its
    parameters may be named differently, so arguments are passed under the
    resolved function's names, in declaration order.
    """
    resolved = inspect.getattr_static(component, member.__name__, None)
    if resolved is member or not inspect.isfunction(resolved):
        return injectable
    if _override_key(member.__name__, resolved) != _override_key(member.__name__, member):
        return injectable
    parameters = tuple(list(inspect.signature(resolved).parameters)[1:])
    return Injectable(injectable.name, resolved, parameters, injectable.required)


def _injectable(func: Callable, element: Callable, bound: bool) -> Injectable:
    """Describe ``func`` as an injection point invoked through ``element``.

    Args:
        func: The declared function, inspected for parameters and annotations.
        element: The callable invoked at construction time.
        bound: Whether the first parameter receives the instance or class
            rather than a dependency.
    """
    hints = _type_hints(func)
    parameters = list(inspect.signature(func).parameters.values())
    if bound:
        parameters = parameters[1:]

    names, required = [], []
    for parameter in parameters:
        where = f"parameter <{parameter.name}> of <{func.__qualname__}>"
        if parameter.kind in _UNSUPPORTED_KINDS:
            raise IllegalComponentError(f"Injected {where} must be passable by keyword")
        if parameter.name not in hints:
            raise IllegalComponentError(f"Injected {where} is not annotated")
        names.append(parameter.name)
        required.append(_to_component_ref(hints[parameter.name], where))

    return Injectable(func.__name__, element, tuple(names), tuple(required))


def _to_component_ref(annotation: Any, where: str) -> ComponentRef:
    component_type, metadata, _ = _unwrap(annotation)
    qualifiers = [m for m in metadata if is_qualifier(m)]
    if len(qualifiers) > 1:
        raise IllegalComponentError(f"{where} declares more than one qualifier: {qualifiers}")
    return ComponentRef.of(component_type, next(iter(qualifiers), None))


def _unwrap(annotation: Any) -> tuple[Any, list[Any], bool]:
    """Split an annotation into its type, its ``Annotated`` metadata and finality."""
    metadata = []
    final = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation, *extra = get_args(annotation)
            metadata.extend(extra)
        elif origin is Final:
            (annotation,) = get_args(annotation)
            final = True
        else:
            return annotation, metadata, final


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=True)
    except NameError as e:
        raise IllegalComponentError(f"Cannot resolve annotations of {obj!r}: {e}") from e


def _override_key(name: str, func: Callable) -> tuple[str, tuple[Any, ...]]:
    parameters = list(inspect.signature(func).parameters.values())[1:]
    try:
        hints = get_type_hints(func)
    except NameError:
        # Unresolvable annotations compare in their written form.
        hints = {}
    return name, tuple(_strip_annotated(hints.get(p.name, p.annotation)) for p in parameters)


def _strip_annotated(annotation: Any) -> Any:
    if get_origin(annotation) is Annotated:
        return get_args(annotation)[0]
    return annotation


def _declares_type_parameters(owner: type, func: Callable) -> bool:
    if getattr(func, "__type_params__", ()):
        return True
    class_parameters = set(getattr(owner, "__parameters__", ()))
    return any(
        type_var not in class_parameters
        for annotation in _type_hints(func).values()
        for type_var in _type_vars(annotation)
    )


def _type_vars(annotation: Any) -> Iterator[TypeVar]:
    if isinstance(annotation, TypeVar):
        yield annotation
    elif isinstance(annotation, (list, tuple)):
        for item in annotation:
            yield from _type_vars(item)
    else:
        for arg in get_args(annotation):
            yield from _type_vars(arg)


def _is_method(name: str, member: Any) -> bool:
    return inspect.isfunction(member) and name != "__init__"


def _ancestry(component: type) -> list[type]:
    """The class and its ancestors, most derived first, excluding ``object``."""
    return [c for c in component.__mro__ if c is not object]
