"""Declarative markers consumed by the container.

Markers are frozen pydantic models. Class and method markers are attached by
decorators when the class body executes; parameter and field markers travel in
``typing.Annotated`` metadata::

    @component
    @order(10)
    class UserService:
        repository: Annotated[UserRepository, Autowired()]

        def __init__(self, timeout: Annotated[int, Value("${users.timeout:30}")]) -> None:
            self.timeout = timeout
"""

import types
from typing import (
    Annotated,
    Any,
    Callable,
    ClassVar,
    Final,
    FrozenSet,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel, ConfigDict, Field

from miraveja_ioc.domain.exceptions import BeanDefinitionError

ANNOTATIONS_ATTRIBUTE = "__ioc_annotations__"

A = TypeVar("A", bound="Annotation")
T = TypeVar("T")


class Annotation(BaseModel):
    """Base class of every marker. Subclass it to declare custom markers."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Component(Annotation):
    """Marks a class as a managed component."""

    value: str = Field(default="", description="Explicit bean name, empty for the default name.")

    def __init__(self, value: str = "", **data: Any) -> None:
        super().__init__(value=value, **data)


class Configuration(Component):
    """Marks a component whose ``@bean`` methods produce further beans."""


class Bean(Annotation):
    """Marks a factory method of a configuration class."""

    value: str = Field(default="", description="Explicit bean name, empty for the method name.")
    init_method: str = Field(default="", description="Init method resolved on the produced instance.")
    destroy_method: str = Field(default="", description="Destroy method resolved on the produced instance.")

    def __init__(self, value: str = "", **data: Any) -> None:
        super().__init__(value=value, **data)


class Autowired(Annotation):
    """Requests a dependency bean, by type or narrowed by name.

    Attributes:
        required: ``None`` uses the site default (required for constructor and
            factory parameters, optional for fields and setters).
        name: Explicit bean name, empty to resolve by type only.
    """

    required: Optional[bool] = Field(default=None, description="Whether a missing bean is fatal.")
    name: str = Field(default="", description="Explicit bean name.")


class Value(Annotation):
    """Requests a configuration value by key or ``${key:default}`` expression."""

    value: str = Field(..., description="Property key or placeholder expression.")

    def __init__(self, value: str, **data: Any) -> None:
        super().__init__(value=value, **data)


class Order(Annotation):
    """Creation and lookup order, lower first."""

    value: int

    def __init__(self, value: int, **data: Any) -> None:
        super().__init__(value=value, **data)


class Primary(Annotation):
    """Wins type lookups that match several beans."""


class Import(Annotation):
    """Extra classes registered alongside the scanned ones."""

    value: Tuple[type, ...] = Field(default=())


class ComponentScan(Annotation):
    """Package roots to scan, defaults to the package of the entry class."""

    value: Tuple[str, ...] = Field(default=())


class Around(Annotation):
    """Wraps the bean in a proxy driven by the named interception handler bean."""

    value: str

    def __init__(self, value: str, **data: Any) -> None:
        super().__init__(value=value, **data)


class PostConstruct(Annotation):
    """Marks the no-argument init callback of a component."""


class PreDestroy(Annotation):
    """Marks the no-argument destroy callback of a component."""


def _holder(target: Any) -> Any:
    if isinstance(target, (staticmethod, classmethod)):
        return target.__func__
    return target


def _describe(target: Any) -> str:
    holder = _holder(target)
    kind = "class" if isinstance(holder, type) else "method"
    return f"{kind} {getattr(holder, '__qualname__', repr(holder))}"


def get_annotations(target: Any) -> Tuple[Annotation, ...]:
    """Return the markers declared directly on a class or function."""
    holder = _holder(target)
    if isinstance(holder, type):
        return tuple(holder.__dict__.get(ANNOTATIONS_ATTRIBUTE, ()))
    return tuple(getattr(holder, ANNOTATIONS_ATTRIBUTE, ()))


def find_annotation(target: Any, annotation_type: Type[A], inherited: bool = False) -> Optional[A]:
    """Find the single marker of ``annotation_type`` (or a subclass) on ``target``.

    Args:
        target: A class, function, bound method or static/class method.
        annotation_type: The marker type to look for.
        inherited: For classes, also search base classes, nearest first.

    Returns:
        The marker, or None when the target does not carry one.

    Raises:
        BeanDefinitionError: If the same level declares more than one matching marker.
    """
    holder = _holder(target)
    levels = holder.__mro__ if inherited and isinstance(holder, type) else (holder,)
    for level in levels:
        matches = [anno for anno in get_annotations(level) if isinstance(anno, annotation_type)]
        if len(matches) > 1:
            raise BeanDefinitionError(f"Duplicate @{annotation_type.__name__} found on {_describe(level)}.")
        if matches:
            return matches[0]
    return None


def annotate(*annotations: Annotation) -> Callable[[T], T]:
    """Attach markers to a class or function."""

    def decorator(target: T) -> T:
        holder = _holder(target)
        setattr(holder, ANNOTATIONS_ATTRIBUTE, get_annotations(holder) + tuple(annotations))
        return target

    return decorator


def component(value: Union[str, type, None] = None) -> Any:
    """Mark a class as a component, usable bare or with an explicit bean name."""
    if isinstance(value, type):
        return annotate(Component())(value)
    return annotate(Component(value or ""))


def configuration(value: Union[str, type, None] = None) -> Any:
    """Mark a class as a configuration component."""
    if isinstance(value, type):
        return annotate(Configuration())(value)
    return annotate(Configuration(value or ""))


def bean(value: Union[str, Callable, None] = None, *, init_method: str = "", destroy_method: str = "") -> Any:
    """Mark a configuration method as a bean factory."""
    if callable(value):
        return annotate(Bean())(value)
    return annotate(Bean(value or "", init_method=init_method, destroy_method=destroy_method))


def autowired(value: Optional[Callable] = None, *, name: str = "", required: Optional[bool] = None) -> Any:
    """Mark a setter method for dependency injection."""
    if callable(value):
        return annotate(Autowired())(value)
    return annotate(Autowired(name=name, required=required))


def value(expression: str) -> Callable[[T], T]:
    """Mark a setter method for configuration value injection."""
    return annotate(Value(expression))


def order(value: int) -> Callable[[T], T]:
    return annotate(Order(value))


def primary(target: T) -> T:
    return annotate(Primary())(target)


def post_construct(method: T) -> T:
    return annotate(PostConstruct())(method)


def pre_destroy(method: T) -> T:
    return annotate(PreDestroy())(method)


def imports(*classes: type) -> Callable[[T], T]:
    return annotate(Import(value=classes))


def component_scan(*packages: str) -> Callable[[T], T]:
    return annotate(ComponentScan(value=packages))


def around(handler_name: str) -> Callable[[T], T]:
    """Proxy the decorated component through the named InvocationHandler bean."""
    return annotate(Around(handler_name))


def unwrap_hint(hint: Any) -> Tuple[Any, Tuple[Any, ...], FrozenSet[Any]]:
    """Split a type hint into its bare type, Annotated metadata and qualifiers.

    ``ClassVar`` and ``Final`` are reported as qualifiers, in any nesting order
    with ``Annotated``.

    Example:
        >>> unwrap_hint(ClassVar[Annotated[int, Value("${port}")]])
        (<class 'int'>, (Value(value='${port}'),), frozenset({typing.ClassVar}))
    """
    metadata: List[Any] = []
    qualifiers = set()
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            metadata.extend(hint.__metadata__)
            hint = hint.__origin__
        elif origin is ClassVar or origin is Final or hint is ClassVar or hint is Final:
            qualifiers.add(origin or hint)
            args = get_args(hint)
            hint = args[0] if args else Any
        else:
            return hint, tuple(metadata), frozenset(qualifiers)


def strip_optional(hint: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` or ``X | None``, the hint itself otherwise."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def injection_markers(metadata: Tuple[Any, ...]) -> Tuple[Optional[Value], Optional[Autowired]]:
    """Pick the Value and Autowired markers out of Annotated metadata."""
    value_marker = next((item for item in metadata if isinstance(item, Value)), None)
    autowired_marker = next((item for item in metadata if isinstance(item, Autowired)), None)
    return value_marker, autowired_marker
