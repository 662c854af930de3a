"""Application layer - Bean definition construction."""

import importlib
import inspect
import logging
from enum import Enum
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Final,
    Iterable,
    List,
    Optional,
    Union,
    get_overloads,
    get_type_hints,
    is_typeddict,
)

from miraveja_ioc.domain import (
    ORDER_LAST,
    Annotation,
    Autowired,
    Bean,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    Component,
    Configuration,
    InjectionPoint,
    MemberKind,
    Order,
    PostConstruct,
    PreDestroy,
    Primary,
    Value,
    find_annotation,
    injection_markers,
    strip_optional,
    unwrap_hint,
)

logger = logging.getLogger(__name__)

_SCALAR_TYPES = (int, float, complex, bool, str, bytes)


def load_class(class_name: str) -> Any:
    """Import ``package.module.ClassName`` and return the class.

    Raises:
        BeanCreationError: If the module or the attribute cannot be loaded.
    """
    module_name, _, attribute = class_name.rpartition(".")
    try:
        return getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError, ValueError) as e:
        raise BeanCreationError(f"Cannot load class '{class_name}': {e}") from e


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def default_bean_name(cls: type) -> str:
    """Default name of a component: ``HelloWorld`` becomes ``helloWorld``."""
    name = cls.__name__
    return name[:1].lower() + name[1:]


class BeanDefinitionBuilder:
    """Turns a set of classes into a registry of bean definitions.

    Components are described by their constructor, configuration classes
    additionally contribute one definition per ``@bean`` method. Structural
    rules, injectable members included, are validated here, before any bean
    is created.
    """

    def build(self, classes: Iterable[Union[str, type]]) -> Dict[str, BeanDefinition]:
        """Build the registry.

        Args:
            classes: Fully-qualified class names or class objects.

        Returns:
            Mapping of bean name to definition.

        Raises:
            BeanDefinitionError: If a class or member breaks a structural rule,
                or two definitions share a name.
            BeanCreationError: If a class name cannot be loaded.
        """
        definitions: Dict[str, BeanDefinition] = {}
        loaded = {load_class(item) if isinstance(item, str) else item for item in classes}
        for cls in sorted((c for c in loaded if isinstance(c, type)), key=qualified_name):
            if self._is_not_instantiable(cls):
                continue

            component = find_annotation(cls, Component)
            if component is None:
                continue
            logger.debug("found component: %s", qualified_name(cls))

            if inspect.isabstract(cls):
                raise BeanDefinitionError(f"@Component class {qualified_name(cls)} must not be abstract.")
            if cls.__name__.startswith("_"):
                raise BeanDefinitionError(f"@Component class {qualified_name(cls)} must not be private.")

            bean_name = component.value or default_bean_name(cls)
            definition = BeanDefinition(
                name=bean_name,
                bean_class=cls,
                constructor=self._suitable_constructor(cls),
                order=self._order_of(cls),
                primary=find_annotation(cls, Primary) is not None,
                init_method=self._find_callback(cls, PostConstruct),
                destroy_method=self._find_callback(cls, PreDestroy),
                injection_points=self.collect_injection_points(cls),
            )
            self._add_definition(definitions, definition)

            if isinstance(component, Configuration):
                self._scan_factory_methods(bean_name, cls, definitions)

        return definitions

    def _is_not_instantiable(self, cls: type) -> bool:
        # markers, enums, protocols and structural records are never beans
        return (
            issubclass(cls, (Annotation, Enum))
            or getattr(cls, "_is_protocol", False)
            or is_typeddict(cls)
            or (issubclass(cls, tuple) and hasattr(cls, "_fields"))
        )

    def _add_definition(self, definitions: Dict[str, BeanDefinition], definition: BeanDefinition) -> None:
        if definition.name in definitions:
            raise BeanDefinitionError(f"Duplicate bean name: {definition.name}")
        definitions[definition.name] = definition
        logger.debug("define bean: %s -> %s", definition.name, definition.describe_creation())

    def _suitable_constructor(self, cls: type) -> type:
        init = cls.__init__
        if init is not object.__init__ and len(get_overloads(init)) > 1:
            raise BeanDefinitionError(f"More than one constructor found in class {qualified_name(cls)}.")
        return cls

    def _order_of(self, target: Any) -> int:
        marker = find_annotation(target, Order)
        return ORDER_LAST if marker is None else marker.value

    def _find_callback(self, cls: type, marker_type: type) -> Optional[Callable[..., Any]]:
        """Find the no-argument method carrying ``marker_type``, declared on ``cls`` itself."""
        found: List[Callable[..., Any]] = []
        for name, attr in cls.__dict__.items():
            if find_annotation(attr, marker_type) is None or isinstance(attr, type):
                continue
            if not inspect.isfunction(attr) or len(inspect.signature(attr).parameters) != 1:
                raise BeanDefinitionError(
                    f"Method '{name}' with @{marker_type.__name__} must be an instance method "
                    f"without argument: {qualified_name(cls)}"
                )
            found.append(attr)
        if len(found) > 1:
            raise BeanDefinitionError(
                f"Multiple methods with @{marker_type.__name__} found in class: {qualified_name(cls)}"
            )
        return found[0] if found else None

    def _scan_factory_methods(
        self, factory_name: str, cls: type, definitions: Dict[str, BeanDefinition]
    ) -> None:
        """Add one definition per ``@bean`` method of a configuration class, inherited ones included."""
        members: Dict[str, Any] = {}
        for klass in cls.__mro__:
            for name, attr in klass.__dict__.items():
                members.setdefault(name, attr)

        for name, attr in members.items():
            marker = find_annotation(attr, Bean)
            if marker is None or isinstance(attr, type):
                continue
            where = f"{qualified_name(cls)}.{name}"
            if isinstance(attr, (staticmethod, classmethod)) or not inspect.isfunction(attr):
                raise BeanDefinitionError(f"@Bean method {where} must be an instance method.")
            if getattr(attr, "__isabstractmethod__", False):
                raise BeanDefinitionError(f"@Bean method {where} must not be abstract.")
            if getattr(attr, "__final__", False):
                raise BeanDefinitionError(f"@Bean method {where} must not be final.")
            if name.startswith("_"):
                raise BeanDefinitionError(f"@Bean method {where} must not be private.")

            hints = self._type_hints(attr)
            if "return" not in hints:
                raise BeanDefinitionError(f"@Bean method {where} must declare its return type.")
            bean_class, _, _ = unwrap_hint(hints["return"])
            if bean_class is None or bean_class is type(None):
                raise BeanDefinitionError(f"@Bean method {where} must not return None.")
            if bean_class in _SCALAR_TYPES:
                raise BeanDefinitionError(f"@Bean method {where} must not return primitive type.")
            if not isinstance(bean_class, type):
                raise BeanDefinitionError(f"@Bean method {where} must return a class, not {bean_class!r}.")

            definition = BeanDefinition(
                name=marker.value or name,
                bean_class=bean_class,
                factory_name=factory_name,
                factory_method=attr,
                order=self._order_of(attr),
                primary=find_annotation(attr, Primary) is not None,
                init_method_name=marker.init_method or None,
                destroy_method_name=marker.destroy_method or None,
                injection_points=self.collect_injection_points(bean_class),
            )
            self._add_definition(definitions, definition)

    def collect_injection_points(self, cls: type) -> List[InjectionPoint]:
        """Collect marked fields and setters of ``cls`` and its base classes.

        Raises:
            BeanDefinitionError: If a marked member has an invalid shape.
        """
        points: List[InjectionPoint] = []
        for klass in cls.__mro__:
            if klass is object or klass.__module__ == "builtins":
                continue
            for field_name, hint in self._own_annotations(klass).items():
                point = self._field_injection_point(klass, field_name, hint)
                if point is not None:
                    points.append(point)
            for member_name, attr in klass.__dict__.items():
                point = self._method_injection_point(klass, member_name, attr)
                if point is not None:
                    points.append(point)
        return points

    def _own_annotations(self, klass: type) -> Dict[str, Any]:
        try:
            return inspect.get_annotations(klass, eval_str=True)
        except Exception as e:
            logger.warning("'%s' error retrieving %s annotations, string annotations are ignored", e, klass.__qualname__)
            return inspect.get_annotations(klass)

    def _type_hints(self, func: Callable[..., Any]) -> Dict[str, Any]:
        try:
            return get_type_hints(func, include_extras=True)
        except Exception as e:
            raise BeanDefinitionError(f"Cannot resolve type hints of {func.__qualname__}: {e}") from e

    def _field_injection_point(self, klass: type, field_name: str, hint: Any) -> Optional[InjectionPoint]:
        declared_type, metadata, qualifiers = unwrap_hint(hint)
        value_marker, autowired_marker = injection_markers(metadata)
        if value_marker is None and autowired_marker is None:
            return None

        where = f"{qualified_name(klass)}.{field_name}"
        if ClassVar in qualifiers:
            raise BeanDefinitionError(f"Cannot inject static field: {where}")
        if Final in qualifiers:
            raise BeanDefinitionError(f"Cannot inject final field: {where}")
        return self._injection_point(klass, field_name, MemberKind.FIELD, declared_type, value_marker, autowired_marker)

    def _method_injection_point(self, klass: type, member_name: str, attr: Any) -> Optional[InjectionPoint]:
        func = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
        if not inspect.isfunction(func):
            return None
        value_marker = find_annotation(func, Value)
        autowired_marker = find_annotation(func, Autowired)
        if value_marker is None and autowired_marker is None:
            return None

        where = f"{qualified_name(klass)}.{member_name}"
        if func is not attr:
            raise BeanDefinitionError(f"Cannot inject static method: {where}")
        if getattr(func, "__final__", False):
            logger.warning(
                "Inject final method %s should be careful because it is not called on target bean when bean is proxied.",
                where,
            )

        parameters = list(inspect.signature(func).parameters.values())[1:]
        if len(parameters) != 1:
            raise BeanDefinitionError(f"Cannot inject a non-setter method {where}: it must take exactly one argument.")
        hint = self._type_hints(func).get(parameters[0].name, str if autowired_marker is None else Any)
        declared_type, _, _ = unwrap_hint(hint)
        return self._injection_point(
            klass, member_name, MemberKind.METHOD, declared_type, value_marker, autowired_marker
        )

    def _injection_point(
        self,
        klass: type,
        member_name: str,
        member_kind: MemberKind,
        declared_type: Any,
        value_marker: Optional[Value],
        autowired_marker: Optional[Autowired],
    ) -> InjectionPoint:
        where = f"{qualified_name(klass)}.{member_name}"
        if value_marker is not None and autowired_marker is not None:
            raise BeanDefinitionError(f"Cannot specify both Autowired and Value when inject {where}.")
        if autowired_marker is not None:
            declared_type = strip_optional(declared_type)
            if not autowired_marker.name and not isinstance(declared_type, type):
                raise BeanDefinitionError(f"Cannot autowire {where}: it lacks a class type hint and a bean name.")
        return InjectionPoint(
            member_name=member_name,
            member_kind=member_kind,
            declared_type=declared_type,
            declaring_class=klass,
            value=value_marker,
            autowired=autowired_marker,
        )
