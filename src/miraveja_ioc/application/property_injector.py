import logging
from typing import Any

from miraveja_ioc.domain import (
    BeanCreationError,
    BeanDefinition,
    IConfigurableApplicationContext,
    InjectionPoint,
    IoCException,
    IPropertyResolver,
    MemberKind,
    UnsatisfiedDependencyError,
)

logger = logging.getLogger(__name__)

_NOTHING = object()


class PropertyInjector:
    """Injects marked fields and setters once every bean has an instance.

    Injection always targets the original instance of a bean, never its
    proxy, since a proxy is a fresh object carrying no state of its own.
    Dependency injection here is optional unless ``Autowired(required=True)``.
    """

    def __init__(self, property_resolver: IPropertyResolver) -> None:
        self._property_resolver = property_resolver

    def inject(self, definition: BeanDefinition, instance: Any, context: IConfigurableApplicationContext) -> None:
        """Inject every injection point of the definition into ``instance``.

        Args:
            definition: The bean whose members are injected.
            instance: The restored original instance.
            context: The context owning the registry.

        Raises:
            UnsatisfiedDependencyError: If a required dependency has no bean.
            BeanCreationError: If a setter raises.
        """
        for point in definition.injection_points:
            resolved = self._resolve(definition, point, context)
            if resolved is _NOTHING:
                continue

            logger.debug(
                "inject %s %s.%s for bean '%s'",
                point.member_kind,
                point.declaring_class.__qualname__,
                point.member_name,
                definition.name,
            )
            if point.member_kind is MemberKind.FIELD:
                object.__setattr__(instance, point.member_name, resolved)
            else:
                self._call_setter(definition, point, instance, resolved)

    def _resolve(self, definition: BeanDefinition, point: InjectionPoint, context: IConfigurableApplicationContext) -> Any:
        if point.value is not None:
            target_type = point.declared_type if isinstance(point.declared_type, type) else str
            return self._property_resolver.get_required_property(point.value.value, target_type)

        marker = point.autowired
        if marker.name:
            lookup_type = point.declared_type if isinstance(point.declared_type, type) else None
            dependency = context.find_named_bean_definition(marker.name, lookup_type)
        else:
            dependency = context.find_bean_definition(point.declared_type)

        if dependency is None:
            if marker.required:
                raise UnsatisfiedDependencyError(
                    f"Dependency bean not found when inject {point.declaring_class.__qualname__}."
                    f"{point.member_name} for bean '{definition.name}': {definition.bean_class.__qualname__}.",
                    definition.name,
                    definition.bean_class,
                )
            return _NOTHING
        return dependency.get_required_instance()

    def _call_setter(self, definition: BeanDefinition, point: InjectionPoint, instance: Any, argument: Any) -> None:
        try:
            getattr(instance, point.member_name)(argument)
        except Exception as e:
            if isinstance(e, IoCException):
                raise
            raise BeanCreationError(
                f"Setter {point.member_name}() failed when inject bean '{definition.name}': {e}",
                definition.name,
                definition.bean_class,
            ) from e
