import importlib
import logging
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, Union

from miraveja_ioc.application.circular_detector import CircularDependencyDetector
from miraveja_ioc.application.definition_builder import BeanDefinitionBuilder, qualified_name
from miraveja_ioc.application.lifecycle_manager import LifecycleManager
from miraveja_ioc.application.property_injector import PropertyInjector
from miraveja_ioc.application.property_resolver import PropertyResolver
from miraveja_ioc.application.resolver import (
    DependencyResolver,
    is_configuration_definition,
    is_post_processor_definition,
)
from miraveja_ioc.application.resource_resolver import ResourceResolver
from miraveja_ioc.domain import (
    ApplicationContextAware,
    BeanCreationError,
    BeanDefinitionError,
    BeanDefinition,
    BeanNotOfRequiredTypeError,
    BeanPostProcessor,
    ComponentScan,
    IConfigurableApplicationContext,
    Import,
    IoCException,
    IPropertyResolver,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    Resource,
    find_annotation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnnotationConfigApplicationContext(IConfigurableApplicationContext):
    """Singleton container built from annotated classes.

    The constructor performs the whole bootstrap: scan, build definitions,
    create configuration beans, then post-processors, then every remaining
    bean in (order, name) sequence, then inject fields and setters, then run
    init callbacks. Once it returns, the registry is read-only.

    Attributes:
        _beans: Registry mapping bean names to definitions.
        _property_resolver: Source of configuration values.
        _resolver: Resolves constructor and factory-method arguments.
        _property_injector: Injects fields and setters.
        _lifecycle_manager: Invokes init and destroy callbacks.
        _circular_detector: Names of the beans under construction.
        _post_processors: Post-processors in registration order.

    Example:
        >>> @configuration
        ... @component_scan("myapp.services")
        ... class AppConfig:
        ...     pass
        >>> with AnnotationConfigApplicationContext(AppConfig) as context:
        ...     service = context.get_bean(UserService)
    """

    def __init__(self, config_class: type, property_resolver: Optional[IPropertyResolver] = None) -> None:
        """Build the whole object graph.

        Args:
            config_class: Entry class carrying ``@component_scan`` / ``@imports``.
            property_resolver: Source of configuration values, environment-backed by default.

        Raises:
            BeanDefinitionError: If a class or member breaks a structural rule.
            BeanCreationError: If a bean cannot be created, injected or initialized.
            CircularDependencyError: If beans depend on each other through constructors.
        """
        self._property_resolver: IPropertyResolver = property_resolver or PropertyResolver()
        self._resolver = DependencyResolver(self._property_resolver)
        self._property_injector = PropertyInjector(self._property_resolver)
        self._lifecycle_manager = LifecycleManager()
        self._circular_detector = CircularDependencyDetector()
        self._post_processors: List[BeanPostProcessor] = []

        self._beans: Dict[str, BeanDefinition] = BeanDefinitionBuilder().build(self.scan_for_class_names(config_class))
        self._refresh()

    @property
    def property_resolver(self) -> IPropertyResolver:
        return self._property_resolver

    def scan_for_class_names(self, config_class: type) -> Set[Union[str, type]]:
        """Collect the classes to register: scanned modules plus ``@imports``.

        Scan roots come from ``@component_scan``, defaulting to the package of
        ``config_class`` (or its module when it is top level).
        """
        scan = find_annotation(config_class, ComponentScan)
        packages = scan.value if scan is not None and scan.value else (self._default_package(config_class),)

        class_names: Set[Union[str, type]] = set()
        for package in packages:
            for module_name in ResourceResolver(package).scan(self._module_name):
                class_names.update(self._classes_of_module(module_name))

        imported = find_annotation(config_class, Import)
        if imported is not None:
            class_names.update(imported.value)
        return class_names

    def _default_package(self, config_class: type) -> str:
        module_name = config_class.__module__
        package, _, _ = module_name.rpartition(".")
        return package or module_name

    def _module_name(self, resource: Resource) -> Optional[str]:
        if not resource.name.endswith(".py"):
            return None
        parts = resource.name[: -len(".py")].split("/")
        if parts[-1] == "__init__":
            parts.pop()
        if not parts or not all(part.isidentifier() for part in parts):
            return None
        return ".".join(parts)

    def _classes_of_module(self, module_name: str) -> List[str]:
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise BeanCreationError(f"Cannot import module '{module_name}': {e}") from e
        return [
            qualified_name(member)
            for name, member in vars(module).items()
            if isinstance(member, type) and member.__module__ == module_name and member.__qualname__ == name
        ]

    def _refresh(self) -> None:
        definitions = sorted(self._beans.values())

        for definition in definitions:
            if is_configuration_definition(definition):
                self.create_early_singleton(definition)

        processors = [
            self.create_early_singleton(definition)
            for definition in definitions
            if is_post_processor_definition(definition)
        ]
        self._post_processors.extend(processors)

        for definition in definitions:
            # constructor injection may have created it already
            if definition.instance is None:
                self.create_early_singleton(definition)

        logger.debug("beans: %s", [definition.name for definition in definitions])
        for definition in definitions:
            self._property_injector.inject(definition, self._restored_instance(definition), self)

        for definition in definitions:
            self._init_bean(definition)

        self._circular_detector.clear()

    def create_early_singleton(self, definition: BeanDefinition) -> Any:
        """Create the bean, without property injection or init callbacks.

        Returns the existing instance when the bean was already created. The raw
        instance goes through ``set_application_context`` (for
        ``ApplicationContextAware`` beans) and then through every post-processor's
        ``before_init`` in registration order.

        Raises:
            CircularDependencyError: If the bean is already being created.
            BeanCreationError: If an argument cannot be resolved or the bean cannot be instantiated.
        """
        if definition.instance is not None:
            return definition.instance

        logger.debug("try create bean '%s' as early singleton: %s", definition.name, definition.describe_creation())
        self._circular_detector.push(definition.name)
        try:
            args, kwargs = self._resolver.resolve_arguments(definition, self)
            definition.set_instance(self._instantiate(definition, args, kwargs))

            if isinstance(definition.instance, ApplicationContextAware):
                definition.instance.set_application_context(self)

            for processor in self._post_processors:
                processed = processor.before_init(definition.instance, definition.name)
                if processed is None:
                    raise BeanCreationError(
                        f"{type(processor).__qualname__}.before_init() returned None for bean '{definition.name}'.",
                        definition.name,
                        definition.bean_class,
                    )
                if processed is not definition.instance:
                    logger.debug("bean '%s' was replaced by post processor %s", definition.name, type(processor).__qualname__)
                    definition.set_instance(processed)
        finally:
            self._circular_detector.pop(definition.name)

        return definition.instance

    def _instantiate(self, definition: BeanDefinition, args: List[Any], kwargs: Dict[str, Any]) -> Any:
        try:
            if definition.factory_method is not None:
                factory_bean = self.create_early_singleton(self._beans[definition.factory_name])
                return definition.factory_method(factory_bean, *args, **kwargs)
            return definition.constructor(*args, **kwargs)
        except Exception as e:
            if isinstance(e, IoCException):
                raise
            raise BeanCreationError(
                f"Exception when create bean '{definition.name}': {definition.describe_creation()}: {e}",
                definition.name,
                definition.bean_class,
            ) from e

    def _restored_instance(self, definition: BeanDefinition) -> Any:
        """Ask post-processors, in reverse order, for the original instance behind a proxy."""
        instance = definition.get_required_instance()
        for processor in reversed(self._post_processors):
            instance = processor.on_set_property(instance, definition.name)
        return instance

    def _init_bean(self, definition: BeanDefinition) -> None:
        self._lifecycle_manager.invoke_init(definition, self._restored_instance(definition))

        for processor in self._post_processors:
            processed = processor.after_init(definition.instance, definition.name)
            if processed is not definition.instance:
                definition.set_instance(processed)

    def find_bean_definitions(self, required_type: Type) -> List[BeanDefinition]:
        return sorted(
            definition for definition in self._beans.values() if self._satisfies(definition, required_type)
        )

    def _satisfies(self, definition: BeanDefinition, required_type: Type) -> bool:
        try:
            return issubclass(definition.bean_class, required_type)
        except TypeError as e:
            raise BeanDefinitionError(
                f"Cannot look up beans by type '{getattr(required_type, '__qualname__', required_type)}': {e}"
            ) from e

    def find_bean_definition(self, required_type: Type) -> Optional[BeanDefinition]:
        """Find the single definition satisfying the type.

        Returns:
            The only candidate, or the single primary one among several;
            None when no definition satisfies the type.

        Raises:
            NoUniqueBeanDefinitionError: If several candidates exist and zero or
                more than one of them is primary.
        """
        candidates = self.find_bean_definitions(required_type)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        primaries = [definition for definition in candidates if definition.primary]
        if len(primaries) == 1:
            return primaries[0]
        names = [definition.name for definition in candidates]
        if not primaries:
            raise NoUniqueBeanDefinitionError(required_type, names, "but no @Primary bean is defined.")
        raise NoUniqueBeanDefinitionError(required_type, names, "but more than one @Primary bean is defined.")

    def find_named_bean_definition(self, name: str, required_type: Optional[Type] = None) -> Optional[BeanDefinition]:
        """Find the definition with this name.

        Raises:
            BeanNotOfRequiredTypeError: If the definition does not satisfy ``required_type``.
        """
        definition = self._beans.get(name)
        if definition is None:
            return None
        if required_type is not None and not self._satisfies(definition, required_type):
            raise BeanNotOfRequiredTypeError(name, required_type, definition.bean_class)
        return definition

    def contains_bean(self, name: str) -> bool:
        return name in self._beans

    def get_bean(self, name_or_type: Union[str, Type[T]], required_type: Optional[Type[T]] = None) -> Any:
        """Return a single bean by name, by name and type, or by type.

        Example:
            >>> context.get_bean("userService")
            >>> context.get_bean("userService", UserService)
            >>> context.get_bean(UserService)
        """
        if isinstance(name_or_type, str):
            definition = self.find_named_bean_definition(name_or_type, required_type)
            if definition is None:
                if required_type is None:
                    raise NoSuchBeanDefinitionError(f"No bean defined with name '{name_or_type}'.")
                raise NoSuchBeanDefinitionError(
                    f"No bean defined with name '{name_or_type}' and type '{required_type.__name__}'."
                )
            return definition.get_required_instance()

        definition = self.find_bean_definition(name_or_type)
        if definition is None:
            raise NoSuchBeanDefinitionError(f"No bean defined with type '{name_or_type.__name__}'.")
        return definition.get_required_instance()

    def get_beans(self, required_type: Type[T]) -> List[T]:
        return [definition.get_required_instance() for definition in self.find_bean_definitions(required_type)]

    def close(self) -> None:
        """Invoke destroy callbacks in reverse (order, name) sequence and empty the registry.

        A failing callback is logged and the remaining callbacks still run.
        """
        logger.debug("closing %s", type(self).__name__)
        for definition in sorted(self._beans.values(), reverse=True):
            if definition.instance is None:
                continue
            try:
                self._lifecycle_manager.invoke_destroy(definition, self._restored_instance(definition))
            except IoCException:
                logger.exception("Error destroying bean '%s'", definition.name)
        self._beans.clear()
        self._post_processors.clear()

    def __enter__(self) -> "AnnotationConfigApplicationContext":
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()
