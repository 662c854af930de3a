import inspect
from typing import Any, Callable, Dict, List, Optional, Tuple, get_type_hints

from miraveja_ioc.domain import (
    Autowired,
    BeanCreationError,
    BeanDefinition,
    BeanPostProcessor,
    Configuration,
    IConfigurableApplicationContext,
    IPropertyResolver,
    Value,
    find_annotation,
    injection_markers,
    strip_optional,
    unwrap_hint,
)


def is_configuration_definition(definition: BeanDefinition) -> bool:
    return find_annotation(definition.bean_class, Configuration) is not None


def is_post_processor_definition(definition: BeanDefinition) -> bool:
    return issubclass(definition.bean_class, BeanPostProcessor)


class DependencyResolver:
    """Resolves the arguments of constructors and factory methods.

    Every formal parameter carries exactly one marker in its ``Annotated``
    metadata: ``Value`` for a configuration value or ``Autowired`` for a
    dependency bean, looked up by type and optionally narrowed by name.
    """

    def __init__(self, property_resolver: IPropertyResolver) -> None:
        """Initialize the resolver.

        Args:
            property_resolver: Source of configuration values.
        """
        self._property_resolver = property_resolver

    def resolve_arguments(
        self,
        definition: BeanDefinition,
        context: IConfigurableApplicationContext,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        """Resolve every argument needed to create the bean.

        Dependency beans that have no instance yet are created recursively
        through ``context.create_early_singleton``.

        Args:
            definition: The bean about to be created.
            context: The context owning the registry.

        Returns:
            Positional and keyword arguments for the constructor or factory method.

        Raises:
            BeanCreationError: If a parameter has both or neither marker, autowires
                into a configuration or post-processor bean, or misses a required bean.

        Example:
            >>> class UserService:
            ...     def __init__(
            ...         self,
            ...         repository: Annotated[UserRepository, Autowired()],
            ...         page_size: Annotated[int, Value("${users.page-size:20}")],
            ...     ) -> None: ...
            >>> args, kwargs = resolver.resolve_arguments(definition, context)
        """
        function = self._creation_function(definition)
        if function is None:
            return [], {}

        try:
            signature = inspect.signature(function)
            hints = get_type_hints(function, include_extras=True)
        except Exception as e:
            raise BeanCreationError(
                f"Cannot inspect {definition.describe_creation()} when create bean '{definition.name}': {e}",
                definition.name,
                definition.bean_class,
            ) from e

        # configuration classes only take Value parameters, their @bean methods may autowire
        is_configuration = definition.factory_method is None and is_configuration_definition(definition)
        is_post_processor = is_post_processor_definition(definition)

        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        # first parameter is self for both __init__ and factory methods
        for param in list(signature.parameters.values())[1:]:
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            declared_type, metadata, _ = unwrap_hint(hints.get(param.name, Any))
            value_marker, autowired_marker = injection_markers(metadata)

            if is_configuration and autowired_marker is not None:
                raise self._error(definition, "Cannot specify Autowired on a @Configuration bean")
            if is_post_processor and autowired_marker is not None:
                raise self._error(definition, "Cannot specify Autowired on a BeanPostProcessor")
            if value_marker is not None and autowired_marker is not None:
                raise self._error(definition, f"Cannot specify both Autowired and Value on parameter '{param.name}'")
            if value_marker is None and autowired_marker is None:
                raise self._error(definition, f"Must specify Autowired or Value on parameter '{param.name}'")

            if value_marker is not None:
                argument = self._resolve_value(value_marker, declared_type)
            else:
                argument = self._resolve_dependency(definition, param.name, autowired_marker, declared_type, context)

            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[param.name] = argument
            else:
                args.append(argument)

        return args, kwargs

    def _creation_function(self, definition: BeanDefinition) -> Optional[Callable[..., Any]]:
        if definition.factory_method is not None:
            return definition.factory_method
        init = definition.bean_class.__init__
        return None if init is object.__init__ else init

    def _resolve_value(self, marker: Value, declared_type: Any) -> Any:
        target_type = declared_type if declared_type is not Any else str
        return self._property_resolver.get_required_property(marker.value, target_type)

    def _resolve_dependency(
        self,
        definition: BeanDefinition,
        param_name: str,
        marker: Autowired,
        declared_type: Any,
        context: IConfigurableApplicationContext,
    ) -> Any:
        lookup_type = strip_optional(declared_type)
        if marker.name:
            dependency = context.find_named_bean_definition(marker.name, lookup_type)
        elif isinstance(lookup_type, type):
            dependency = context.find_bean_definition(lookup_type)
        else:
            raise self._error(definition, f"Parameter '{param_name}' lacks a class type hint and a bean name")

        required = marker.required is not False
        if dependency is None:
            if required:
                raise self._error(
                    definition,
                    f"Missing autowired bean with type '{getattr(lookup_type, '__name__', lookup_type)}' "
                    f"for parameter '{param_name}'",
                )
            return None

        if dependency.instance is not None:
            return dependency.instance
        return context.create_early_singleton(dependency)

    def _error(self, definition: BeanDefinition, reason: str) -> BeanCreationError:
        return BeanCreationError(
            f"{reason} when create bean '{definition.name}': {definition.bean_class.__qualname__}.",
            definition.name,
            definition.bean_class,
        )
