from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union

from miraveja_ioc.domain.models import BeanDefinition

T = TypeVar("T")


class IApplicationContext(ABC):
    """Abstract interface for looking up beans in a fully built context."""

    @abstractmethod
    def contains_bean(self, name: str) -> bool:
        """Return whether a bean with this name is defined."""

    @abstractmethod
    def get_bean(self, name_or_type: Union[str, Type[T]], required_type: Optional[Type[T]] = None) -> Any:
        """Return a single bean by name, by name and type, or by type.

        Args:
            name_or_type: Bean name, or the type to look up.
            required_type: Type the named bean must satisfy.

        Raises:
            NoSuchBeanDefinitionError: If no bean matches.
            NoUniqueBeanDefinitionError: If a type lookup is ambiguous.
            BeanNotOfRequiredTypeError: If the named bean does not satisfy the type.
        """

    @abstractmethod
    def get_beans(self, required_type: Type[T]) -> List[T]:
        """Return every bean satisfying the type, empty if none."""

    @abstractmethod
    def close(self) -> None:
        """Invoke destroy callbacks and release every bean."""


class IConfigurableApplicationContext(IApplicationContext):
    """Context operations used while the object graph is being built."""

    @abstractmethod
    def find_bean_definitions(self, required_type: Type) -> List[BeanDefinition]:
        """Return every definition whose declared type satisfies the type, sorted."""

    @abstractmethod
    def find_bean_definition(self, required_type: Type) -> Optional[BeanDefinition]:
        """Return the unique (or single primary) definition for the type, None if none."""

    @abstractmethod
    def find_named_bean_definition(
        self, name: str, required_type: Optional[Type] = None
    ) -> Optional[BeanDefinition]:
        """Return the definition with this name, None if none."""

    @abstractmethod
    def create_early_singleton(self, definition: BeanDefinition) -> Any:
        """Create the bean without property injection or init callbacks."""


class IPropertyResolver(ABC):
    """Abstract interface for typed configuration lookups."""

    @abstractmethod
    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the raw value for a key or ``${...}`` expression."""

    @abstractmethod
    def get_required_property(self, key: str, target_type: Type[T] = str) -> T:
        """Return the value converted to ``target_type``.

        Raises:
            PropertyNotFoundError: If the key cannot be resolved.
            PropertyConversionError: If the value cannot be converted.
        """


class BeanPostProcessor(ABC):
    """Hooks invoked around the creation of every bean.

    Every hook returns the bean unchanged by default. Returning a different
    object substitutes it for the bean.
    """

    def before_init(self, bean: Any, bean_name: str) -> Any:
        """Called right after raw construction."""
        return bean

    def after_init(self, bean: Any, bean_name: str) -> Any:
        """Called after the init callback."""
        return bean

    def on_set_property(self, bean: Any, bean_name: str) -> Any:
        """Return the instance that injection and init callbacks should target."""
        return bean


class ApplicationContextAware(ABC):
    """Beans that receive the context right after construction."""

    @abstractmethod
    def set_application_context(self, context: IConfigurableApplicationContext) -> None:
        """Receive the context building this bean."""


class InvocationHandler(ABC):
    """Receives every public method call made on a proxy."""

    @abstractmethod
    def invoke(
        self,
        target: Any,
        method: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> Any:
        """Handle a call made on the proxy.

        Args:
            target: The original bean behind the proxy.
            method: The original function, call it as ``method(target, *args, **kwargs)``.
            args: Positional arguments of the call.
            kwargs: Keyword arguments of the call.

        Returns:
            The value returned to the caller of the proxy.
        """
