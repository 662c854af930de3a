from typing import List, Optional, Type


class IoCException(Exception):
    """Base exception for IoC container errors."""


class BeanDefinitionError(IoCException):
    """Raised when a bean definition is structurally invalid.

    This occurs when:
    - Two definitions share the same bean name.
    - A component class is abstract, private or declares several constructors.
    - A factory method is abstract, final, private or returns a scalar / None.
    - An injectable member has an invalid shape (static, final field, non-setter).
    """


class BeanCreationError(IoCException):
    """Raised when a bean cannot be instantiated or wired.

    Attributes:
        bean_name: Name of the bean being created, if known.
        bean_class: Declared type of the bean being created, if known.
    """

    def __init__(
        self,
        message: str,
        bean_name: Optional[str] = None,
        bean_class: Optional[Type] = None,
    ) -> None:
        self.bean_name = bean_name
        self.bean_class = bean_class
        super().__init__(message)


class UnsatisfiedDependencyError(BeanCreationError):
    """Raised when a required dependency has no matching bean during property injection."""


class CircularDependencyError(IoCException):
    """Raised when a bean is requested again while it is still being constructed.

    Attributes:
        dependency_chain: Bean names from the first occurrence to the repeated request.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected when create bean '{dependency_chain[-1]}': {' -> '.join(dependency_chain)}"
        super().__init__(message)


class NoSuchBeanDefinitionError(IoCException):
    """Raised when a bean lookup by name or type finds nothing."""


class NoUniqueBeanDefinitionError(IoCException):
    """Raised when a type lookup matches several beans without a single primary one.

    Attributes:
        required_type: The type that was looked up.
        candidates: Names of the matching beans.
    """

    def __init__(self, required_type: Type, candidates: List[str], reason: str) -> None:
        self.required_type = required_type
        self.candidates = candidates
        super().__init__(
            f"Multiple beans of type '{required_type.__name__}' found ({', '.join(candidates)}), {reason}"
        )


class BeanNotOfRequiredTypeError(IoCException):
    """Raised when a bean found by name does not satisfy the requested type."""

    def __init__(self, bean_name: str, required_type: Type, actual_type: Type) -> None:
        self.bean_name = bean_name
        self.required_type = required_type
        self.actual_type = actual_type
        super().__init__(
            f"Bean '{bean_name}' is expected to be of type '{required_type.__name__}' "
            f"but was actually of type '{actual_type.__name__}'"
        )


class ProxyConfigurationError(IoCException):
    """Raised when a proxy cannot be configured.

    This occurs when:
    - The interception handler bean named by a marker does not exist.
    - The handler bean is not an InvocationHandler.
    - The marker does not carry a string handler name.
    """


class PropertyNotFoundError(IoCException):
    """Raised when a required configuration property is missing.

    Attributes:
        key: The property key or expression that could not be resolved.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Property '{key}' not found.")


class PropertyConversionError(IoCException):
    """Raised when a property value cannot be converted to the requested type."""

    def __init__(self, key: str, target_type: Type, reason: str) -> None:
        self.key = key
        self.target_type = target_type
        super().__init__(
            f"Cannot convert property '{key}' to type '{getattr(target_type, '__name__', target_type)}': {reason}"
        )
