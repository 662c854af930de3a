"""
Domain layer - Core model of the container.

This layer contains markers, bean definitions, contracts and errors.
It has no dependencies on other layers.
"""

from .annotations import (
    Annotation,
    Around,
    Autowired,
    Bean,
    Component,
    ComponentScan,
    Configuration,
    Import,
    Order,
    PostConstruct,
    PreDestroy,
    Primary,
    Value,
    annotate,
    around,
    autowired,
    bean,
    component,
    component_scan,
    configuration,
    find_annotation,
    get_annotations,
    imports,
    injection_markers,
    order,
    post_construct,
    pre_destroy,
    primary,
    strip_optional,
    unwrap_hint,
    value,
)
from .enums import MemberKind
from .exceptions import (
    BeanCreationError,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    CircularDependencyError,
    IoCException,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    PropertyConversionError,
    PropertyNotFoundError,
    ProxyConfigurationError,
    UnsatisfiedDependencyError,
)
from .interfaces import (
    ApplicationContextAware,
    BeanPostProcessor,
    IApplicationContext,
    IConfigurableApplicationContext,
    InvocationHandler,
    IPropertyResolver,
)
from .models import ORDER_LAST, BeanDefinition, InjectionPoint, PropertyExpr, Resource

__all__ = [
    # Markers
    "Annotation",
    "Around",
    "Autowired",
    "Bean",
    "Component",
    "ComponentScan",
    "Configuration",
    "Import",
    "Order",
    "PostConstruct",
    "PreDestroy",
    "Primary",
    "Value",
    # Decorators and helpers
    "annotate",
    "around",
    "autowired",
    "bean",
    "component",
    "component_scan",
    "configuration",
    "find_annotation",
    "get_annotations",
    "imports",
    "injection_markers",
    "order",
    "post_construct",
    "pre_destroy",
    "primary",
    "strip_optional",
    "unwrap_hint",
    "value",
    # Enums
    "MemberKind",
    # Exceptions
    "IoCException",
    "BeanDefinitionError",
    "BeanCreationError",
    "UnsatisfiedDependencyError",
    "CircularDependencyError",
    "NoSuchBeanDefinitionError",
    "NoUniqueBeanDefinitionError",
    "BeanNotOfRequiredTypeError",
    "ProxyConfigurationError",
    "PropertyNotFoundError",
    "PropertyConversionError",
    # Interfaces
    "IApplicationContext",
    "IConfigurableApplicationContext",
    "IPropertyResolver",
    "BeanPostProcessor",
    "ApplicationContextAware",
    "InvocationHandler",
    # Models
    "ORDER_LAST",
    "BeanDefinition",
    "InjectionPoint",
    "Resource",
    "PropertyExpr",
]
