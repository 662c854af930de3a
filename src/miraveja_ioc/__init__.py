"""
miraveja-ioc: Annotation-driven IoC container with phased singleton creation and proxies.

Public API exports for the miraveja-ioc package.
"""

# Application exports
from miraveja_ioc.application import (
    AfterReturningInvocationHandler,
    AnnotationConfigApplicationContext,
    AnnotationProxyBeanPostProcessor,
    AroundProxyBeanPostProcessor,
    BeforeInvocationHandler,
    PropertyResolver,
    ProxyFactory,
    ResourceResolver,
)

# Domain exports
from miraveja_ioc.domain import (
    Annotation,
    ApplicationContextAware,
    Around,
    Autowired,
    Bean,
    BeanCreationError,
    BeanDefinition,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    BeanPostProcessor,
    CircularDependencyError,
    Component,
    ComponentScan,
    Configuration,
    IApplicationContext,
    Import,
    InvocationHandler,
    IoCException,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    Order,
    PostConstruct,
    PreDestroy,
    Primary,
    PropertyConversionError,
    PropertyNotFoundError,
    ProxyConfigurationError,
    UnsatisfiedDependencyError,
    Value,
    annotate,
    around,
    autowired,
    bean,
    component,
    component_scan,
    configuration,
    find_annotation,
    imports,
    order,
    post_construct,
    pre_destroy,
    primary,
    value,
)

__version__ = "0.1.0"

__all__ = [
    # Context
    "AnnotationConfigApplicationContext",
    "IApplicationContext",
    "BeanDefinition",
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
    # Decorators
    "annotate",
    "around",
    "autowired",
    "bean",
    "component",
    "component_scan",
    "configuration",
    "find_annotation",
    "imports",
    "order",
    "post_construct",
    "pre_destroy",
    "primary",
    "value",
    # Extension points
    "ApplicationContextAware",
    "BeanPostProcessor",
    "InvocationHandler",
    "BeforeInvocationHandler",
    "AfterReturningInvocationHandler",
    "AnnotationProxyBeanPostProcessor",
    "AroundProxyBeanPostProcessor",
    "ProxyFactory",
    # Configuration and scanning
    "PropertyResolver",
    "ResourceResolver",
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
]
