"""
Application layer - Use cases and orchestration.

This layer builds bean definitions, creates and wires beans, and proxies them.
It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .context import AnnotationConfigApplicationContext
from .definition_builder import BeanDefinitionBuilder, default_bean_name, load_class
from .invocation_handlers import AfterReturningInvocationHandler, BeforeInvocationHandler
from .lifecycle_manager import LifecycleManager
from .post_processors import AnnotationProxyBeanPostProcessor, AroundProxyBeanPostProcessor
from .property_injector import PropertyInjector
from .property_resolver import PropertyResolver, flatten_properties, parse_property_expr
from .proxy_factory import ProxyFactory
from .resolver import DependencyResolver
from .resource_resolver import ResourceResolver

__all__ = [
    "AnnotationConfigApplicationContext",
    "BeanDefinitionBuilder",
    "DependencyResolver",
    "PropertyInjector",
    "LifecycleManager",
    "CircularDependencyDetector",
    "ProxyFactory",
    "BeforeInvocationHandler",
    "AfterReturningInvocationHandler",
    "AnnotationProxyBeanPostProcessor",
    "AroundProxyBeanPostProcessor",
    "PropertyResolver",
    "ResourceResolver",
    "default_bean_name",
    "flatten_properties",
    "load_class",
    "parse_property_expr",
]
