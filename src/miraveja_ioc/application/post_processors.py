"""Application layer - Proxy-substituting bean post-processors."""

import logging
from typing import Any, ClassVar, Dict, Generic, Optional, Type, TypeVar, get_args, get_origin

from miraveja_ioc.application.proxy_factory import ProxyFactory
from miraveja_ioc.domain import (
    Annotation,
    ApplicationContextAware,
    Around,
    BeanPostProcessor,
    IConfigurableApplicationContext,
    InvocationHandler,
    ProxyConfigurationError,
    find_annotation,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Annotation)


class AnnotationProxyBeanPostProcessor(BeanPostProcessor, ApplicationContextAware, Generic[M]):
    """Proxies every bean whose class carries the marker ``M``.

    The marker's ``value`` names the interception handler bean. The original
    instance is remembered so that property injection and init callbacks run
    against real state rather than the proxy.

    Subclasses bind the marker type through their generic base::

        class AroundProxyBeanPostProcessor(AnnotationProxyBeanPostProcessor[Around]):
            pass

    Attributes:
        annotation_type: The marker type bound by the subclass.
        _context: The context that created this processor.
        _origin_beans: Original instances keyed by bean name.
    """

    annotation_type: ClassVar[Optional[Type[Annotation]]] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in cls.__dict__.get("__orig_bases__", ()):
            if get_origin(base) is AnnotationProxyBeanPostProcessor:
                (marker_type,) = get_args(base)
                if isinstance(marker_type, type) and issubclass(marker_type, Annotation):
                    cls.annotation_type = marker_type

    def __init__(self) -> None:
        self._context: Optional[IConfigurableApplicationContext] = None
        self._origin_beans: Dict[str, Any] = {}
        self._proxy_factory = ProxyFactory()

    def set_application_context(self, context: IConfigurableApplicationContext) -> None:
        self._context = context

    def before_init(self, bean: Any, bean_name: str) -> Any:
        if self.annotation_type is None:
            raise ProxyConfigurationError(f"{type(self).__qualname__} does not bind a marker type.")

        marker = find_annotation(type(bean), self.annotation_type, inherited=True)
        if marker is None:
            return bean

        handler_name = getattr(marker, "value", None)
        if not isinstance(handler_name, str) or not handler_name:
            raise ProxyConfigurationError(
                f"@{self.annotation_type.__name__} on {type(bean).__qualname__} must name the handler bean in 'value'."
            )

        proxy = self._proxy_factory.create_proxy(bean, self._handler(handler_name, bean_name))
        self._origin_beans[bean_name] = bean
        logger.debug("bean '%s' is proxied through handler '%s'", bean_name, handler_name)
        return proxy

    def on_set_property(self, bean: Any, bean_name: str) -> Any:
        return self._origin_beans.get(bean_name, bean)

    def _handler(self, handler_name: str, bean_name: str) -> InvocationHandler:
        if self._context is None:
            raise ProxyConfigurationError(f"{type(self).__qualname__} is not attached to an application context.")

        definition = self._context.find_named_bean_definition(handler_name)
        if definition is None:
            raise ProxyConfigurationError(
                f"@{self.annotation_type.__name__} proxy handler '{handler_name}' not found for bean '{bean_name}'."
            )

        handler = definition.instance
        if handler is None:
            handler = self._context.create_early_singleton(definition)
        if not isinstance(handler, InvocationHandler):
            raise ProxyConfigurationError(
                f"@{self.annotation_type.__name__} proxy handler '{handler_name}' is not an InvocationHandler: "
                f"{type(handler).__qualname__}."
            )
        return handler


class AroundProxyBeanPostProcessor(AnnotationProxyBeanPostProcessor[Around]):
    """Proxies beans marked with ``@around("handlerBeanName")``."""
