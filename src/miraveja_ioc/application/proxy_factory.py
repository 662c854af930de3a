import functools
import inspect
import logging
import types
from typing import Any, Callable, ClassVar, Dict, TypeVar

from miraveja_ioc.domain import InvocationHandler, ProxyConfigurationError, unwrap_hint

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProxyFactory:
    """Generates interception proxies.

    Each call creates a new subclass of the target's runtime class whose
    public methods dispatch to ``handler.invoke(target, method, args, kwargs)``.
    The proxy is a fresh instance: ``__init__`` is not run and annotated
    instance fields read as ``None``, so callers must rely on public methods
    only. Methods decorated with ``typing.final`` are not intercepted.

    Example:
        >>> proxy = ProxyFactory().create_proxy(origin, handler)
        >>> isinstance(proxy, type(origin))
        True
        >>> type(proxy) is type(origin)
        False
    """

    def create_proxy(self, target: T, handler: InvocationHandler) -> T:
        """Wrap ``target`` behind ``handler``.

        Args:
            target: The original bean.
            handler: Receives every public method call made on the proxy.

        Returns:
            The proxy instance, an instance of a subclass of ``type(target)``.

        Raises:
            ProxyConfigurationError: If the handler is not an InvocationHandler
                or the target class cannot be subclassed or allocated.
        """
        if not isinstance(handler, InvocationHandler):
            raise ProxyConfigurationError(
                f"Cannot proxy {type(target).__qualname__}: handler {handler!r} is not an InvocationHandler."
            )

        target_class = type(target)
        namespace: Dict[str, Any] = {"__module__": target_class.__module__}
        for name, method in self._interceptable_methods(target_class).items():
            namespace[name] = self._interceptor(target, handler, method)

        try:
            proxy_class = types.new_class(
                f"{target_class.__name__}Proxy", (target_class,), exec_body=lambda ns: ns.update(namespace)
            )
            proxy = object.__new__(proxy_class)
        except TypeError as e:
            raise ProxyConfigurationError(f"Cannot create proxy of class {target_class.__qualname__}: {e}") from e

        self._reset_fields(proxy, proxy_class)
        logger.debug("created proxy %s for %s", proxy_class.__qualname__, target_class.__qualname__)
        return proxy

    def _interceptable_methods(self, target_class: type) -> Dict[str, Callable[..., Any]]:
        methods: Dict[str, Callable[..., Any]] = {}
        seen = set()
        for klass in target_class.__mro__:
            if klass is object:
                continue
            for name, attr in klass.__dict__.items():
                if name in seen:
                    continue
                seen.add(name)
                if name.startswith("_") or not inspect.isfunction(attr) or getattr(attr, "__final__", False):
                    continue
                methods[name] = attr
        return methods

    def _interceptor(self, target: Any, handler: InvocationHandler, method: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(method)
        def intercept(proxy: Any, *args: Any, **kwargs: Any) -> Any:
            return handler.invoke(target, method, args, kwargs)

        return intercept

    def _reset_fields(self, proxy: Any, proxy_class: type) -> None:
        for klass in reversed(proxy_class.__mro__):
            for name, hint in inspect.get_annotations(klass).items():
                if name.startswith("__") or self._is_class_variable(hint):
                    continue
                # class-level defaults are shadowed, methods and descriptors are left alone
                attribute = inspect.getattr_static(proxy_class, name, None)
                if inspect.isfunction(attribute) or hasattr(type(attribute), "__get__"):
                    continue
                object.__setattr__(proxy, name, None)

    def _is_class_variable(self, hint: Any) -> bool:
        if isinstance(hint, str):
            return hint.startswith(("ClassVar", "typing.ClassVar"))
        return ClassVar in unwrap_hint(hint)[2]
