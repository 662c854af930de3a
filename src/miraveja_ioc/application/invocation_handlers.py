from abc import abstractmethod
from typing import Any, Callable, Dict, Tuple

from miraveja_ioc.domain import InvocationHandler


class BeforeInvocationHandler(InvocationHandler):
    """Runs ``before`` and then forwards the call to the target.

    Example:
        >>> class AuditHandler(BeforeInvocationHandler):
        ...     def before(self, target, method, args, kwargs):
        ...         audit_log.append(method.__name__)
    """

    @abstractmethod
    def before(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> None:
        """Called before every forwarded call."""

    def invoke(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        self.before(target, method, args, kwargs)
        return method(target, *args, **kwargs)


class AfterReturningInvocationHandler(InvocationHandler):
    """Forwards the call to the target and lets ``after_returning`` transform the result."""

    @abstractmethod
    def after_returning(
        self,
        target: Any,
        method: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
        result: Any,
    ) -> Any:
        """Return the value handed back to the caller of the proxy."""

    def invoke(self, target: Any, method: Callable[..., Any], args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
        result = method(target, *args, **kwargs)
        return self.after_returning(target, method, args, kwargs, result)
