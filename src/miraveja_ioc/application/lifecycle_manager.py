import logging
from typing import Any, Callable, Optional

from miraveja_ioc.domain import BeanCreationError, BeanDefinition, IoCException

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Invokes init and destroy callbacks of beans.

    A component carries a direct reference to its ``@post_construct`` /
    ``@pre_destroy`` method. A factory-produced bean only carries a method
    name, resolved against the runtime class of the produced instance.
    """

    def invoke_init(self, definition: BeanDefinition, instance: Any) -> None:
        """Invoke the init callback, if any.

        Raises:
            BeanCreationError: If the callback is missing or fails.
        """
        self._invoke(definition, instance, definition.init_method, definition.init_method_name, "init")

    def invoke_destroy(self, definition: BeanDefinition, instance: Any) -> None:
        """Invoke the destroy callback, if any.

        Raises:
            BeanCreationError: If the callback is missing or fails.
        """
        self._invoke(definition, instance, definition.destroy_method, definition.destroy_method_name, "destroy")

    def _invoke(
        self,
        definition: BeanDefinition,
        instance: Any,
        method: Optional[Callable[..., Any]],
        method_name: Optional[str],
        phase: str,
    ) -> None:
        if method is not None:
            logger.debug("call %s method %s() of bean '%s'", phase, method.__name__, definition.name)
            self._call(definition, phase, lambda: method(instance))
        elif method_name:
            runtime_class = type(instance)
            if not callable(getattr(runtime_class, method_name, None)):
                raise BeanCreationError(
                    f"{phase.capitalize()} method '{method_name}' not found in class "
                    f"{runtime_class.__qualname__} of bean '{definition.name}'.",
                    definition.name,
                    definition.bean_class,
                )
            logger.debug("call %s method %s() of bean '%s'", phase, method_name, definition.name)
            self._call(definition, phase, getattr(instance, method_name))

    def _call(self, definition: BeanDefinition, phase: str, callback: Callable[[], Any]) -> None:
        try:
            callback()
        except Exception as e:
            if isinstance(e, IoCException):
                raise
            raise BeanCreationError(
                f"{phase.capitalize()} method of bean '{definition.name}' failed: {e}",
                definition.name,
                definition.bean_class,
            ) from e
