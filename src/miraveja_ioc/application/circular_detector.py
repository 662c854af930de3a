"""Application layer - Circular dependency detection."""

from typing import List

from miraveja_ioc.domain import CircularDependencyError


class CircularDependencyDetector:
    """Tracks the bean names currently under construction.

    Construction is single-threaded and recursive, so a plain stack is enough:
    a name requested while already on the stack closes a cycle.

    Attributes:
        _stack: Names of the beans being created, outermost first.
    """

    def __init__(self) -> None:
        """Initialize the detector with an empty in-flight stack."""
        self._stack: List[str] = []

    @property
    def in_flight(self) -> List[str]:
        """Copy of the names currently being created."""
        return list(self._stack)

    def push(self, bean_name: str) -> None:
        """Mark a bean as being created.

        Args:
            bean_name: The bean about to be created.

        Raises:
            CircularDependencyError: If the bean is already being created.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("serviceA")
            >>> detector.push("serviceB")
            >>> detector.push("serviceA")  # Raises CircularDependencyError
        """
        if bean_name in self._stack:
            cycle_start_index = self._stack.index(bean_name)
            raise CircularDependencyError(self._stack[cycle_start_index:] + [bean_name])

        self._stack.append(bean_name)

    def pop(self, bean_name: str) -> None:
        """Mark a bean as created."""
        if self._stack and self._stack[-1] == bean_name:
            self._stack.pop()
        elif bean_name in self._stack:
            self._stack.remove(bean_name)

    def clear(self) -> None:
        """Forget every in-flight name, used once bootstrap ends."""
        self._stack.clear()
