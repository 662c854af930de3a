"""Application layer - Package scanning."""

import importlib.util
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from miraveja_ioc.domain import BeanDefinitionError, Resource

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ResourceResolver:
    """Finds every file under an importable package, sub-packages included.

    Attributes:
        base_package: Dotted name of the package (or module) to scan.
    """

    def __init__(self, base_package: str) -> None:
        self.base_package = base_package

    def scan(self, mapper: Callable[[Resource], Optional[R]]) -> List[R]:
        """Map every file found to a result, dropping ``None`` results.

        Args:
            mapper: Called once per file, in a stable (sorted) order.

        Returns:
            The non-``None`` mapper results.

        Raises:
            BeanDefinitionError: If the package cannot be found.

        Example:
            >>> ResourceResolver("myapp").scan(lambda res: res.name if res.name.endswith(".py") else None)
            ['myapp/__init__.py', 'myapp/services/user_service.py']
        """
        try:
            spec = importlib.util.find_spec(self.base_package)
        except (ImportError, ValueError) as e:
            raise BeanDefinitionError(f"Cannot scan package '{self.base_package}': {e}") from e
        if spec is None:
            raise BeanDefinitionError(f"Cannot scan package '{self.base_package}': not found.")

        depth = self.base_package.count(".") + 1
        collector: List[R] = []
        if spec.submodule_search_locations is not None:
            for location in spec.submodule_search_locations:
                root = Path(location)
                logger.debug("scan path: %s", root)
                self._scan_directory(root, root.parents[depth - 1], mapper, collector)
        elif spec.origin and os.path.isfile(spec.origin):
            file = Path(spec.origin)
            self._collect(file, file.parents[depth - 1], mapper, collector)
        return collector

    def _scan_directory(self, root: Path, base: Path, mapper: Callable[[Resource], Optional[R]], collector: List[R]) -> None:
        for directory, sub_directories, files in os.walk(root):
            sub_directories[:] = sorted(d for d in sub_directories if d != "__pycache__")
            for file_name in sorted(files):
                self._collect(Path(directory, file_name), base, mapper, collector)

    def _collect(self, file: Path, base: Path, mapper: Callable[[Resource], Optional[R]], collector: List[R]) -> None:
        resource = Resource(location=f"file:{file}", name=file.relative_to(base).as_posix())
        logger.debug("found resource: %s", resource)
        result = mapper(resource)
        if result is not None:
            collector.append(result)
