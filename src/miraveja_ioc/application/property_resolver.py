"""Application layer - Typed configuration lookups."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import yaml
from pydantic import TypeAdapter, ValidationError

from miraveja_ioc.domain import IPropertyResolver, PropertyConversionError, PropertyExpr, PropertyNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_property_expr(key: str) -> Optional[PropertyExpr]:
    """Parse ``${key}`` or ``${key:default}``, None for a plain key.

    The first colon separates the key from the default, so the default may
    itself be a nested expression: ``${a:${b:literal}}``.
    """
    if not (key.startswith("${") and key.endswith("}")):
        return None
    body = key[2:-1]
    name, separator, default_value = body.partition(":")
    return PropertyExpr(key=name, default_value=default_value if separator else None)


def flatten_properties(document: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten a nested mapping into dotted keys with string values.

    Example:
        >>> flatten_properties({"app": {"debug": True, "port": 8080, "name": None}})
        {'app.debug': 'true', 'app.port': '8080'}
    """
    flattened: Dict[str, str] = {}
    for key, item in document.items():
        full_key = f"{prefix}{key}"
        if isinstance(item, Mapping):
            flattened.update(flatten_properties(item, f"{full_key}."))
        elif isinstance(item, bool):
            flattened[full_key] = "true" if item else "false"
        elif item is not None:
            flattened[full_key] = str(item)
    return flattened


class PropertyResolver(IPropertyResolver):
    """Resolves configuration values from environment variables and explicit properties.

    Values are stored as strings and converted on lookup through pydantic's
    lax validation, which accepts ``"8080"`` for ``int``, ``"true"`` / ``"no"``
    for ``bool``, ISO strings for dates and durations, and so on.

    Attributes:
        _properties: Raw string values; explicit properties override environment variables.
        _adapters: Cached TypeAdapter per target type.
    """

    def __init__(self, properties: Optional[Mapping[str, Any]] = None, include_environment: bool = True) -> None:
        """Initialize the resolver.

        Args:
            properties: Explicit key/value pairs, values are stored as strings.
            include_environment: Whether environment variables are visible as properties.
        """
        self._properties: Dict[str, str] = dict(os.environ) if include_environment else {}
        for key, item in (properties or {}).items():
            self._properties[key] = str(item)
        self._adapters: Dict[Any, TypeAdapter] = {}

        if logger.isEnabledFor(logging.DEBUG):
            for key in sorted(properties or {}):
                logger.debug("PropertyResolver: %s = %s", key, self._properties[key])

    @classmethod
    def from_yaml(cls, path: Union[str, Path], include_environment: bool = True) -> "PropertyResolver":
        """Load properties from a YAML document, nested keys joined by dots.

        Example:
            >>> # application.yml: {app: {datasource: {url: "sqlite://"}}}
            >>> resolver = PropertyResolver.from_yaml("application.yml")
            >>> resolver.get_property("app.datasource.url")
            'sqlite://'
        """
        with open(path, "r", encoding="utf-8") as stream:
            document = yaml.safe_load(stream) or {}
        if not isinstance(document, Mapping):
            raise ValueError(f"YAML document {path} must contain a mapping at its top level.")
        return cls(flatten_properties(document), include_environment=include_environment)

    def contains_property(self, key: str) -> bool:
        return key in self._properties

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value for a key or ``${...}`` expression.

        ``${key}`` without a default is required even here. A stored value that
        is itself an expression is resolved too.

        Raises:
            PropertyNotFoundError: If a ``${key}`` expression without default cannot be resolved.
        """
        expr = parse_property_expr(key)
        if expr is not None:
            if expr.default_value is not None:
                return self.get_property(expr.key, expr.default_value)
            return self._get_required(expr.key)

        found = self._properties.get(key)
        if found is not None:
            return self._parse_value(found)
        return None if default is None else self._parse_value(default)

    def get_typed_property(self, key: str, target_type: Type[T], default: Optional[T] = None) -> Optional[T]:
        """Return the value converted to ``target_type``, ``default`` when absent.

        Raises:
            PropertyConversionError: If the value cannot be converted.
        """
        found = self.get_property(key)
        if found is None:
            return default
        return self._convert(key, found, target_type)

    def get_required_property(self, key: str, target_type: Type[T] = str) -> T:
        """Return the value converted to ``target_type``.

        Raises:
            PropertyNotFoundError: If the key cannot be resolved.
            PropertyConversionError: If the value cannot be converted.

        Example:
            >>> resolver = PropertyResolver({"server.port": "8080"}, include_environment=False)
            >>> resolver.get_required_property("${server.port:80}", int)
            8080
        """
        found = self.get_typed_property(key, target_type)
        if found is None:
            raise PropertyNotFoundError(key)
        return found

    def _get_required(self, key: str) -> str:
        found = self.get_property(key)
        if found is None:
            raise PropertyNotFoundError(key)
        return found

    def _parse_value(self, raw: str) -> Optional[str]:
        expr = parse_property_expr(raw)
        if expr is None:
            return raw
        if expr.default_value is not None:
            return self.get_property(expr.key, expr.default_value)
        return self._get_required(expr.key)

    def _convert(self, key: str, raw: str, target_type: Any) -> Any:
        if target_type is str:
            return raw
        adapter = self._adapters.get(target_type)
        if adapter is None:
            try:
                adapter = TypeAdapter(target_type)
            except Exception as e:
                raise PropertyConversionError(key, target_type, f"unsupported type ({e})") from e
            self._adapters[target_type] = adapter
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise PropertyConversionError(key, target_type, f"invalid value '{raw}'") from e
