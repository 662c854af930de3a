import sys
from typing import Any, Callable, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, model_validator

from miraveja_ioc.domain.annotations import Autowired, Value
from miraveja_ioc.domain.enums import MemberKind
from miraveja_ioc.domain.exceptions import BeanCreationError

ORDER_LAST = sys.maxsize


class InjectionPoint(BaseModel):
    """Value object describing one field or setter injected after construction.

    Attributes:
        member_name: Attribute or method name on the instance.
        member_kind: Whether the member is assigned or called.
        declared_type: Type the injected value must satisfy.
        declaring_class: Class in the hierarchy that declares the member.
        value: Configuration marker, exclusive with ``autowired``.
        autowired: Dependency marker, exclusive with ``value``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    member_name: str = Field(..., description="Attribute or method name.")
    member_kind: MemberKind = Field(..., description="Field or setter method.")
    declared_type: Any = Field(..., description="Type of the injected value.")
    declaring_class: Type = Field(..., description="Class declaring the member.")
    value: Optional[Value] = Field(default=None, description="Configuration value marker.")
    autowired: Optional[Autowired] = Field(default=None, description="Dependency marker.")


class BeanDefinition(BaseModel):
    """Metadata describing how and when to construct one named bean.

    Exactly one creation means is set: ``constructor`` for components, or
    ``factory_name`` with ``factory_method`` for beans produced by a
    configuration class.

    Attributes:
        name: Globally unique bean name.
        bean_class: Declared type used for lookups; the instance always satisfies it.
        constructor: Class to call for component beans.
        factory_name: Name of the configuration bean owning the factory method.
        factory_method: Unbound factory function declared on the configuration class.
        order: Creation and tie-break order, lower first.
        primary: Wins type lookups matching several beans.
        init_method: Direct ``@post_construct`` reference.
        destroy_method: Direct ``@pre_destroy`` reference.
        init_method_name: Init method resolved on the produced instance's runtime class.
        destroy_method_name: Destroy method resolved on the produced instance's runtime class.
        injection_points: Fields and setters injected after every bean exists.
        instance: The externally visible instance (the proxy, if one was substituted).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Unique bean name.")
    bean_class: Type = Field(..., description="Declared bean type.")
    constructor: Optional[Callable[..., Any]] = Field(default=None)
    factory_name: Optional[str] = Field(default=None)
    factory_method: Optional[Callable[..., Any]] = Field(default=None)
    order: int = Field(default=ORDER_LAST)
    primary: bool = Field(default=False)
    init_method: Optional[Callable[..., Any]] = Field(default=None)
    destroy_method: Optional[Callable[..., Any]] = Field(default=None)
    init_method_name: Optional[str] = Field(default=None)
    destroy_method_name: Optional[str] = Field(default=None)
    injection_points: List[InjectionPoint] = Field(default_factory=list)
    instance: Optional[Any] = Field(default=None, description="Created instance, None before creation.")

    @model_validator(mode="after")
    def _check_creation_means(self) -> "BeanDefinition":
        by_constructor = self.constructor is not None
        by_factory = self.factory_name is not None and self.factory_method is not None
        if by_constructor == by_factory:
            raise ValueError(f"Bean '{self.name}' must be created by exactly one of constructor or factory method.")
        return self

    @property
    def is_factory_bean(self) -> bool:
        return self.factory_name is not None

    @property
    def sort_key(self) -> Tuple[int, str]:
        return self.order, self.name

    def __lt__(self, other: "BeanDefinition") -> bool:
        return self.sort_key < other.sort_key

    def set_instance(self, instance: Any) -> None:
        """Store the instance, enforcing that it satisfies the declared type.

        Raises:
            BeanCreationError: If the instance is None or not of the declared type.
        """
        if instance is None:
            raise BeanCreationError(f"Instance of bean '{self.name}' is None.", self.name, self.bean_class)
        if not isinstance(instance, self.bean_class):
            raise BeanCreationError(
                f"Instance '{instance!r}' of bean '{self.name}' is of type '{type(instance).__name__}', "
                f"not the expected type '{self.bean_class.__name__}'.",
                self.name,
                self.bean_class,
            )
        self.instance = instance

    def get_required_instance(self) -> Any:
        """Return the instance.

        Raises:
            BeanCreationError: If the bean has not been created at this stage.
        """
        if self.instance is None:
            raise BeanCreationError(
                f"Instance of bean with name '{self.name}' and type '{self.bean_class.__name__}' "
                "is not instantiated during current stage.",
                self.name,
                self.bean_class,
            )
        return self.instance

    def describe_creation(self) -> str:
        """Human readable creation means, used in log and error messages."""
        if self.factory_method is not None:
            return f"{self.factory_method.__qualname__}()"
        return f"{self.bean_class.__module__}.{self.bean_class.__qualname__}()"


class Resource(BaseModel):
    """A file found under a scanned package root.

    Attributes:
        location: Absolute location, prefixed with ``file:``.
        name: Path relative to the import root, ``/`` separated (``pkg/sub/mod.py``).
    """

    model_config = ConfigDict(frozen=True)

    location: str
    name: str


class PropertyExpr(BaseModel):
    """Parsed ``${key}`` or ``${key:default}`` placeholder."""

    model_config = ConfigDict(frozen=True)

    key: str
    default_value: Optional[str] = None
