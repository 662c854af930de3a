"""Unit tests for domain models."""

import sys

import pytest
from pydantic import ValidationError

from miraveja_ioc.domain.annotations import Autowired, Value
from miraveja_ioc.domain.enums import MemberKind
from miraveja_ioc.domain.exceptions import BeanCreationError
from miraveja_ioc.domain.models import ORDER_LAST, BeanDefinition, InjectionPoint, PropertyExpr, Resource


class Repository:
    pass


class SqlRepository(Repository):
    pass


class RepositoryConfig:
    def repository(self) -> Repository:
        return SqlRepository()


class TestBeanDefinition:
    """Test cases for the BeanDefinition model."""

    def test_component_definition_defaults(self):
        """Test a constructor-created definition with default values."""
        definition = BeanDefinition(name="repository", bean_class=Repository, constructor=Repository)

        assert definition.order == ORDER_LAST == sys.maxsize
        assert definition.primary is False
        assert definition.instance is None
        assert definition.injection_points == []
        assert not definition.is_factory_bean

    def test_factory_definition(self):
        """Test a factory-method definition."""
        definition = BeanDefinition(
            name="repository",
            bean_class=Repository,
            factory_name="repositoryConfig",
            factory_method=RepositoryConfig.repository,
        )

        assert definition.is_factory_bean
        assert definition.describe_creation() == "RepositoryConfig.repository()"

    def test_requires_exactly_one_creation_means(self):
        """Test that neither or both creation means are rejected."""
        with pytest.raises(ValidationError, match="exactly one"):
            BeanDefinition(name="repository", bean_class=Repository)

        with pytest.raises(ValidationError, match="exactly one"):
            BeanDefinition(
                name="repository",
                bean_class=Repository,
                constructor=Repository,
                factory_name="repositoryConfig",
                factory_method=RepositoryConfig.repository,
            )

    def test_sorting_by_order_then_name(self):
        """Test that definitions sort by (order, name)."""
        late = BeanDefinition(name="a", bean_class=Repository, constructor=Repository)
        early_b = BeanDefinition(name="b", bean_class=Repository, constructor=Repository, order=1)
        early_a = BeanDefinition(name="c", bean_class=Repository, constructor=Repository, order=1)
        first = BeanDefinition(name="z", bean_class=Repository, constructor=Repository, order=-5)

        assert [d.name for d in sorted([late, early_b, early_a, first])] == ["z", "b", "c", "a"]

    def test_set_instance_accepts_subclass(self):
        """Test that an instance of a subclass satisfies the declared type."""
        definition = BeanDefinition(name="repository", bean_class=Repository, constructor=Repository)
        instance = SqlRepository()

        definition.set_instance(instance)

        assert definition.get_required_instance() is instance

    def test_set_instance_rejects_wrong_type(self):
        """Test that an instance of an unrelated type is rejected."""
        definition = BeanDefinition(name="repository", bean_class=Repository, constructor=Repository)

        with pytest.raises(BeanCreationError, match="not the expected type 'Repository'") as exc_info:
            definition.set_instance("not a repository")

        assert exc_info.value.bean_name == "repository"

    def test_set_instance_rejects_none(self):
        """Test that None is never a valid instance."""
        definition = BeanDefinition(name="repository", bean_class=Repository, constructor=Repository)

        with pytest.raises(BeanCreationError, match="is None"):
            definition.set_instance(None)

    def test_get_required_instance_before_creation(self):
        """Test that reading the instance before creation fails."""
        definition = BeanDefinition(name="repository", bean_class=Repository, constructor=Repository)

        with pytest.raises(BeanCreationError, match="not instantiated during current stage"):
            definition.get_required_instance()


class TestInjectionPoint:
    """Test cases for the InjectionPoint model."""

    def test_injection_point_is_frozen(self):
        """Test that InjectionPoint is immutable."""
        point = InjectionPoint(
            member_name="repository",
            member_kind=MemberKind.FIELD,
            declared_type=Repository,
            declaring_class=RepositoryConfig,
            autowired=Autowired(),
        )

        with pytest.raises(ValidationError):
            point.member_name = "other"

    def test_value_injection_point(self):
        """Test an injection point carrying a Value marker."""
        point = InjectionPoint(
            member_name="set_timeout",
            member_kind=MemberKind.METHOD,
            declared_type=int,
            declaring_class=RepositoryConfig,
            value=Value("${timeout}"),
        )

        assert point.value.value == "${timeout}"
        assert point.autowired is None
        assert str(point.member_kind) == "method"


class TestValueObjects:
    """Test cases for Resource and PropertyExpr."""

    def test_resource(self):
        """Test that Resource keeps location and name."""
        resource = Resource(location="file:/app/pkg/mod.py", name="pkg/mod.py")

        assert resource.location == "file:/app/pkg/mod.py"
        assert resource.name == "pkg/mod.py"

    def test_property_expr_default_is_optional(self):
        """Test that PropertyExpr has no default value unless given."""
        assert PropertyExpr(key="a").default_value is None
        assert PropertyExpr(key="a", default_value="b").default_value == "b"
