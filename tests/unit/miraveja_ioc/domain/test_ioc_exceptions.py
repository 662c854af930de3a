"""Unit tests for domain exceptions."""

import pytest

from miraveja_ioc.domain.exceptions import (
    BeanCreationError,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    CircularDependencyError,
    IoCException,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    PropertyConversionError,
    PropertyNotFoundError,
    ProxyConfigurationError,
    UnsatisfiedDependencyError,
)


class Greeter:
    pass


class TestExceptionHierarchy:
    """Test cases for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exception_type",
        [
            BeanDefinitionError,
            BeanCreationError,
            UnsatisfiedDependencyError,
            CircularDependencyError,
            NoSuchBeanDefinitionError,
            NoUniqueBeanDefinitionError,
            BeanNotOfRequiredTypeError,
            ProxyConfigurationError,
            PropertyNotFoundError,
            PropertyConversionError,
        ],
    )
    def test_every_error_is_an_ioc_exception(self, exception_type):
        """Test that every container error derives from IoCException."""
        assert issubclass(exception_type, IoCException)

    def test_unsatisfied_dependency_is_a_creation_error(self):
        """Test that UnsatisfiedDependencyError is a BeanCreationError."""
        assert issubclass(UnsatisfiedDependencyError, BeanCreationError)


class TestExceptionMessages:
    """Test cases for exception attributes and messages."""

    def test_bean_creation_error_attributes(self):
        """Test that BeanCreationError keeps the bean name and class."""
        error = BeanCreationError("boom", "greeter", Greeter)

        assert str(error) == "boom"
        assert error.bean_name == "greeter"
        assert error.bean_class is Greeter

    def test_circular_dependency_message(self):
        """Test the chain rendering of CircularDependencyError."""
        error = CircularDependencyError(["serviceA", "serviceB", "serviceA"])

        assert error.dependency_chain == ["serviceA", "serviceB", "serviceA"]
        assert str(error) == (
            "Circular dependency detected when create bean 'serviceA': serviceA -> serviceB -> serviceA"
        )

    def test_no_unique_bean_message(self):
        """Test that NoUniqueBeanDefinitionError lists the candidates."""
        error = NoUniqueBeanDefinitionError(Greeter, ["a", "b"], "but no @Primary bean is defined.")

        assert error.candidates == ["a", "b"]
        assert "Multiple beans of type 'Greeter' found (a, b)" in str(error)

    def test_bean_not_of_required_type_message(self):
        """Test the message of BeanNotOfRequiredTypeError."""
        error = BeanNotOfRequiredTypeError("greeter", int, Greeter)

        assert str(error) == "Bean 'greeter' is expected to be of type 'int' but was actually of type 'Greeter'"

    def test_property_errors(self):
        """Test the messages of property errors."""
        assert str(PropertyNotFoundError("app.name")) == "Property 'app.name' not found."
        assert str(PropertyConversionError("port", int, "invalid value 'x'")) == (
            "Cannot convert property 'port' to type 'int': invalid value 'x'"
        )
