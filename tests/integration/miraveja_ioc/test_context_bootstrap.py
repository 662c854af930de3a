"""Integration tests for context bootstrap across layers."""

import logging
from typing import Annotated, Any, Optional, Protocol, runtime_checkable

import pytest

from miraveja_ioc import (
    ApplicationContextAware,
    Autowired,
    BeanCreationError,
    BeanDefinitionError,
    BeanNotOfRequiredTypeError,
    BeanPostProcessor,
    CircularDependencyError,
    NoSuchBeanDefinitionError,
    NoUniqueBeanDefinitionError,
    PropertyNotFoundError,
    UnsatisfiedDependencyError,
    Value,
    autowired,
    bean,
    component,
    configuration,
    order,
    post_construct,
    pre_destroy,
    primary,
    value,
)
from miraveja_ioc.infrastructure.testing import TestApplicationContext

EVENTS = []


@pytest.fixture(autouse=True)
def clear_events():
    EVENTS.clear()
    yield
    EVENTS.clear()


# Wiring


@component
class Clock:
    def now(self) -> str:
        return "12:00"


@component
class Scheduler:
    def __init__(
        self,
        clock: Annotated[Clock, Autowired()],
        interval: Annotated[int, Value("${scheduler.interval:60}")],
    ) -> None:
        self.clock = clock
        self.interval = interval


@component
class MailSettings:
    host: Annotated[str, Value("${mail.host:localhost}")]
    port: Annotated[int, Value("${mail.port:25}")]
    optional_clock: Annotated[Optional[Clock], Autowired()]

    def __init__(self) -> None:
        self.sender = None
        self.clock = None

    @value("${mail.sender}")
    def set_sender(self, sender: str) -> None:
        self.sender = sender

    @autowired
    def set_clock(self, clock: Clock) -> None:
        self.clock = clock


@component("reporter")
class DailyReport:
    clock: Annotated[Clock, Autowired(required=True)]


@component
class Unregistered:
    pass


@component
class NeedsUnregistered:
    def __init__(self, dependency: Annotated[Unregistered, Autowired()]) -> None:
        self.dependency = dependency


@component
class OptionallyNeedsUnregistered:
    dependency: Annotated[Unregistered, Autowired()]

    def __init__(self, fallback: Annotated[Optional[Unregistered], Autowired(required=False)]) -> None:
        self.fallback = fallback


# Type resolution


class Notifier:
    pass


@component
class EmailNotifier(Notifier):
    pass


@component
@order(1)
class SmsNotifier(Notifier):
    pass


@component
@primary
class PushNotifier(Notifier):
    pass


@component
@primary
class PagerNotifier(Notifier):
    pass


class TimeSource(Protocol):
    def now(self) -> str: ...


@runtime_checkable
class CheckedTimeSource(Protocol):
    def now(self) -> str: ...


# Cycles


@component
class ChickenService:
    def __init__(self, egg: "Annotated[EggService, Autowired()]") -> None:
        self.egg = egg


@component
class EggService:
    def __init__(self, chicken: Annotated[ChickenService, Autowired()]) -> None:
        self.chicken = chicken


@component
class Husband:
    wife: "Annotated[Wife, Autowired()]"


@component
class Wife:
    husband: "Annotated[Husband, Autowired()]"


# Configuration


class ZonedClock:
    clock: Annotated[Clock, Autowired()]

    def __init__(self, zone: str) -> None:
        self.zone = zone
        self.running = False

    def start(self) -> None:
        EVENTS.append(f"start {self.zone} with clock {self.clock is not None}")
        self.running = True

    def stop(self) -> None:
        EVENTS.append(f"stop {self.zone}")


@configuration
class ClockConfig:
    def __init__(self, zone: Annotated[str, Value("${clock.zone:UTC}")]) -> None:
        self.zone = zone

    @bean(init_method="start", destroy_method="stop")
    def zoned_clock(self) -> ZonedClock:
        return ZonedClock(self.zone)

    @bean("localClock")
    def local(self, zone: Annotated[str, Value("${clock.local-zone:Europe/Paris}")]) -> ZonedClock:
        return ZonedClock(zone)


class ClockReport:
    def __init__(self, clock: Clock, local: ZonedClock, fallback: Optional[Unregistered]) -> None:
        self.clock = clock
        self.local = local
        self.fallback = fallback


@configuration
class ReportConfig:
    @bean
    def clock_report(
        self,
        clock: Annotated[Clock, Autowired()],
        local: Annotated[ZonedClock, Autowired(name="localClock")],
        fallback: Annotated[Unregistered | None, Autowired(required=False)],
    ) -> ClockReport:
        return ClockReport(clock, local, fallback)


@configuration
class AutowiringConfig:
    def __init__(self, clock: Annotated[Clock, Autowired()]) -> None:
        self.clock = clock


@component
class FailingConstructor:
    def __init__(self) -> None:
        raise ValueError("cannot start")


# Lifecycle


@component
class RecordingPostProcessor(BeanPostProcessor):
    def __init__(self) -> None:
        self.events = []

    def before_init(self, bean: Any, bean_name: str) -> Any:
        self.events.append(("before", bean_name))
        return bean

    def after_init(self, bean: Any, bean_name: str) -> Any:
        self.events.append(("after", bean_name))
        return bean


@component
class LifecycleBean:
    clock: Annotated[Clock, Autowired()]

    def __init__(self) -> None:
        EVENTS.append("construct")

    @post_construct
    def init(self) -> None:
        EVENTS.append(f"init with clock {self.clock.now()}")

    @pre_destroy
    def destroy(self) -> None:
        EVENTS.append("destroy")


@component
class AwareBean(ApplicationContextAware):
    def set_application_context(self, context) -> None:
        self.context = context


@component
@order(1)
class FirstResource:
    @pre_destroy
    def release(self) -> None:
        EVENTS.append("release first")


@component
@order(2)
class SecondResource:
    @pre_destroy
    def release(self) -> None:
        raise RuntimeError("disk gone")


@component
@order(3)
class ThirdResource:
    @pre_destroy
    def release(self) -> None:
        EVENTS.append("release third")


class TestWiring:
    """Test constructor, field and setter injection end to end."""

    def test_beans_are_singletons(self):
        """Test that a bean is created once and shared."""
        context = TestApplicationContext(Clock, Scheduler)

        scheduler = context.get_bean(Scheduler)

        assert scheduler.clock is context.get_bean(Clock)
        assert context.get_bean("scheduler") is scheduler
        assert context.get_bean("scheduler", Scheduler) is scheduler
        assert context.get_beans(Scheduler) == [scheduler]

    def test_constructor_values(self):
        """Test that Value parameters use properties and defaults."""
        assert TestApplicationContext(Clock, Scheduler).get_bean(Scheduler).interval == 60
        assert (
            TestApplicationContext(Clock, Scheduler, properties={"scheduler.interval": "5"})
            .get_bean(Scheduler)
            .interval
            == 5
        )

    def test_field_and_setter_injection(self):
        """Test that fields and setters are injected after construction."""
        context = TestApplicationContext(Clock, MailSettings, properties={"mail.port": "2525", "mail.sender": "ops"})

        settings = context.get_bean(MailSettings)

        assert settings.host == "localhost"
        assert settings.port == 2525
        assert settings.sender == "ops"
        assert settings.clock is context.get_bean(Clock)
        assert settings.optional_clock is settings.clock

    def test_explicit_bean_name(self):
        """Test that @component("name") overrides the default name."""
        context = TestApplicationContext(Clock, DailyReport)

        assert context.contains_bean("reporter")
        assert not context.contains_bean("dailyReport")
        assert context.get_bean("reporter").clock is context.get_bean(Clock)

    def test_missing_constructor_dependency(self):
        """Test that a missing constructor dependency aborts the bootstrap."""
        with pytest.raises(BeanCreationError, match="Missing autowired bean with type 'Unregistered'"):
            TestApplicationContext(NeedsUnregistered)

    def test_optional_dependencies_stay_unset(self):
        """Test that optional constructor and field dependencies tolerate a missing bean."""
        context = TestApplicationContext(OptionallyNeedsUnregistered)

        bean_instance = context.get_bean(OptionallyNeedsUnregistered)

        assert bean_instance.fallback is None
        assert not hasattr(bean_instance, "dependency")

    def test_required_field_dependency(self):
        """Test that Autowired(required=True) on a field aborts the bootstrap."""
        with pytest.raises(UnsatisfiedDependencyError, match="DailyReport.clock"):
            TestApplicationContext(DailyReport)

    def test_missing_value(self):
        """Test that a missing required property aborts the bootstrap."""
        with pytest.raises(PropertyNotFoundError, match="mail.sender"):
            TestApplicationContext(Clock, MailSettings)

    def test_constructor_failure_is_wrapped(self):
        """Test that a failing constructor is reported with the bean name."""
        with pytest.raises(BeanCreationError, match="Exception when create bean 'failingConstructor'") as exc_info:
            TestApplicationContext(FailingConstructor)

        assert isinstance(exc_info.value.__cause__, ValueError)


class TestTypeResolution:
    """Test lookups by type, name and primary flag."""

    def test_ambiguous_type(self):
        """Test that several candidates without primary are ambiguous."""
        context = TestApplicationContext(EmailNotifier, SmsNotifier)

        with pytest.raises(NoUniqueBeanDefinitionError, match="but no @Primary bean is defined."):
            context.get_bean(Notifier)

    def test_get_beans_is_ordered(self):
        """Test that get_beans follows (order, name)."""
        context = TestApplicationContext(EmailNotifier, SmsNotifier, PushNotifier)

        beans = context.get_beans(Notifier)

        assert [type(item) for item in beans] == [SmsNotifier, EmailNotifier, PushNotifier]

    def test_primary_wins(self):
        """Test that the single primary candidate is returned."""
        context = TestApplicationContext(EmailNotifier, SmsNotifier, PushNotifier)

        assert isinstance(context.get_bean(Notifier), PushNotifier)
        assert isinstance(context.get_bean(EmailNotifier), EmailNotifier)

    def test_several_primaries(self):
        """Test that more than one primary candidate is ambiguous."""
        context = TestApplicationContext(EmailNotifier, PushNotifier, PagerNotifier)

        with pytest.raises(NoUniqueBeanDefinitionError, match="but more than one @Primary bean is defined."):
            context.get_bean(Notifier)

    def test_missing_beans(self):
        """Test lookups that find nothing."""
        context = TestApplicationContext(Clock)

        with pytest.raises(NoSuchBeanDefinitionError, match="No bean defined with name 'calendar'."):
            context.get_bean("calendar")
        with pytest.raises(NoSuchBeanDefinitionError, match="No bean defined with name 'calendar' and type 'Clock'."):
            context.get_bean("calendar", Clock)
        with pytest.raises(NoSuchBeanDefinitionError, match="No bean defined with type 'Notifier'."):
            context.get_bean(Notifier)
        assert context.get_beans(Notifier) == []

    def test_name_of_wrong_type(self):
        """Test that a name lookup checks the required type."""
        context = TestApplicationContext(Clock)

        with pytest.raises(BeanNotOfRequiredTypeError, match="Bean 'clock' is expected to be of type 'Notifier'"):
            context.get_bean("clock", Notifier)

    def test_runtime_checkable_protocol_lookup(self):
        """Test that a runtime-checkable protocol finds structurally matching beans."""
        context = TestApplicationContext(Clock)

        assert context.get_bean(CheckedTimeSource) is context.get_bean(Clock)

    def test_plain_protocol_lookup_is_rejected(self):
        """Test that a protocol without runtime checks cannot be used for lookup."""
        context = TestApplicationContext(Clock)

        with pytest.raises(BeanDefinitionError, match="Cannot look up beans by type 'TimeSource'"):
            context.get_bean(TimeSource)
        with pytest.raises(BeanDefinitionError, match="Cannot look up beans by type 'TimeSource'"):
            context.get_bean("clock", TimeSource)


class TestCycles:
    """Test circular dependency handling."""

    def test_constructor_cycle(self):
        """Test that a constructor cycle is reported with its chain."""
        with pytest.raises(CircularDependencyError) as exc_info:
            TestApplicationContext(ChickenService, EggService)

        assert exc_info.value.dependency_chain == ["chickenService", "eggService", "chickenService"]

    def test_field_cycle_is_allowed(self):
        """Test that beans referencing each other through fields are wired."""
        context = TestApplicationContext(Husband, Wife)

        husband = context.get_bean(Husband)
        wife = context.get_bean(Wife)

        assert husband.wife is wife
        assert wife.husband is husband


class TestConfiguration:
    """Test configuration classes and factory methods."""

    def test_factory_beans(self):
        """Test that @bean methods produce named, wired and initialized beans."""
        context = TestApplicationContext(Clock, ClockConfig, properties={"clock.zone": "Asia/Tokyo"})

        zoned = context.get_bean("zoned_clock")
        local = context.get_bean("localClock", ZonedClock)

        assert zoned.zone == "Asia/Tokyo"
        assert zoned.running is True
        assert zoned.clock is context.get_bean(Clock)
        assert local.zone == "Europe/Paris"
        assert context.get_bean("clockConfig").zone == "Asia/Tokyo"
        assert EVENTS == ["start Asia/Tokyo with clock True"]

    def test_factory_destroy_method(self):
        """Test that the destroy method named by @bean runs on close."""
        context = TestApplicationContext(Clock, ClockConfig)

        context.close()

        assert EVENTS == ["start UTC with clock True", "stop UTC"]

    def test_factory_method_autowires_dependencies(self):
        """Test that @bean methods receive dependency beans, created on demand."""
        context = TestApplicationContext(ReportConfig, ClockConfig, Clock)

        report = context.get_bean(ClockReport)

        assert report.clock is context.get_bean(Clock)
        assert report.local is context.get_bean("localClock")
        assert report.fallback is None

    def test_configuration_cannot_autowire(self):
        """Test that configuration constructors only take values."""
        with pytest.raises(BeanCreationError, match="Cannot specify Autowired on a @Configuration bean"):
            TestApplicationContext(Clock, AutowiringConfig)


class TestLifecycle:
    """Test post-processors, callbacks and shutdown."""

    def test_post_processor_hooks_and_init(self):
        """Test the order of construction, post-processing and init."""
        context = TestApplicationContext(Clock, LifecycleBean, RecordingPostProcessor)

        processor = context.get_bean(RecordingPostProcessor)

        assert [event for event in processor.events if event[1] == "lifecycleBean"] == [
            ("before", "lifecycleBean"),
            ("after", "lifecycleBean"),
        ]
        assert EVENTS == ["construct", "init with clock 12:00"]

    def test_application_context_aware(self):
        """Test that aware beans receive the context building them."""
        context = TestApplicationContext(AwareBean)

        assert context.get_bean(AwareBean).context is context

    def test_close_runs_destroy_in_reverse_order(self, caplog):
        """Test that destroy callbacks run in reverse order and failures are logged."""
        context = TestApplicationContext(FirstResource, SecondResource, ThirdResource)

        with caplog.at_level(logging.ERROR, logger="miraveja_ioc"):
            context.close()

        assert EVENTS == ["release third", "release first"]
        assert "Error destroying bean 'secondResource'" in caplog.text
        assert not context.contains_bean("firstResource")

    def test_context_manager_closes(self):
        """Test that leaving the with block closes the context."""
        with TestApplicationContext(Clock, LifecycleBean) as context:
            assert context.contains_bean("lifecycleBean")

        assert EVENTS[-1] == "destroy"
        assert not context.contains_bean("lifecycleBean")
