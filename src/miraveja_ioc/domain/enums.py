from enum import Enum


class MemberKind(str, Enum):
    """Kind of class member targeted by property injection.

    Attributes:
        FIELD: An annotated attribute assigned directly on the instance.
        METHOD: A single-argument setter method invoked with the resolved value.
    """

    FIELD = "field"
    METHOD = "method"

    def __str__(self) -> str:
        return self.value
