"""Domain layer - Injection markers for annotated attributes.

Markers are placed in ``typing.Annotated`` class attribute hints and read by
``AutowiringProcessor`` before the entity's init callbacks run::

    class UserService:
        repository: Annotated[UserRepository, Autowired()]
        audit: Annotated[AuditLog, Autowired(required=False), Qualifier("auditLog")]
        max_retries: Annotated[int, Value("3")]
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Autowired(BaseModel):
    """Inject the single entity assignable to the attribute's type.

    Attributes:
        required: Whether a missing candidate fails construction. When false,
            the attribute keeps its class default.
    """

    model_config = ConfigDict(frozen=True)

    required: bool = Field(default=True, description="Whether a missing candidate is an error.")


class Qualifier(BaseModel):
    """Narrow an ``Autowired`` attribute to the entity registered under ``name``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Name of the entity to inject.")

    def __init__(self, name: str, **data: Any) -> None:
        super().__init__(name=name, **data)


class Value(BaseModel):
    """Inject a literal, converted to the attribute's type."""

    model_config = ConfigDict(frozen=True)

    value: Any = Field(..., description="The raw literal, usually a string.")

    def __init__(self, value: Any, **data: Any) -> None:
        super().__init__(value=value, **data)
