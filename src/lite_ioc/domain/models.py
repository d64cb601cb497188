from typing import Any, Callable, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lite_ioc.domain.enums import InstanceState, Scope


class LiteralValue(BaseModel):
    """A literal value injected as-is, optionally coerced to a declared type.

    Attributes:
        value: The raw value (usually a string read from configuration).
        type_hint: Optional type the value is coerced to when resolved.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = Field(..., description="The raw literal value.")
    type_hint: Optional[Any] = Field(default=None, description="Type the literal is coerced to, if any.")


class EntityReference(BaseModel):
    """A by-name reference to another entity managed by the same container."""

    model_config = ConfigDict(frozen=True)

    entity_name: str = Field(..., min_length=1, description="Name of the referenced entity.")


InjectableValue = Union[EntityReference, LiteralValue]


def _as_injectable(value: Any) -> InjectableValue:
    if isinstance(value, (EntityReference, LiteralValue)):
        return value
    return LiteralValue(value=value)


class PropertyBinding(BaseModel):
    """Binds a value to a named property of the constructed instance."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Name of the target property.")
    value: InjectableValue = Field(..., description="Literal or reference value to assign.")

    @field_validator("value", mode="before")
    @classmethod
    def _wrap_value(cls, value: Any) -> InjectableValue:
        return _as_injectable(value)


class EntityDefinition(BaseModel):
    """Value object describing how the container builds one named entity.

    Attributes:
        target_type: The class to instantiate, or its dotted import path.
        scope: Singleton (shared) or prototype (new instance per resolution).
        lazy: Whether ``refresh()`` skips eager creation of this singleton.
        init_method_name: Optional name of a method called after properties are set.
        destroy_method_name: Optional name of a method called when the container closes.
        constructor_arguments: Ordered constructor argument values.
        property_bindings: Ordered property assignments applied after construction.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target_type: Union[Type, str] = Field(..., description="Class or dotted import path of the class.")
    scope: Scope = Field(default=Scope.SINGLETON, description="Instance scope of the entity.")
    lazy: bool = Field(default=False, description="Skip eager creation on refresh.")
    init_method_name: Optional[str] = Field(default=None, description="Custom init hook name.")
    destroy_method_name: Optional[str] = Field(default=None, description="Custom destroy hook name.")
    constructor_arguments: List[InjectableValue] = Field(
        default_factory=list,
        description="Ordered constructor arguments.",
    )
    property_bindings: List[PropertyBinding] = Field(
        default_factory=list,
        description="Property assignments applied after instantiation.",
    )

    @field_validator("constructor_arguments", mode="before")
    @classmethod
    def _wrap_arguments(cls, values: Any) -> List[InjectableValue]:
        return [_as_injectable(value) for value in values]

    @field_validator("property_bindings", mode="before")
    @classmethod
    def _wrap_bindings(cls, values: Any) -> List[Any]:
        if isinstance(values, dict):
            return [PropertyBinding(name=name, value=value) for name, value in values.items()]
        return list(values)

    @field_validator("init_method_name", "destroy_method_name")
    @classmethod
    def _blank_as_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def is_singleton(self) -> bool:
        return self.scope == Scope.SINGLETON

    @property
    def is_prototype(self) -> bool:
        return self.scope == Scope.PROTOTYPE

    @property
    def has_constructor_references(self) -> bool:
        """Whether any constructor argument is a reference to another entity."""
        return any(isinstance(argument, EntityReference) for argument in self.constructor_arguments)

    @property
    def target_type_name(self) -> str:
        if isinstance(self.target_type, str):
            return self.target_type
        return f"{self.target_type.__module__}.{self.target_type.__qualname__}"


class InstanceRecord(BaseModel):
    """Tracks the lifecycle state of one singleton entity.

    Attributes:
        entity_name: Name of the tracked entity.
        state: Current lifecycle state.
        resolution_count: Number of times the entity has been handed out.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entity_name: str = Field(..., description="Name of the tracked entity.")
    state: InstanceState = Field(default=InstanceState.NOT_CREATED, description="Lifecycle state.")
    resolution_count: int = Field(default=0, description="Number of successful resolutions.")


class ContainerSettings(BaseModel):
    """Behavioral switches of an application container.

    Attributes:
        allow_definition_overriding: Silently replace a definition registered under an existing name.
        allow_circular_references: Expose singletons early so property cycles can be resolved.
    """

    model_config = ConfigDict(frozen=True)

    allow_definition_overriding: bool = Field(
        default=False,
        description="Replace existing definitions instead of raising DuplicateDefinition.",
    )
    allow_circular_references: bool = Field(
        default=True,
        description="Resolve singleton property cycles through early exposure.",
    )


class ConstructorDescriptor(BaseModel):
    """Describes one way of creating instances of a type.

    Attributes:
        name: ``__init__`` or the name of an alternate constructor class method.
        factory: Callable producing the instance from positional arguments.
        parameter_names: Positional parameter names, in order.
        parameter_types: Declared parameter types (``None`` when unannotated).
        required_count: Number of parameters without a default value.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    factory: Callable[..., Any]
    parameter_names: List[str] = Field(default_factory=list)
    parameter_types: List[Any] = Field(default_factory=list)
    required_count: int = 0

    def accepts_arity(self, count: int) -> bool:
        return self.required_count <= count <= len(self.parameter_types)


class PropertyDescriptor(BaseModel):
    """Describes a writable property of a type.

    Attributes:
        name: Property name as used in bindings.
        property_type: Declared type of the property (``None`` when unannotated).
        setter: Callable ``setter(instance, value)`` performing the assignment.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    property_type: Optional[Any] = None
    setter: Callable[[Any, Any], None]
