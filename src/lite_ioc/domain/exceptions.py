from typing import List, Optional, Type


class ContainerException(Exception):
    """Base exception for container-related errors."""


class DefinitionNotFound(ContainerException):
    """Raised when no entity definition matches a name or a type.

    Attributes:
        entity_name: The requested name, if the lookup was by name.
        required_type: The requested type, if the lookup was by type.
    """

    def __init__(self, entity_name: Optional[str] = None, required_type: Optional[Type] = None) -> None:
        self.entity_name = entity_name
        self.required_type = required_type
        if required_type is not None:
            message = f"No entity definition found for type: {required_type.__name__}"
        else:
            message = f"No entity definition found for name: '{entity_name}'"
        super().__init__(message)


class DuplicateDefinition(ContainerException):
    """Raised when registering a name that already has a definition.

    Only raised when definition overriding is disabled in the container settings.
    """

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(f"Entity definition already registered for name: '{entity_name}'")


class CircularConstructorDependency(ContainerException):
    """Raised when an entity is requested again while its constructor arguments are still being resolved.

    Such a cycle can never be broken: the instance cannot exist before all of its
    constructor arguments exist.
    """

    def __init__(self, entity_name: str) -> None:
        self.entity_name = entity_name
        super().__init__(
            f"Circular constructor dependency detected for entity '{entity_name}': "
            "it is requested again before it could be instantiated"
        )


class CircularPrototypeDependency(ContainerException):
    """Raised when a prototype-scoped entity takes part in a reference cycle.

    Attributes:
        dependency_chain: Names involved in the cycle, first and last being the same.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        self.entity_name = dependency_chain[-1] if dependency_chain else None
        message = f"Circular prototype dependency detected: {' -> '.join(dependency_chain)}"
        super().__init__(message)


class ConstructionFailure(ContainerException):
    """Raised when an entity cannot be built.

    Wraps instantiation errors, constructor-selection failures and literal
    coercion errors. The original exception is chained as ``__cause__``.

    Attributes:
        entity_name: The entity that failed.
        reason: Description of the failure.
    """

    def __init__(self, entity_name: str, reason: str) -> None:
        self.entity_name = entity_name
        self.reason = reason
        super().__init__(f"Failed to construct entity '{entity_name}'. Reason: {reason}")


class PropertyNotWritable(ContainerException):
    """Raised when a property binding targets an attribute without a mutator."""

    def __init__(self, entity_name: str, property_name: str, target_type: Type) -> None:
        self.entity_name = entity_name
        self.property_name = property_name
        self.target_type = target_type
        super().__init__(
            f"Entity '{entity_name}' has no writable property '{property_name}' on type {target_type.__name__}"
        )


class LifecycleHookFailure(ContainerException):
    """Raised when an init or destroy callback is missing or fails.

    Attributes:
        entity_name: The entity whose hook failed.
        hook_name: Name of the failing hook.
    """

    def __init__(self, entity_name: str, hook_name: str, reason: str) -> None:
        self.entity_name = entity_name
        self.hook_name = hook_name
        self.reason = reason
        super().__init__(f"Lifecycle hook '{hook_name}' failed for entity '{entity_name}': {reason}")


class TypeMismatch(ContainerException):
    """Raised when a resolved instance is not of the expected type."""

    def __init__(self, entity_name: str, expected_type: Type, actual_type: Type) -> None:
        self.entity_name = entity_name
        self.expected_type = expected_type
        self.actual_type = actual_type
        super().__init__(
            f"Entity '{entity_name}' is of type {actual_type.__name__}, expected {expected_type.__name__}"
        )


class AmbiguousType(ContainerException):
    """Raised when a by-type lookup matches more than one definition.

    Attributes:
        required_type: The requested type.
        candidates: Names of all matching definitions.
    """

    def __init__(self, required_type: Type, candidates: List[str]) -> None:
        self.required_type = required_type
        self.candidates = candidates
        super().__init__(
            f"Expected a single entity of type {required_type.__name__} but found "
            f"{len(candidates)}: {', '.join(candidates)}"
        )


class ProxyUnsupported(ContainerException):
    """Raised when a proxy cannot be built for a target.

    This occurs when:
    - The target exposes no capability (abstract base class or protocol).
    - A full-type (subclass) proxy is requested.
    """

    def __init__(self, target_type: Type, reason: str) -> None:
        self.target_type = target_type
        self.reason = reason
        super().__init__(f"Cannot proxy type {target_type.__name__}: {reason}")


class TypeConversionError(ValueError):
    """Raised when a literal value cannot be coerced to the requested type."""

    def __init__(self, value: object, target_type: Type, reason: Optional[str] = None) -> None:
        self.value = value
        self.target_type = target_type
        message = f"Cannot convert {value!r} to {getattr(target_type, '__name__', target_type)}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
