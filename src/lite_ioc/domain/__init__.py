"""
Domain layer - Core models and contracts.

This layer contains the definitions, lifecycle states, capabilities and AOP
contracts the container works with. It has no dependencies on other layers.
"""

from .aop import (
    Advice,
    Advisor,
    AfterReturningAdvice,
    MethodBeforeAdvice,
    MethodDescriptor,
    MethodInterceptor,
    MethodInvocation,
    Pointcut,
    PointcutAdvisor,
    ProxyConfig,
)
from .capabilities import (
    ContainerAware,
    DisposableEntity,
    InitializingEntity,
    NameAware,
    supports_container_awareness,
    supports_disposal,
    supports_initialization,
    supports_name_awareness,
)
from .enums import InstanceState, Scope
from .exceptions import (
    AmbiguousType,
    CircularConstructorDependency,
    CircularPrototypeDependency,
    ConstructionFailure,
    ContainerException,
    DefinitionNotFound,
    DuplicateDefinition,
    LifecycleHookFailure,
    PropertyNotWritable,
    ProxyUnsupported,
    TypeConversionError,
    TypeMismatch,
)
from .injection import Autowired, Qualifier, Value
from .interfaces import EntityPostProcessor, IContainer, IDefinitionRegistry
from .models import (
    ConstructorDescriptor,
    ContainerSettings,
    EntityDefinition,
    EntityReference,
    InstanceRecord,
    LiteralValue,
    PropertyBinding,
    PropertyDescriptor,
)

__all__ = [
    # Enums
    "Scope",
    "InstanceState",
    # Exceptions
    "ContainerException",
    "DefinitionNotFound",
    "DuplicateDefinition",
    "CircularConstructorDependency",
    "CircularPrototypeDependency",
    "ConstructionFailure",
    "PropertyNotWritable",
    "LifecycleHookFailure",
    "TypeMismatch",
    "AmbiguousType",
    "ProxyUnsupported",
    "TypeConversionError",
    # Interfaces
    "IContainer",
    "IDefinitionRegistry",
    "EntityPostProcessor",
    # Models
    "EntityDefinition",
    "EntityReference",
    "LiteralValue",
    "PropertyBinding",
    "InstanceRecord",
    "ContainerSettings",
    "ConstructorDescriptor",
    "PropertyDescriptor",
    # Capabilities
    "NameAware",
    "ContainerAware",
    "InitializingEntity",
    "DisposableEntity",
    "supports_name_awareness",
    "supports_container_awareness",
    "supports_initialization",
    "supports_disposal",
    # Injection markers
    "Autowired",
    "Qualifier",
    "Value",
    # AOP
    "Advice",
    "Advisor",
    "PointcutAdvisor",
    "Pointcut",
    "MethodDescriptor",
    "MethodInvocation",
    "MethodInterceptor",
    "MethodBeforeAdvice",
    "AfterReturningAdvice",
    "ProxyConfig",
]
