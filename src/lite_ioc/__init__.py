"""
lite-ioc: Lightweight named-entity container with lifecycle hooks and method interception.

Public API exports for the lite-ioc package.
"""

# Application exports
from lite_ioc.application.aop import (
    AutoProxyCreator,
    DefaultPointcutAdvisor,
    NameMatchPointcut,
    ProxyFactory,
)
from lite_ioc.application.autowiring import AutowiringProcessor
from lite_ioc.application.container import ApplicationContainer
from lite_ioc.application.type_descriptor import constructor

# Domain exports
from lite_ioc.domain.aop import (
    AfterReturningAdvice,
    MethodBeforeAdvice,
    MethodInterceptor,
    MethodInvocation,
)
from lite_ioc.domain.enums import InstanceState, Scope
from lite_ioc.domain.exceptions import (
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
    TypeMismatch,
)
from lite_ioc.domain.injection import Autowired, Qualifier, Value
from lite_ioc.domain.interfaces import EntityPostProcessor
from lite_ioc.domain.models import ContainerSettings, EntityDefinition, EntityReference, LiteralValue

__version__ = "0.1.0"

__all__ = [
    # Container
    "ApplicationContainer",
    "ContainerSettings",
    "constructor",
    # Definitions
    "EntityDefinition",
    "EntityReference",
    "LiteralValue",
    # Enums
    "Scope",
    "InstanceState",
    # Extension
    "EntityPostProcessor",
    "AutowiringProcessor",
    "Autowired",
    "Qualifier",
    "Value",
    # AOP
    "AutoProxyCreator",
    "DefaultPointcutAdvisor",
    "NameMatchPointcut",
    "ProxyFactory",
    "MethodInterceptor",
    "MethodInvocation",
    "MethodBeforeAdvice",
    "AfterReturningAdvice",
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
]
