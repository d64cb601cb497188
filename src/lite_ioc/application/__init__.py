"""
Application layer - Use cases and orchestration.

This layer builds, caches, intercepts and destroys entities.
It depends only on the Domain layer.
"""

from .aop import AutoProxyCreator, DefaultPointcutAdvisor, NameMatchPointcut, ProxyFactory
from .autowiring import AutowiringProcessor
from .construction import ConstructionPipeline
from .container import ApplicationContainer
from .extension_pipeline import ExtensionPipeline
from .instance_cache import InstanceCacheManager
from .prototype_tracker import PrototypeCreationTracker
from .registry import DefinitionRegistry
from .type_converter import TypeConverter
from .type_descriptor import TypeDescriptorService, constructor

__all__ = [
    "ApplicationContainer",
    "AutoProxyCreator",
    "AutowiringProcessor",
    "ConstructionPipeline",
    "DefaultPointcutAdvisor",
    "DefinitionRegistry",
    "ExtensionPipeline",
    "InstanceCacheManager",
    "NameMatchPointcut",
    "PrototypeCreationTracker",
    "ProxyFactory",
    "TypeConverter",
    "TypeDescriptorService",
    "constructor",
]
