import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from lite_ioc.application.prototype_tracker import PrototypeCreationTracker
from lite_ioc.application.construction import ConstructionPipeline
from lite_ioc.application.extension_pipeline import ExtensionPipeline
from lite_ioc.application.instance_cache import InstanceCacheManager
from lite_ioc.application.registry import DefinitionRegistry
from lite_ioc.application.type_converter import TypeConverter
from lite_ioc.application.type_descriptor import TypeDescriptorService
from lite_ioc.domain import (
    AmbiguousType,
    ContainerException,
    ContainerSettings,
    DefinitionNotFound,
    EntityDefinition,
    EntityPostProcessor,
    IContainer,
    InstanceState,
    Scope,
    TypeMismatch,
    supports_container_awareness,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ApplicationContainer(IContainer):
    """Main entity container.

    Orchestrates registration, resolution and teardown of named entities.
    Singletons are cached in a three-tier cache so that property-injected
    cycles resolve through early exposure; prototypes are built on every
    resolution and owned by the caller.

    Attributes:
        _settings: Behavior switches.
        _registry: Entity definitions by name.
        _cache: Singleton cache and teardown registry.
        _extensions: Post-processor chain.
        _descriptors: Type introspection service.
        _prototype_tracker: Thread-local cycle detection for prototypes.
        _pipeline: Builds entities from definitions.
    """

    def __init__(self, settings: Optional[ContainerSettings] = None) -> None:
        """Initialize the container with an empty registry.

        Args:
            settings: Optional behavior switches. Defaults reject duplicate names
                and allow singleton property cycles.
        """
        self._settings = settings or ContainerSettings()
        self._registry = DefinitionRegistry(allow_overriding=self._settings.allow_definition_overriding)
        self._cache = InstanceCacheManager()
        self._extensions = ExtensionPipeline()
        self._descriptors = TypeDescriptorService()
        self._prototype_tracker = PrototypeCreationTracker()
        self._pipeline = ConstructionPipeline(
            self,
            self._cache,
            self._extensions,
            self._descriptors,
            TypeConverter(),
            self._settings,
        )
        self._teardown_failures: List[ContainerException] = []

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    def register(self, name: str, definition: EntityDefinition) -> None:
        """Register an entity definition.

        Args:
            name: Unique entity name.
            definition: How to build the entity.

        Raises:
            DuplicateDefinition: If the name is taken and overriding is disabled.

        Example:
            >>> container.register("userRepository", EntityDefinition(target_type=UserRepository))
            >>> container.register(
            ...     "userService",
            ...     EntityDefinition(
            ...         target_type="app.services.UserService",
            ...         property_bindings={"repository": EntityReference(entity_name="userRepository")},
            ...     ),
            ... )
        """
        replacing = self._registry.contains(name)
        self._registry.register(name, definition)
        if replacing:
            # A cached instance no longer reflects the new definition
            self._cache.remove_singleton(name)

    def register_singleton(self, name: str, instance: Any) -> None:
        """Register an already built object as a ready singleton.

        The instance skips the construction pipeline entirely: no properties,
        callbacks or post-processors are applied to it.

        Args:
            name: Unique entity name.
            instance: The object to hand out.
        """
        self.register(name, EntityDefinition(target_type=type(instance), scope=Scope.SINGLETON))
        self._cache.register_singleton(name, instance)

    def resolve(self, name: str, expected_type: Optional[Type[T]] = None) -> Any:
        """Resolve and return the entity registered under ``name``.

        Args:
            name: The entity name.
            expected_type: Optional type the instance must be an instance of.

        Returns:
            The instance. Singletons are the same object on every call,
            prototypes a new one.

        Raises:
            DefinitionNotFound: If no definition exists for the name.
            CircularConstructorDependency: If a singleton is needed again before it could be instantiated.
            CircularPrototypeDependency: If a prototype takes part in a cycle.
            ConstructionFailure: If building the entity failed.
            TypeMismatch: If the instance is not of ``expected_type``.

        Example:
            >>> service = container.resolve("userService")
            >>> typed = container.resolve("userService", UserService)
        """
        if not name:
            raise ValueError("Entity name must not be empty")

        instance = self._get_entity(name)

        if expected_type is not None and not isinstance(instance, expected_type):
            raise TypeMismatch(name, expected_type, type(instance))
        return instance

    def resolve_by_type(self, required_type: Type[T]) -> T:
        """Resolve the single entity whose type is assignable to ``required_type``.

        Raises:
            DefinitionNotFound: If no definition matches.
            AmbiguousType: If several definitions match.
        """
        names = self.get_names_for_type(required_type)
        if not names:
            raise DefinitionNotFound(required_type=required_type)
        if len(names) > 1:
            raise AmbiguousType(required_type, names)
        return self.resolve(names[0], required_type)

    def resolve_all_of_type(self, required_type: Type[T]) -> Dict[str, T]:
        """Resolve every entity whose type is assignable to ``required_type``.

        Returns:
            Mapping of entity names to instances, in registration order.
        """
        return {name: self.resolve(name, required_type) for name in self.get_names_for_type(required_type)}

    def get_names_for_type(self, required_type: Type) -> List[str]:
        """Return the names of definitions whose target type is assignable to ``required_type``.

        Definitions whose type path cannot be loaded are skipped.
        """
        names = []
        for name in self._registry.names():
            definition = self._registry.get(name)
            try:
                cls = self._descriptors.load_type(definition.target_type)
            except (ImportError, AttributeError, TypeError):
                logger.debug("Skipping entity '%s': cannot load type %s", name, definition.target_type_name)
                continue
            if issubclass(cls, required_type):
                names.append(name)
        return names

    def list_definition_names(self) -> List[str]:
        return self._registry.names()

    def get_definition(self, name: str) -> EntityDefinition:
        return self._registry.get(name)

    def contains(self, name: str) -> bool:
        return self._registry.contains(name)

    def add_processor(self, processor: EntityPostProcessor) -> None:
        """Append a post-processor to the extension pipeline.

        Container-aware processors receive this container first.
        """
        if supports_container_awareness(processor):
            processor.set_container(self)
        self._extensions.add(processor)

    @property
    def processors(self) -> List[EntityPostProcessor]:
        return self._extensions.processors

    def refresh(self) -> None:
        """Eagerly create every non-lazy singleton, in registration order."""
        for name in self._registry.names():
            definition = self._registry.get(name)
            if definition.is_singleton and not definition.lazy:
                self.resolve(name)

    def get_instance_state(self, name: str) -> InstanceState:
        return self._cache.get_record(name).state

    def get_resolution_count(self, name: str) -> int:
        return self._cache.get_record(name).resolution_count

    def is_currently_in_creation(self, name: str) -> bool:
        return self._cache.is_in_creation(name) or self._prototype_tracker.is_in_creation(name)

    @property
    def teardown_failures(self) -> List[ContainerException]:
        """Failures collected by the last ``close()``."""
        return list(self._teardown_failures)

    def get_registry_copy(self) -> Dict[str, EntityDefinition]:
        """Get a copy of the definitions, in registration order."""
        return self._registry.copy()

    def close(self) -> None:
        """Destroy tracked singletons in reverse order and clear all caches.

        Destroy failures are logged and collected in ``teardown_failures``;
        they never stop the remaining destructions and are never raised.
        """
        failures = self._cache.destroy_singletons(self._destroy_entity)
        self._teardown_failures = failures
        self._prototype_tracker.clear()
        if failures:
            logger.warning("Container closed with %d destroy failure(s)", len(failures))
        else:
            logger.debug("Container closed")

    def __enter__(self) -> "ApplicationContainer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.close()
        return False

    def _destroy_entity(self, name: str, instance: Any) -> None:
        definition = self._registry.get(name) if self._registry.contains(name) else None
        self._pipeline.destroy(name, instance, definition)

    def _get_entity(self, name: str) -> Any:
        shared = self._cache.get_singleton(name, self._settings.allow_circular_references)
        if shared is not None:
            self._cache.mark_resolved(name)
            return shared

        definition = self._registry.get(name)

        if definition.is_singleton:
            instance = self._cache.get_or_create(name, lambda: self._pipeline.create(name, definition))
            self._cache.mark_resolved(name)
            return instance

        with self._prototype_tracker.creating(name):
            return self._pipeline.create(name, definition)
