from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar

from lite_ioc.domain.models import EntityDefinition

T = TypeVar("T")


class IDefinitionRegistry(ABC):
    """Abstract interface for storing entity definitions by name."""

    @abstractmethod
    def register(self, name: str, definition: EntityDefinition) -> None:
        """Register a definition under a unique name.

        Args:
            name: The entity name.
            definition: How to build the entity.
        """

    @abstractmethod
    def get(self, name: str) -> EntityDefinition:
        """Return the definition registered under ``name``.

        Raises:
            DefinitionNotFound: If the name is unknown.
        """

    @abstractmethod
    def contains(self, name: str) -> bool:
        """Check whether a definition exists for ``name``."""

    @abstractmethod
    def names(self) -> List[str]:
        """Return all registered names in registration order."""


class IContainer(ABC):
    """Abstract interface for entity container operations."""

    @abstractmethod
    def register(self, name: str, definition: EntityDefinition) -> None:
        """Register an entity definition.

        Args:
            name: The entity name.
            definition: How to build the entity.
        """

    @abstractmethod
    def resolve(self, name: str, expected_type: Optional[Type[T]] = None) -> Any:
        """Resolve and return the entity registered under ``name``.

        Args:
            name: The entity name.
            expected_type: Optional type the instance must be an instance of.
        """

    @abstractmethod
    def resolve_by_type(self, required_type: Type[T]) -> T:
        """Resolve the single entity whose type is assignable to ``required_type``."""

    @abstractmethod
    def resolve_all_of_type(self, required_type: Type[T]) -> Dict[str, T]:
        """Resolve every entity whose type is assignable to ``required_type``."""

    @abstractmethod
    def get_names_for_type(self, required_type: Type) -> List[str]:
        """Return the names of definitions whose type is assignable to ``required_type``."""

    @abstractmethod
    def is_currently_in_creation(self, name: str) -> bool:
        """Check whether the entity is being built right now."""

    @abstractmethod
    def list_definition_names(self) -> List[str]:
        """Return all definition names in registration order."""

    @abstractmethod
    def add_processor(self, processor: "EntityPostProcessor") -> None:
        """Append a processor to the extension pipeline."""

    @abstractmethod
    def close(self) -> None:
        """Destroy all tracked singletons and clear caches. Never raises."""


class EntityPostProcessor(ABC):
    """Hook into the initialization phase of every entity.

    Every hook defaults to returning the instance unchanged. A hook may return
    a different object to substitute the instance; returning ``None`` keeps the
    previous value.
    """

    def before_initialization(self, instance: Any, name: str) -> Any:
        """Called after properties are set, before init callbacks run."""
        return instance

    def after_initialization(self, instance: Any, name: str) -> Any:
        """Called after init callbacks ran. Wrapping (e.g. proxying) happens here."""
        return instance

    def get_early_reference(self, instance: Any, name: str) -> Any:
        """Called when a half-built singleton is handed to a peer to break a cycle."""
        return instance
