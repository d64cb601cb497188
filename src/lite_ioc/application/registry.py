"""Application layer - Entity definition registry."""

import logging
from typing import Dict, List

from lite_ioc.domain import DefinitionNotFound, DuplicateDefinition, EntityDefinition, IDefinitionRegistry

logger = logging.getLogger(__name__)


class DefinitionRegistry(IDefinitionRegistry):
    """Stores entity definitions by name, preserving registration order.

    Attributes:
        _definitions: Mapping of entity names to definitions, in registration order.
        _allow_overriding: Replace existing names silently instead of raising.
    """

    def __init__(self, allow_overriding: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            allow_overriding: Whether a second registration under the same name replaces the first.
        """
        self._definitions: Dict[str, EntityDefinition] = {}
        self._allow_overriding = allow_overriding

    def register(self, name: str, definition: EntityDefinition) -> None:
        """Register a definition under a unique name.

        Args:
            name: The entity name.
            definition: How to build the entity.

        Raises:
            ValueError: If the name is empty.
            DuplicateDefinition: If the name is taken and overriding is disabled.
        """
        if not name:
            raise ValueError("Entity name must not be empty")

        if name in self._definitions:
            if not self._allow_overriding:
                raise DuplicateDefinition(name)
            logger.debug("Overriding definition for entity '%s'", name)
            # Keep the original position in the registration order
            self._definitions[name] = definition
            return

        self._definitions[name] = definition
        logger.debug("Registered entity '%s' (%s, %s)", name, definition.target_type_name, definition.scope)

    def get(self, name: str) -> EntityDefinition:
        definition = self._definitions.get(name)
        if definition is None:
            raise DefinitionNotFound(entity_name=name)
        return definition

    def contains(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> List[str]:
        return list(self._definitions)

    def remove(self, name: str) -> None:
        """Drop the definition registered under ``name``, if any."""
        self._definitions.pop(name, None)

    def copy(self) -> Dict[str, EntityDefinition]:
        """Get a shallow copy of the definitions, for inheritance by child containers."""
        return self._definitions.copy()

    def clear(self) -> None:
        self._definitions.clear()

    def __len__(self) -> int:
        return len(self._definitions)
