import copy
from typing import Any, Dict, Optional, Tuple

from lite_ioc.application import ApplicationContainer
from lite_ioc.domain import EntityDefinition


class TestContainer(ApplicationContainer):
    """Container for testing with entity override capabilities.

    Inherits every definition and post-processor from a parent container but
    allows selective override of entities for testing purposes. The parent is
    never modified: its processors are copied before being bound to this
    container, and instances are built afresh here.

    This is useful for:
    - Mocking external services (databases, APIs, etc.)
    - Replacing implementations with test doubles
    - Isolating tests from shared state

    Attributes:
        _parent_container: The parent container to inherit definitions from.
        _overrides: Entities replaced for this test, by name.

    Example:
        >>> # Production container
        >>> container = ApplicationContainer()
        >>> container.register("emailService", EntityDefinition(target_type=SmtpEmailService))
        >>> container.register("userService", EntityDefinition(
        ...     target_type=UserService,
        ...     property_bindings={"email": EntityReference(entity_name="emailService")},
        ... ))
        >>>
        >>> # Test container with mocks
        >>> def test_user_service():
        ...     test_container = TestContainer(container)
        ...     mock_email = MockEmailService()
        ...     test_container.mock_entity("emailService", mock_email)
        ...
        ...     service = test_container.resolve("userService")
        ...     assert service.email is mock_email
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_container: Optional[ApplicationContainer] = None) -> None:
        """Initialize the test container.

        Args:
            parent_container: Optional parent container to inherit definitions from.
                            If None, creates an empty container.
        """
        super().__init__(parent_container.settings if parent_container else None)
        self._parent_container = parent_container
        self._overrides: Dict[str, Any] = {}

        if parent_container:
            self._inherit_definitions()
            for processor in parent_container.processors:
                self.add_processor(copy.copy(processor))

    def mock_entity(self, name: str, mock_instance: Any) -> None:
        """Replace an entity with a ready-made mock instance.

        The mock is handed out for every subsequent resolution of ``name`` and
        injected wherever other definitions reference it.

        Example:
            >>> test_container = TestContainer(container)
            >>> mock_db = MockDatabase()
            >>> test_container.mock_entity("database", mock_db)
            >>> assert test_container.resolve("userRepository").db is mock_db
        """
        self._overrides[name] = mock_instance
        self._forget(name)
        self.register_singleton(name, mock_instance)

    def override_definition(self, name: str, definition: EntityDefinition) -> None:
        """Replace the definition of an entity.

        Example:
            >>> test_container.override_definition(
            ...     "cacheService",
            ...     EntityDefinition(target_type=InMemoryCacheService),  # Instead of Redis
            ... )
        """
        self._overrides[name] = definition
        self._forget(name)
        self.register(name, definition)

    def reset_overrides(self) -> None:
        """Remove all overrides and restore the parent's definitions.

        Cached instances are dropped without running destroy callbacks.
        Useful for cleaning up between test cases.
        """
        self._overrides.clear()
        self._cache.clear_cache()
        self._registry.clear()
        if self._parent_container:
            self._inherit_definitions()

    def _inherit_definitions(self) -> None:
        for name, definition in self._parent_container.get_registry_copy().items():
            self._registry.register(name, definition)

    def _forget(self, name: str) -> None:
        self._registry.remove(name)
        self._cache.remove_singleton(name)

    def __enter__(self) -> "TestContainer":
        """Context manager entry - returns self."""
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        """Context manager exit - destroy instances and clean up overrides."""
        self.close()
        self.reset_overrides()
        return False


def create_mock_container(*entities: Tuple[str, Any]) -> TestContainer:
    """Create a test container with pre-configured mock entities.

    Args:
        *entities: Tuples of (entity_name, mock_instance).

    Returns:
        TestContainer with mocked entities.

    Example:
        >>> test_container = create_mock_container(
        ...     ("database", MockDatabase()),
        ...     ("cache", MockCache()),
        ... )
    """
    container = TestContainer()

    for name, mock_instance in entities:
        container.mock_entity(name, mock_instance)

    return container
