from enum import Enum


class Scope(str, Enum):
    """Defines how many instances an entity definition produces.

    Attributes:
        SINGLETON: One shared instance, cached for the container's life.
        PROTOTYPE: A new instance on every resolution, owned by the caller.
    """

    SINGLETON = "singleton"
    PROTOTYPE = "prototype"

    def __str__(self) -> str:
        return self.value


class InstanceState(str, Enum):
    """Lifecycle state of a singleton instance tracked by the container."""

    NOT_CREATED = "not_created"
    UNDER_CONSTRUCTION = "under_construction"
    EARLY_EXPOSED = "early_exposed"
    READY = "ready"
    DESTROYED = "destroyed"

    def __str__(self) -> str:
        return self.value
