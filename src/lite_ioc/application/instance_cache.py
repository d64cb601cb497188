"""Application layer - Three-tier singleton cache."""

import logging
import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Set

from lite_ioc.domain import (
    CircularConstructorDependency,
    ContainerException,
    InstanceRecord,
    InstanceState,
    LifecycleHookFailure,
)

logger = logging.getLogger(__name__)


class InstanceCacheManager:
    """Caches singleton instances and resolves cycles between them.

    Three tiers are kept per entity name:

    - ``_ready`` (L1): fully initialized singletons.
    - ``_early`` (L2): instances handed out before they finished initializing.
    - ``_factories`` (L3): deferred suppliers producing the early reference on demand.

    All singleton construction runs under one re-entrant, container-scoped
    lock. The constructing thread re-enters it freely while resolving
    references; any other thread asking for a singleton blocks until the
    construction finished or failed. Entities with different names share the
    same lock, so their constructions are serialized as well.

    When an entity fails after its early reference was handed out, every
    singleton completed since then is evicted as well, so that none of them
    keeps the half-built instance.

    Attributes:
        _ready: L1 cache of ready singletons.
        _early: L2 cache of early-exposed singletons.
        _factories: L3 cache of early-reference suppliers.
        _in_creation: Names whose construction is in progress.
        _records: Lifecycle record per singleton name.
        _disposables: Instances to destroy on close, in registration order.
        _early_dependents: Per entity whose early reference was handed out, the
            singletons completed since then. They may hold that early reference.
    """

    def __init__(self) -> None:
        """Initialize the cache manager with empty tiers."""
        self._ready: Dict[str, Any] = {}
        self._early: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._in_creation: Set[str] = set()
        self._records: Dict[str, InstanceRecord] = {}
        self._disposables: "OrderedDict[str, Any]" = OrderedDict()
        self._early_dependents: Dict[str, List[str]] = {}
        self._lock = threading.RLock()

    def get_singleton(self, name: str, allow_early_reference: bool = True) -> Optional[Any]:
        """Look a singleton up in the cache tiers.

        Args:
            name: The entity name.
            allow_early_reference: Whether an under-construction instance may be returned.

        Returns:
            The ready instance; the early reference if the entity is under
            construction and exposed; otherwise ``None``.
        """
        instance = self._ready.get(name)
        if instance is not None:
            return instance

        with self._lock:
            instance = self._ready.get(name)
            if instance is not None or name not in self._in_creation or not allow_early_reference:
                return instance

            instance = self._early.get(name)
            if instance is None:
                factory = self._factories.pop(name, None)
                if factory is not None:
                    instance = factory()
                    self._early[name] = instance
                    self._early_dependents.setdefault(name, [])
                    logger.debug("Resolved early reference to entity '%s'", name)
            return instance

    def get_or_create(self, name: str, factory: Callable[[], Any]) -> Any:
        """Return the ready singleton for ``name``, building it with ``factory`` if needed.

        Args:
            name: The entity name.
            factory: Runs the construction pipeline and returns the finished instance.

        Returns:
            The singleton instance.

        Raises:
            ContainerException: Whatever the construction raised. No partial state is kept.
        """
        with self._lock:
            instance = self._ready.get(name)
            if instance is not None:
                return instance

            if name in self._in_creation:
                # Requested again by its own construction, with nothing exposed early
                raise CircularConstructorDependency(name)

            self._in_creation.add(name)
            self._record(name).state = InstanceState.UNDER_CONSTRUCTION
            try:
                instance = factory()
            except Exception:
                self._early.pop(name, None)
                self._factories.pop(name, None)
                self._record(name).state = InstanceState.NOT_CREATED
                self._evict_early_dependents(name)
                raise
            finally:
                self._in_creation.discard(name)

            self._add_ready(name, instance)
            return instance

    def add_singleton_factory(self, name: str, supplier: Callable[[], Any]) -> None:
        """Register a supplier for the early reference of an under-construction singleton."""
        with self._lock:
            if name not in self._ready:
                self._factories[name] = supplier
                self._early.pop(name, None)
                self._record(name).state = InstanceState.EARLY_EXPOSED

    def register_singleton(self, name: str, instance: Any) -> None:
        """Store a pre-built instance directly as a ready singleton."""
        with self._lock:
            self._add_ready(name, instance)

    def remove_singleton(self, name: str) -> None:
        with self._lock:
            self._ready.pop(name, None)
            self._early.pop(name, None)
            self._factories.pop(name, None)
            self._disposables.pop(name, None)
            self._records.pop(name, None)
            self._early_dependents.pop(name, None)

    def contains_singleton(self, name: str) -> bool:
        return name in self._ready

    def is_in_creation(self, name: str) -> bool:
        return name in self._in_creation

    def get_record(self, name: str) -> InstanceRecord:
        """Return a snapshot of the lifecycle record of ``name``."""
        with self._lock:
            record = self._records.get(name)
            if record is None:
                return InstanceRecord(entity_name=name)
            return record.model_copy()

    def mark_resolved(self, name: str) -> None:
        with self._lock:
            self._record(name).resolution_count += 1

    def register_disposable(self, name: str, instance: Any) -> None:
        """Track an instance to destroy when the container closes."""
        with self._lock:
            self._disposables[name] = instance

    def destroy_singletons(self, destroyer: Callable[[str, Any], None]) -> List[ContainerException]:
        """Destroy tracked instances in reverse registration order, then clear every tier.

        Failures never stop the remaining destructions.

        Args:
            destroyer: Runs the destroy callbacks of one instance.

        Returns:
            The failures collected along the way.
        """
        failures: List[ContainerException] = []
        with self._lock:
            names = list(reversed(self._disposables))
            for name in names:
                instance = self._disposables[name]
                try:
                    destroyer(name, instance)
                except ContainerException as e:
                    failures.append(e)
                    logger.error("Failed to destroy entity '%s'", name, exc_info=e)
                except Exception as e:
                    failure = LifecycleHookFailure(name, "destroy", str(e))
                    failure.__cause__ = e
                    failures.append(failure)
                    logger.error("Failed to destroy entity '%s'", name, exc_info=e)

            for record in self._records.values():
                if record.state != InstanceState.NOT_CREATED:
                    record.state = InstanceState.DESTROYED
            self._disposables.clear()
            self._ready.clear()
            self._early.clear()
            self._factories.clear()
            self._early_dependents.clear()
        return failures

    def clear_cache(self) -> None:
        """Drop every cached instance without running destroy callbacks."""
        with self._lock:
            self._ready.clear()
            self._early.clear()
            self._factories.clear()
            self._disposables.clear()
            self._records.clear()
            self._early_dependents.clear()

    def _add_ready(self, name: str, instance: Any) -> None:
        self._ready[name] = instance
        self._early.pop(name, None)
        self._factories.pop(name, None)
        self._record(name).state = InstanceState.READY
        self._early_dependents.pop(name, None)
        for dependents in self._early_dependents.values():
            dependents.append(name)

    def _evict_early_dependents(self, name: str) -> None:
        # Completed peers may hold the early reference of the failed entity
        for dependent in self._early_dependents.pop(name, []):
            self._ready.pop(dependent, None)
            self._disposables.pop(dependent, None)
            self._record(dependent).state = InstanceState.NOT_CREATED
            logger.debug("Evicted entity '%s' holding an early reference to failed entity '%s'", dependent, name)

    def _record(self, name: str) -> InstanceRecord:
        record = self._records.get(name)
        if record is None:
            record = InstanceRecord(entity_name=name)
            self._records[name] = record
        return record
