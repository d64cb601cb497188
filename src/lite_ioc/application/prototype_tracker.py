"""Application layer - Prototype cycle detection."""

import threading
from contextlib import contextmanager
from typing import Iterator, List

from lite_ioc.domain import CircularPrototypeDependency


class PrototypeCreationTracker:
    """Remembers which prototypes the calling thread is building.

    Prototypes are never cached, so a prototype that needs itself again,
    directly or through other prototypes, can never finish. Each thread keeps
    its own chain so concurrent resolutions of the same prototype are legal.

    Example:
        >>> tracker = PrototypeCreationTracker()
        >>> with tracker.creating("a"):
        ...     tracker.push("b")
        ['a', 'b']
        >>> tracker.is_in_creation("b")
        False
    """

    def __init__(self) -> None:
        self._local = threading.local()

    @property
    def _in_progress(self) -> List[str]:
        names = getattr(self._local, "names", None)
        if names is None:
            names = self._local.names = []
        return names

    @contextmanager
    def creating(self, entity_name: str) -> Iterator[List[str]]:
        """Mark ``entity_name`` as being built for the duration of the block.

        Yields:
            The chain of prototypes under construction, ending with ``entity_name``.

        Raises:
            CircularPrototypeDependency: If ``entity_name`` is already being built on this thread.
        """
        chain = self.push(entity_name)
        try:
            yield chain
        finally:
            self.pop(entity_name)

    def push(self, entity_name: str) -> List[str]:
        """Enter ``entity_name`` and return a copy of the resulting chain."""
        in_progress = self._in_progress
        if entity_name in in_progress:
            raise CircularPrototypeDependency(in_progress[in_progress.index(entity_name):] + [entity_name])
        in_progress.append(entity_name)
        return list(in_progress)

    def pop(self, entity_name: str) -> None:
        """Leave ``entity_name``; names entered after it are dropped too."""
        in_progress = self._in_progress
        if entity_name in in_progress:
            del in_progress[in_progress.index(entity_name):]

    def is_in_creation(self, entity_name: str) -> bool:
        return entity_name in self._in_progress

    def clear(self) -> None:
        self._in_progress.clear()
