"""Application layer - Ordered post-processor chain."""

import logging
from typing import Any, List

from lite_ioc.domain import EntityPostProcessor

logger = logging.getLogger(__name__)


class ExtensionPipeline:
    """Runs registered post-processors over every entity being initialized.

    Processors run in registration order for every phase. A processor may
    return a different object to substitute the instance; a ``None`` result
    keeps the previous value and the chain continues with the next processor.

    Attributes:
        _processors: Registered processors in application order.
    """

    def __init__(self) -> None:
        self._processors: List[EntityPostProcessor] = []

    def add(self, processor: EntityPostProcessor) -> None:
        """Append a processor. The list only grows; registered processors are never reordered."""
        self._processors.append(processor)
        logger.debug("Added post-processor %s", type(processor).__name__)

    @property
    def processors(self) -> List[EntityPostProcessor]:
        return list(self._processors)

    def apply_before_initialization(self, instance: Any, name: str) -> Any:
        result = instance
        for processor in self._processors:
            result = self._retain(processor.before_initialization(result, name), result, processor, name)
        return result

    def apply_after_initialization(self, instance: Any, name: str) -> Any:
        result = instance
        for processor in self._processors:
            result = self._retain(processor.after_initialization(result, name), result, processor, name)
        return result

    def apply_early_reference(self, instance: Any, name: str) -> Any:
        result = instance
        for processor in self._processors:
            result = self._retain(processor.get_early_reference(result, name), result, processor, name)
        return result

    @staticmethod
    def _retain(current: Any, previous: Any, processor: EntityPostProcessor, name: str) -> Any:
        if current is None:
            logger.debug("%s returned None for entity '%s', keeping previous instance", type(processor).__name__, name)
            return previous
        return current
