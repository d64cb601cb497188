"""Application layer - Annotation-driven attribute injection."""

import logging
import types
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type, Union, get_args, get_origin, get_type_hints

from lite_ioc.application.type_converter import TypeConverter
from lite_ioc.domain import (
    ConstructionFailure,
    DefinitionNotFound,
    EntityPostProcessor,
    IContainer,
    PropertyNotWritable,
)
from lite_ioc.domain.injection import Autowired, Qualifier, Value

logger = logging.getLogger(__name__)

_InjectionPoint = Tuple[Any, Tuple[Any, ...]]


class AutowiringProcessor(EntityPostProcessor):
    """Post-processor that fills ``Annotated`` attributes before init callbacks run.

    ``Autowired`` attributes receive the single entity assignable to the
    attribute's type, or the entity named by a ``Qualifier``. ``Value``
    attributes receive their literal converted to the attribute's type.
    Annotations inherited from base classes are honored.

    Example:
        >>> container.add_processor(AutowiringProcessor())
        >>> class UserService:
        ...     repository: Annotated[UserRepository, Autowired()]
        ...     max_retries: Annotated[int, Value("3")]
    """

    def __init__(self, converter: Optional[TypeConverter] = None) -> None:
        self._container: Optional[IContainer] = None
        self._converter = converter or TypeConverter()

    def set_container(self, container: IContainer) -> None:
        self._container = container

    def before_initialization(self, instance: Any, name: str) -> Any:
        for attribute, (attribute_type, markers) in self._injection_points(type(instance)).items():
            for marker in markers:
                if isinstance(marker, Value):
                    self._assign(instance, name, attribute, self._converter.convert(marker.value, attribute_type))
                elif isinstance(marker, Autowired):
                    self._autowire(instance, name, attribute, attribute_type, marker, self._qualifier(markers))
        return instance

    def _autowire(
        self,
        instance: Any,
        name: str,
        attribute: str,
        attribute_type: Any,
        autowired: Autowired,
        qualifier: Optional[Qualifier],
    ) -> None:
        if self._container is None:
            raise ConstructionFailure(name, f"cannot autowire '{attribute}' without a container")

        lookup_type = _unwrap_optional(attribute_type)
        try:
            if qualifier is not None:
                candidate = self._container.resolve(qualifier.name, _as_class(lookup_type))
            else:
                candidate = self._container.resolve_by_type(lookup_type)
        except DefinitionNotFound:
            if autowired.required:
                raise
            logger.debug("No candidate for optional attribute '%s' of entity '%s'", attribute, name)
            return
        self._assign(instance, name, attribute, candidate)

    @staticmethod
    def _assign(instance: Any, name: str, attribute: str, value: Any) -> None:
        try:
            setattr(instance, attribute, value)
        except AttributeError as e:
            raise PropertyNotWritable(name, attribute, type(instance)) from e
        logger.debug("Injected attribute '%s' of entity '%s'", attribute, name)

    @staticmethod
    def _qualifier(markers: Tuple[Any, ...]) -> Optional[Qualifier]:
        return next((marker for marker in markers if isinstance(marker, Qualifier)), None)

    @staticmethod
    def _injection_points(target_type: Type) -> Dict[str, _InjectionPoint]:
        try:
            hints = get_type_hints(target_type, include_extras=True)
        except (NameError, TypeError) as e:
            logger.warning("Cannot read annotations of %s, skipping injection: %s", target_type.__name__, e)
            return {}

        points = {}
        for attribute, hint in hints.items():
            if get_origin(hint) is not Annotated:
                continue
            attribute_type, *metadata = get_args(hint)
            markers = tuple(marker for marker in metadata if isinstance(marker, (Autowired, Qualifier, Value)))
            if markers:
                points[attribute] = (attribute_type, markers)
        return points


def _unwrap_optional(attribute_type: Any) -> Any:
    if get_origin(attribute_type) in (Union, types.UnionType):
        members: List[Any] = [member for member in get_args(attribute_type) if member is not type(None)]
        if len(members) == 1:
            return members[0]
    return attribute_type


def _as_class(attribute_type: Any) -> Optional[Type]:
    concrete = get_origin(attribute_type) or attribute_type
    return concrete if isinstance(concrete, type) else None
