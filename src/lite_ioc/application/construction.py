"""Application layer - Entity construction pipeline."""

import logging
from typing import Any, List, Optional, Tuple, Type

from lite_ioc.application.extension_pipeline import ExtensionPipeline
from lite_ioc.application.instance_cache import InstanceCacheManager
from lite_ioc.application.type_converter import TypeConverter
from lite_ioc.application.type_descriptor import TypeDescriptorService
from lite_ioc.domain import (
    ConstructionFailure,
    ConstructorDescriptor,
    ContainerException,
    ContainerSettings,
    EntityDefinition,
    EntityReference,
    IContainer,
    LifecycleHookFailure,
    LiteralValue,
    PropertyNotWritable,
    TypeConversionError,
    supports_container_awareness,
    supports_disposal,
    supports_initialization,
    supports_name_awareness,
)
from lite_ioc.domain.capabilities import DISPOSAL_METHOD, INITIALIZING_METHOD

logger = logging.getLogger(__name__)


class ConstructionPipeline:
    """Builds one entity from its definition.

    Steps, in order: instantiate, expose an early reference (singletons without
    constructor references only), populate properties, initialize, register
    for teardown. Any failure aborts the remaining steps.

    Attributes:
        _container: Container used to resolve references, re-entering it recursively.
        _cache: Singleton cache receiving early references and disposables.
        _extensions: Post-processor chain.
        _descriptors: Type introspection service.
        _converter: Literal coercion.
        _settings: Container behavior switches.
    """

    def __init__(
        self,
        container: IContainer,
        cache: InstanceCacheManager,
        extensions: ExtensionPipeline,
        descriptors: Optional[TypeDescriptorService] = None,
        converter: Optional[TypeConverter] = None,
        settings: Optional[ContainerSettings] = None,
    ) -> None:
        self._container = container
        self._cache = cache
        self._extensions = extensions
        self._descriptors = descriptors or TypeDescriptorService()
        self._converter = converter or TypeConverter()
        self._settings = settings or ContainerSettings()

    def create(self, name: str, definition: EntityDefinition) -> Any:
        """Run the full pipeline for one entity.

        Args:
            name: The entity name.
            definition: How to build the entity.

        Returns:
            The initialized instance, possibly substituted by a post-processor.

        Raises:
            ContainerException: Container errors propagate with a note naming the entity.
            ConstructionFailure: Wraps any other error raised while building.
        """
        try:
            cls = self._descriptors.load_type(definition.target_type)
            logger.debug("Creating entity '%s' of type %s", name, cls.__name__)

            instance = self._instantiate(name, definition, cls)

            if (
                definition.is_singleton
                and not definition.has_constructor_references
                and self._settings.allow_circular_references
            ):
                self._cache.add_singleton_factory(
                    name, lambda: self._extensions.apply_early_reference(instance, name)
                )

            self._populate(name, definition, instance)
            return self._initialize(name, definition, instance)

        except ContainerException as e:
            e.add_note(f"while creating entity '{name}'")
            raise
        except Exception as e:
            raise ConstructionFailure(name, f"{type(e).__name__}: {e}") from e

    def resolve_value(self, value: Any) -> Any:
        """Resolve a literal or a reference to its runtime value."""
        if isinstance(value, EntityReference):
            return self._container.resolve(value.entity_name)
        if isinstance(value, LiteralValue):
            if value.type_hint is not None:
                return self._converter.convert(value.value, value.type_hint)
            return value.value
        return value

    def destroy(self, name: str, instance: Any, definition: Optional[EntityDefinition]) -> None:
        """Run the destroy callbacks of one instance.

        Raises:
            LifecycleHookFailure: If a callback is missing or fails.
        """
        disposable = supports_disposal(instance)
        if disposable:
            self._call_hook(name, DISPOSAL_METHOD, instance.destroy)

        destroy_method_name = definition.destroy_method_name if definition else None
        if destroy_method_name and not (disposable and destroy_method_name == DISPOSAL_METHOD):
            self._call_hook(name, destroy_method_name, self._find_hook(name, instance, destroy_method_name))
        logger.debug("Destroyed entity '%s'", name)

    def _instantiate(self, name: str, definition: EntityDefinition, cls: Type) -> Any:
        arguments = [self.resolve_value(argument) for argument in definition.constructor_arguments]
        constructors = self._descriptors.get_constructors(cls)

        selected, final_arguments = self._select_constructor(constructors, definition, arguments)
        if selected is None:
            argument_types = ", ".join(type(argument).__name__ for argument in arguments) or "no arguments"
            raise ConstructionFailure(name, f"No constructor of {cls.__name__} accepts ({argument_types})")

        instance = self._descriptors.instantiate(selected, final_arguments)
        if instance is None:
            raise ConstructionFailure(name, f"Constructor {cls.__name__}.{selected.name} returned None")
        return instance

    def _select_constructor(
        self,
        constructors: List[ConstructorDescriptor],
        definition: EntityDefinition,
        arguments: List[Any],
    ) -> Tuple[Optional[ConstructorDescriptor], List[Any]]:
        count = len(arguments)
        candidates = [candidate for candidate in constructors if candidate.accepts_arity(count)]

        # Exact parameter types first
        for candidate in candidates:
            if len(candidate.parameter_types) == count and all(
                self._descriptors.is_exact_match(parameter_type, argument)
                for parameter_type, argument in zip(candidate.parameter_types, arguments)
            ):
                return candidate, arguments

        for candidate in candidates:
            if all(
                self._descriptors.is_assignable(parameter_type, argument)
                for parameter_type, argument in zip(candidate.parameter_types, arguments)
            ):
                return candidate, arguments

        # String literals may still be coerced to the declared parameter types
        for candidate in candidates:
            converted = self._coerce_literals(candidate, definition, arguments)
            if converted is not None:
                return candidate, converted

        return None, arguments

    def _coerce_literals(
        self,
        candidate: ConstructorDescriptor,
        definition: EntityDefinition,
        arguments: List[Any],
    ) -> Optional[List[Any]]:
        converted: List[Any] = []
        raw_arguments = definition.constructor_arguments
        for raw, argument, parameter_type in zip(raw_arguments, arguments, candidate.parameter_types):
            if isinstance(raw, LiteralValue) and isinstance(argument, str):
                try:
                    argument = self._converter.convert(argument, parameter_type)
                except TypeConversionError:
                    return None
            if not self._descriptors.is_assignable(parameter_type, argument):
                return None
            converted.append(argument)
        return converted

    def _populate(self, name: str, definition: EntityDefinition, instance: Any) -> None:
        for binding in definition.property_bindings:
            value = self.resolve_value(binding.value)

            descriptor = self._descriptors.find_property(instance, binding.name)
            if descriptor is None:
                raise PropertyNotWritable(name, binding.name, type(instance))

            descriptor.setter(instance, self._converter.convert(value, descriptor.property_type))

    def _initialize(self, name: str, definition: EntityDefinition, instance: Any) -> Any:
        if supports_name_awareness(instance):
            self._call_hook(name, "set_entity_name", instance.set_entity_name, name)
        if supports_container_awareness(instance):
            self._call_hook(name, "set_container", instance.set_container, self._container)

        wrapped = self._extensions.apply_before_initialization(instance, name)

        self._invoke_init_methods(name, definition, wrapped)

        wrapped = self._extensions.apply_after_initialization(wrapped, name)

        if definition.is_singleton and (supports_disposal(wrapped) or definition.destroy_method_name):
            self._cache.register_disposable(name, wrapped)

        return wrapped

    def _invoke_init_methods(self, name: str, definition: EntityDefinition, instance: Any) -> None:
        initializing = supports_initialization(instance)
        if initializing:
            self._call_hook(name, INITIALIZING_METHOD, instance.after_properties_set)

        init_method_name = definition.init_method_name
        if init_method_name and not (initializing and init_method_name == INITIALIZING_METHOD):
            self._call_hook(name, init_method_name, self._find_hook(name, instance, init_method_name))

    @staticmethod
    def _find_hook(name: str, instance: Any, hook_name: str) -> Any:
        hook = getattr(instance, hook_name, None)
        if not callable(hook):
            raise LifecycleHookFailure(name, hook_name, f"{type(instance).__name__} has no method '{hook_name}'")
        return hook

    @staticmethod
    def _call_hook(name: str, hook_name: str, hook: Any, *args: Any) -> None:
        try:
            hook(*args)
        except ContainerException:
            raise
        except Exception as e:
            raise LifecycleHookFailure(name, hook_name, f"{type(e).__name__}: {e}") from e
