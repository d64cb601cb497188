"""Application layer - Restricted type introspection for construction and property access."""

import importlib
import inspect
import threading
import types
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type, Union, get_args, get_origin, get_type_hints

from lite_ioc.domain import ConstructorDescriptor, PropertyDescriptor

CONSTRUCTOR_MARKER = "__lite_ioc_constructor__"

_UNION_TYPES = (Union, types.UnionType)
_NUMERIC_PROMOTIONS: Dict[type, tuple] = {
    float: (int,),
    complex: (int, float),
}


def constructor(method: Callable) -> Callable:
    """Mark a class method as an alternate constructor the container may select.

    Example:
        >>> class Endpoint:
        ...     def __init__(self, host: str, port: int):
        ...         ...
        ...
        ...     @constructor
        ...     @classmethod
        ...     def from_url(cls, url: str) -> "Endpoint":
        ...         ...
    """
    function = method.__func__ if isinstance(method, classmethod) else method
    setattr(function, CONSTRUCTOR_MARKER, True)
    return method


def _safe_type_hints(function: Callable) -> Dict[str, Any]:
    try:
        return get_type_hints(function)
    except Exception:
        # Unresolvable forward references: fall back to the non-string annotations
        annotations = getattr(function, "__annotations__", {})
        return {name: hint for name, hint in annotations.items() if not isinstance(hint, str)}


class TypeDescriptorService:
    """Describes how types can be instantiated and which properties can be written.

    Constructors are ``__init__`` followed by class methods marked with
    :func:`constructor`, in declaration order. Writable properties are
    ``property`` objects with a setter, ``set_<name>`` methods and annotated
    class attributes. Descriptors are computed once per type and cached.

    Attributes:
        _type_cache: Dotted import paths already loaded.
        _constructor_cache: Constructor descriptors per type.
        _property_cache: Property descriptors per type.
    """

    def __init__(self) -> None:
        self._type_cache: Dict[str, Type] = {}
        self._constructor_cache: Dict[Type, List[ConstructorDescriptor]] = {}
        self._property_cache: Dict[Type, Dict[str, PropertyDescriptor]] = {}
        self._lock = threading.Lock()

    def load_type(self, identifier: Union[Type, str]) -> Type:
        """Turn a type identifier into a class.

        Args:
            identifier: A class, or a dotted path such as ``"package.module.Class"``.

        Returns:
            The class.

        Raises:
            ImportError: If no module prefix of the path can be imported.
            AttributeError: If the class cannot be found in the module.
            TypeError: If the path does not name a class.
        """
        if isinstance(identifier, type):
            return identifier

        cached = self._type_cache.get(identifier)
        if cached is not None:
            return cached

        parts = identifier.split(".")
        module = None
        index = len(parts) - 1
        while index > 0:
            try:
                module = importlib.import_module(".".join(parts[:index]))
                break
            except ImportError:
                index -= 1
        if module is None:
            raise ImportError(f"Cannot import a module for type path '{identifier}'")

        resolved: Any = module
        for attribute in parts[index:]:
            resolved = getattr(resolved, attribute)
        if not isinstance(resolved, type):
            raise TypeError(f"'{identifier}' does not name a class")

        self._type_cache[identifier] = resolved
        return resolved

    def get_constructors(self, cls: Type) -> List[ConstructorDescriptor]:
        """Enumerate the constructors of ``cls``, ``__init__`` first."""
        with self._lock:
            cached = self._constructor_cache.get(cls)
            if cached is None:
                cached = self._build_constructors(cls)
                self._constructor_cache[cls] = cached
            return cached

    def get_properties(self, cls: Type) -> Dict[str, PropertyDescriptor]:
        """Enumerate the writable properties of ``cls``."""
        with self._lock:
            cached = self._property_cache.get(cls)
            if cached is None:
                cached = self._build_properties(cls)
                self._property_cache[cls] = cached
            return cached

    def find_property(self, instance: Any, name: str) -> Optional[PropertyDescriptor]:
        """Find a writable property on an instance.

        Falls back to public attributes already present on the instance when the
        type declares nothing under ``name``.
        """
        descriptor = self.get_properties(type(instance)).get(name)
        if descriptor is not None:
            return descriptor

        if name.startswith("_"):
            return None
        instance_dict = getattr(instance, "__dict__", None)
        if instance_dict is not None and name in instance_dict and not callable(instance_dict[name]):
            return PropertyDescriptor(name=name, property_type=None, setter=_attribute_setter(name))
        return None

    def instantiate(self, descriptor: ConstructorDescriptor, arguments: List[Any]) -> Any:
        return descriptor.factory(*arguments)

    def is_exact_match(self, parameter_type: Any, value: Any) -> bool:
        """Check that ``value`` is exactly of the declared type (no subclasses)."""
        if parameter_type is None:
            return False
        return type(value) is parameter_type

    def is_assignable(self, parameter_type: Any, value: Any) -> bool:
        """Check that ``value`` can be passed where ``parameter_type`` is declared.

        Unannotated and ``Any`` parameters accept everything. ``int`` is accepted
        for ``float`` and ``complex``, as it is in type checking.
        """
        if parameter_type is None or parameter_type is Any:
            return True

        origin = get_origin(parameter_type)
        if origin in _UNION_TYPES:
            return any(self.is_assignable(member, value) for member in get_args(parameter_type))

        if value is None:
            return parameter_type is type(None)

        concrete = origin or parameter_type
        if not isinstance(concrete, type):
            return True
        try:
            if isinstance(value, concrete):
                return True
        except TypeError:
            # Protocols without runtime checks cannot be verified
            return True

        promotions = _NUMERIC_PROMOTIONS.get(concrete, ())
        return isinstance(value, promotions) and not isinstance(value, bool)

    def _build_constructors(self, cls: Type) -> List[ConstructorDescriptor]:
        descriptors = [self._describe(cls, "__init__", cls, cls.__init__, skip_first=True)]

        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, classmethod) and getattr(attribute.__func__, CONSTRUCTOR_MARKER, False):
                    bound = getattr(cls, name)
                    descriptors.append(self._describe(cls, name, bound, attribute.__func__, skip_first=True))
        return descriptors

    def _describe(
        self,
        cls: Type,
        name: str,
        factory: Callable,
        function: Callable,
        skip_first: bool,
    ) -> ConstructorDescriptor:
        if function is object.__init__:
            return ConstructorDescriptor(name=name, factory=factory)

        signature = inspect.signature(function)
        hints = _safe_type_hints(function)

        parameters = list(signature.parameters.values())
        if skip_first and parameters:
            parameters = parameters[1:]

        names: List[str] = []
        parameter_types: List[Any] = []
        required = 0
        for parameter in parameters:
            if parameter.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                continue
            names.append(parameter.name)
            parameter_types.append(hints.get(parameter.name))
            if parameter.default is inspect.Parameter.empty:
                required += 1

        return ConstructorDescriptor(
            name=name,
            factory=factory,
            parameter_names=names,
            parameter_types=parameter_types,
            required_count=required,
        )

    def _build_properties(self, cls: Type) -> Dict[str, PropertyDescriptor]:
        properties: Dict[str, PropertyDescriptor] = {}

        class_hints = _safe_type_hints(cls)
        for name, hint in class_hints.items():
            if name.startswith("_") or get_origin(hint) is ClassVar or hint is ClassVar:
                continue
            properties[name] = PropertyDescriptor(name=name, property_type=hint, setter=_attribute_setter(name))

        for klass in reversed(cls.__mro__):
            for name, attribute in vars(klass).items():
                if isinstance(attribute, property):
                    if attribute.fset is None:
                        # Read-only property shadows any annotation of the same name
                        properties.pop(name, None)
                        continue
                    properties[name] = PropertyDescriptor(
                        name=name,
                        property_type=self._setter_type(attribute.fset),
                        setter=_attribute_setter(name),
                    )
                elif name.startswith("set_") and len(name) > 4 and inspect.isfunction(attribute):
                    property_name = name[4:]
                    properties[property_name] = PropertyDescriptor(
                        name=property_name,
                        property_type=self._setter_type(attribute),
                        setter=_method_setter(name),
                    )
        return properties

    def _setter_type(self, function: Callable) -> Any:
        hints = _safe_type_hints(function)
        parameters = list(inspect.signature(function).parameters)
        if len(parameters) < 2:
            return None
        return hints.get(parameters[1])


def _attribute_setter(name: str) -> Callable[[Any, Any], None]:
    def setter(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return setter


def _method_setter(method_name: str) -> Callable[[Any, Any], None]:
    def setter(instance: Any, value: Any) -> None:
        getattr(instance, method_name)(value)

    return setter
