"""Optional lifecycle capabilities an entity may support.

Entities never inherit from these protocols. The container checks them
structurally at runtime and only calls the callbacks an instance actually
provides.
"""

import inspect
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lite_ioc.domain.interfaces import IContainer


@runtime_checkable
class NameAware(Protocol):
    """Receives the name it was registered under."""

    def set_entity_name(self, name: str) -> None: ...


@runtime_checkable
class ContainerAware(Protocol):
    """Receives the container that built it."""

    def set_container(self, container: "IContainer") -> None: ...


@runtime_checkable
class InitializingEntity(Protocol):
    """Runs custom initialization once all properties are set."""

    def after_properties_set(self) -> None: ...


@runtime_checkable
class DisposableEntity(Protocol):
    """Releases resources when the container closes."""

    def destroy(self) -> None: ...


INITIALIZING_METHOD = "after_properties_set"
DISPOSAL_METHOD = "destroy"


def supports_name_awareness(instance: Any) -> bool:
    return isinstance(instance, NameAware)


def supports_container_awareness(instance: Any) -> bool:
    return isinstance(instance, ContainerAware)


def _callable_without_arguments(instance: Any, method_name: str) -> bool:
    method = getattr(instance, method_name, None)
    if not callable(method):
        return False
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return True
    return all(
        parameter.default is not inspect.Parameter.empty
        or parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for parameter in signature.parameters.values()
    )


def supports_initialization(instance: Any) -> bool:
    """Whether ``instance`` has an ``after_properties_set()`` callable without arguments."""
    return _callable_without_arguments(instance, INITIALIZING_METHOD)


def supports_disposal(instance: Any) -> bool:
    """Whether ``instance`` has a ``destroy()`` callable without arguments.

    Looked up through regular attribute access, so proxies forwarding to a
    disposable target qualify. A ``destroy`` requiring arguments does not.
    """
    return _callable_without_arguments(instance, DISPOSAL_METHOD)
