"""Capability proxies dispatching calls through interceptor chains."""

import inspect
import logging
import threading
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Protocol, Tuple, Type

from lite_ioc.application.aop.invocation import ReflectiveMethodInvocation
from lite_ioc.domain import Advisor, MethodDescriptor, ProxyConfig, ProxyUnsupported

logger = logging.getLogger(__name__)

_CONFIG_ATTRIBUTE = "_lite_ioc_proxy_config"
_NON_CAPABILITY_BASES = frozenset({object, ABC, Protocol, Generic})

_proxy_classes: Dict[Tuple[type, ...], type] = {}
_proxy_classes_lock = threading.Lock()


def is_capability(cls: type) -> bool:
    """Whether ``cls`` is interface-like: a protocol, or an ABC with abstract methods."""
    if cls in _NON_CAPABILITY_BASES:
        return False
    return bool(getattr(cls, "_is_protocol", False)) or inspect.isabstract(cls)


def find_capabilities(target_type: type) -> Tuple[type, ...]:
    """Return the most specific capabilities ``target_type`` implements.

    The type itself is never one of its capabilities. A capability already
    covered by a more specific one is left out.
    """
    capabilities: List[type] = []
    for klass in target_type.__mro__[1:]:
        if not is_capability(klass):
            continue
        if any(issubclass(existing, klass) for existing in capabilities):
            continue
        capabilities.append(klass)
    return tuple(capabilities)


def collect_public_methods(cls: type) -> Dict[str, MethodDescriptor]:
    """Describe the public methods of ``cls``, each with the class defining it."""
    methods: Dict[str, MethodDescriptor] = {}
    for klass in reversed(cls.__mro__):
        if klass in _NON_CAPABILITY_BASES:
            continue
        for name, attribute in vars(klass).items():
            if name.startswith("_"):
                continue
            function = attribute.__func__ if isinstance(attribute, (staticmethod, classmethod)) else attribute
            if inspect.isfunction(function):
                methods[name] = MethodDescriptor(name=name, declaring_type=klass, function=function)
    return methods


def _collect_properties(capabilities: Tuple[type, ...]) -> List[str]:
    names = []
    for capability in capabilities:
        for klass in capability.__mro__:
            if klass in _NON_CAPABILITY_BASES:
                continue
            for name, attribute in vars(klass).items():
                if isinstance(attribute, property) and not name.startswith("_") and name not in names:
                    names.append(name)
    return names


def _config_of(proxy: Any) -> ProxyConfig:
    return object.__getattribute__(proxy, _CONFIG_ATTRIBUTE)


def _dispatch(proxy: Any, method: MethodDescriptor, args: Tuple[Any, ...], kwargs: Dict[str, Any]) -> Any:
    config = _config_of(proxy)
    chain = config.get_interceptors(method)
    if not chain:
        return getattr(config.target, method.name)(*args, **kwargs)
    return ReflectiveMethodInvocation(config.target, method, args, kwargs, chain).proceed()


def _dispatching_method(method: MethodDescriptor) -> Any:
    def dispatcher(self, *args: Any, **kwargs: Any) -> Any:
        return _dispatch(self, method, args, kwargs)

    dispatcher.__name__ = method.name
    dispatcher.__qualname__ = f"{method.declaring_type.__qualname__}.{method.name}"
    dispatcher.__doc__ = method.function.__doc__
    return dispatcher


def _forwarding_property(name: str) -> property:
    def getter(self) -> Any:
        return getattr(_config_of(self).target, name)

    def setter(self, value: Any) -> None:
        setattr(_config_of(self).target, name, value)

    return property(getter, setter)


def _proxy_init(self, config: ProxyConfig) -> None:
    object.__setattr__(self, _CONFIG_ATTRIBUTE, config)


def _proxy_getattr(self, name: str) -> Any:
    # Only reached for attributes the capabilities do not declare
    if name == _CONFIG_ATTRIBUTE:
        raise AttributeError(name)
    return getattr(_config_of(self).target, name)


def _proxy_setattr(self, name: str, value: Any) -> None:
    if isinstance(getattr(type(self), name, None), property):
        object.__setattr__(self, name, value)
    else:
        setattr(_config_of(self).target, name, value)


def _proxy_repr(self) -> str:
    config = _config_of(self)
    return f"<{type(self).__name__} for {config.target!r}>"


def _proxy_eq(self, other: Any) -> bool:
    target = _config_of(self).target
    if other is self:
        return True
    if is_proxy(other):
        other = _config_of(other).target
    return target == other


def _proxy_hash(self) -> int:
    return hash(_config_of(self).target)


def get_proxy_class(capabilities: Tuple[type, ...]) -> type:
    """Return the wrapper class for a capability set, generating it on first use."""
    with _proxy_classes_lock:
        cls = _proxy_classes.get(capabilities)
        if cls is not None:
            return cls

        namespace: Dict[str, Any] = {
            "__init__": _proxy_init,
            "__getattr__": _proxy_getattr,
            "__setattr__": _proxy_setattr,
            "__repr__": _proxy_repr,
            "__eq__": _proxy_eq,
            "__hash__": _proxy_hash,
            _CONFIG_ATTRIBUTE + "_class": True,
        }
        for capability in reversed(capabilities):
            for name, method in collect_public_methods(capability).items():
                namespace[name] = _dispatching_method(method)
        for name in _collect_properties(capabilities):
            namespace[name] = _forwarding_property(name)
        for capability in capabilities:
            # Private and special abstract members still need an implementation
            for name in getattr(capability, "__abstractmethods__", ()):
                if name in namespace:
                    continue
                attribute = inspect.getattr_static(capability, name)
                if isinstance(attribute, property):
                    namespace[name] = _forwarding_property(name)
                elif callable(attribute):
                    method = MethodDescriptor(name=name, declaring_type=capability, function=attribute)
                    namespace[name] = _dispatching_method(method)

        name = "".join(capability.__name__ for capability in capabilities) + "Proxy"
        cls = type(name, capabilities, namespace)
        _proxy_classes[capabilities] = cls
        logger.debug("Generated proxy class %s", name)
        return cls


def is_proxy(instance: Any) -> bool:
    return hasattr(type(instance), _CONFIG_ATTRIBUTE + "_class")


def get_proxy_target(instance: Any) -> Any:
    """Return the object behind a proxy, or ``instance`` itself if it is not one."""
    if is_proxy(instance):
        return _config_of(instance).target
    return instance


class CapabilityProxy:
    """Builds a proxy implementing every capability of the target.

    The generated proxy is an instance of each capability, routes capability
    methods through the interceptor chain and lets every other attribute
    pass through to the target.
    """

    def __init__(self, config: ProxyConfig) -> None:
        self._config = config

    def get_proxy(self) -> Any:
        target_type = type(self._config.target)
        capabilities = find_capabilities(target_type)
        if not capabilities:
            raise ProxyUnsupported(
                target_type,
                "the target implements no capability (abstract base class or protocol) to proxy",
            )
        return get_proxy_class(capabilities)(self._config)


class ProxyFactory:
    """Configures and creates proxies.

    Example:
        >>> factory = ProxyFactory(target=UserServiceImpl())
        >>> factory.add_advisor(DefaultPointcutAdvisor(NameMatchPointcut("save_user"), LoggingBeforeAdvice()))
        >>> proxy = factory.get_proxy()
    """

    def __init__(self, config: Optional[ProxyConfig] = None, target: Any = None) -> None:
        if config is None:
            if target is None:
                raise ValueError("Either a proxy config or a target is required")
            config = ProxyConfig(target=target)
        self._config = config

    @property
    def config(self) -> ProxyConfig:
        return self._config

    def add_advisor(self, advisor: Advisor, position: Optional[int] = None) -> None:
        self._config.add_advisor(advisor, position)

    def get_proxy(self) -> Any:
        """Build the proxy.

        Raises:
            ProxyUnsupported: If a full-type proxy is requested, or the target has no capability.
        """
        if self._config.proxy_target_type:
            raise ProxyUnsupported(
                type(self._config.target),
                "full-type proxies are not supported; proxy through a capability instead",
            )
        return CapabilityProxy(self._config).get_proxy()

    @staticmethod
    def get_proxy_for(target: Any, *advisors: Advisor) -> Any:
        """Shortcut building a proxy for ``target`` with the given advisors."""
        return ProxyFactory(ProxyConfig(target=target, advisors=list(advisors))).get_proxy()
