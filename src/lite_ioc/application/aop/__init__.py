"""
AOP subsystem - Pointcuts, advisors, interceptor chains and proxies.
"""

from .advisors import DefaultPointcutAdvisor
from .auto_proxy import AutoProxyCreator
from .invocation import ReflectiveMethodInvocation
from .pointcuts import NameMatchPointcut
from .proxy import CapabilityProxy, ProxyFactory, find_capabilities, get_proxy_target, is_proxy

__all__ = [
    "AutoProxyCreator",
    "CapabilityProxy",
    "DefaultPointcutAdvisor",
    "NameMatchPointcut",
    "ProxyFactory",
    "ReflectiveMethodInvocation",
    "find_capabilities",
    "get_proxy_target",
    "is_proxy",
]
