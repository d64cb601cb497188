import logging
from typing import Any, List, Optional, Type

from lite_ioc.application.aop.proxy import ProxyFactory, collect_public_methods
from lite_ioc.domain import (
    Advice,
    Advisor,
    EntityPostProcessor,
    IContainer,
    Pointcut,
    PointcutAdvisor,
    ProxyConfig,
)

logger = logging.getLogger(__name__)


class AutoProxyCreator(EntityPostProcessor):
    """Post-processor that wraps entities in proxies when advisors apply to them.

    After an entity is initialized, every Advisor-typed entity of the container
    is considered; those whose pointcut matches at least one public method of
    the entity's type are applied through a proxy, in registration order.
    Advices, pointcuts and advisors themselves are never proxied.

    Early references handed to cycle peers are not proxied: a peer that
    captured one keeps the raw instance.

    Example:
        >>> container.add_processor(AutoProxyCreator())
        >>> container.register("auditAdvisor", EntityDefinition(target_type=AuditAdvisor))
        >>> service = container.resolve("userService")  # a proxy if AuditAdvisor matches
    """

    def __init__(self) -> None:
        self._container: Optional[IContainer] = None

    def set_container(self, container: IContainer) -> None:
        self._container = container

    def after_initialization(self, instance: Any, name: str) -> Any:
        if self._is_infrastructure(instance):
            return instance

        advisors = self._find_matching_advisors(type(instance), name)
        if not advisors:
            return instance

        logger.debug("Creating proxy for entity '%s' with %d advisor(s)", name, len(advisors))
        config = ProxyConfig(target=instance, target_type=type(instance), advisors=advisors)
        return ProxyFactory(config).get_proxy()

    @staticmethod
    def _is_infrastructure(instance: Any) -> bool:
        return isinstance(instance, (Advice, Pointcut, Advisor))

    def _find_candidate_advisors(self, name: str) -> List[Advisor]:
        if self._container is None:
            return []

        advisors = []
        for advisor_name in self._container.get_names_for_type(Advisor):
            if advisor_name == name or self._container.is_currently_in_creation(advisor_name):
                logger.debug("Skipping advisor '%s' while it is being created", advisor_name)
                continue
            advisors.append(self._container.resolve(advisor_name, Advisor))
        return advisors

    def _find_matching_advisors(self, target_type: Type, name: str) -> List[Advisor]:
        return [advisor for advisor in self._find_candidate_advisors(name) if self.can_apply(advisor, target_type)]

    @staticmethod
    def can_apply(advisor: Advisor, target_type: Type) -> bool:
        """Whether ``advisor`` applies to at least one method of ``target_type``.

        Advisors without a pointcut apply to every type.
        """
        if not isinstance(advisor, PointcutAdvisor):
            return True
        return any(
            advisor.pointcut.matches(method, target_type) for method in collect_public_methods(target_type).values()
        )
