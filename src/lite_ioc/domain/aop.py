from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field


class MethodDescriptor(BaseModel):
    """Identifies a method being matched or invoked.

    Attributes:
        name: Method name.
        declaring_type: Class that defines the method.
        function: The underlying function object.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    declaring_type: Type
    function: Callable[..., Any]

    def __str__(self) -> str:
        return f"{self.declaring_type.__name__}.{self.name}"


class Pointcut(ABC):
    """Decides which methods an advice applies to."""

    @abstractmethod
    def matches(self, method: MethodDescriptor, target_type: Type) -> bool:
        """Check whether the advice applies to a method.

        Args:
            method: The candidate method.
            target_type: Concrete type of the proxied target.
        """


class Advice(ABC):
    """Marker base for cross-cutting behavior applied around method calls."""


class MethodInvocation(ABC):
    """A method call travelling through an interceptor chain."""

    @property
    @abstractmethod
    def method(self) -> MethodDescriptor:
        """The method being invoked."""

    @property
    @abstractmethod
    def arguments(self) -> Tuple[Any, ...]:
        """Positional arguments of the call."""

    @property
    @abstractmethod
    def keyword_arguments(self) -> Dict[str, Any]:
        """Keyword arguments of the call."""

    @property
    @abstractmethod
    def target(self) -> Any:
        """The object the call is ultimately made on."""

    @abstractmethod
    def proceed(self) -> Any:
        """Continue with the next interceptor, or call the target at the end of the chain."""


class MethodInterceptor(Advice):
    """Around advice: takes full control of the call."""

    @abstractmethod
    def invoke(self, invocation: MethodInvocation) -> Any:
        """Handle the call, calling ``invocation.proceed()`` to continue the chain.

        Args:
            invocation: The ongoing call.

        Returns:
            The value returned to the caller.
        """


class MethodBeforeAdvice(Advice):
    """Runs before the call continues down the chain."""

    @abstractmethod
    def before(self, method: MethodDescriptor, args: Tuple[Any, ...], target: Any) -> None:
        """Observe a call before it happens."""


class AfterReturningAdvice(Advice):
    """Observes the value returned by the rest of the chain."""

    @abstractmethod
    def after_returning(
        self,
        return_value: Any,
        method: MethodDescriptor,
        args: Tuple[Any, ...],
        target: Any,
    ) -> None:
        """Observe a successful call. The return value passes through unchanged."""


class Advisor(ABC):
    """Holds an advice to apply to proxied targets."""

    @property
    @abstractmethod
    def advice(self) -> Advice:
        """The advice to apply."""


class PointcutAdvisor(Advisor):
    """An advisor whose advice only applies to methods matched by a pointcut."""

    @property
    @abstractmethod
    def pointcut(self) -> Pointcut:
        """The pointcut selecting methods."""


class ProxyConfig(BaseModel):
    """Everything needed to build a proxy around a target.

    Attributes:
        target: The object calls are delegated to.
        target_type: Concrete type used for pointcut matching.
        advisors: Advisors in application order.
        proxy_target_type: Request a full-type (subclass) proxy instead of a capability proxy.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: Any = Field(..., description="The proxied object.")
    target_type: Optional[Type] = Field(default=None, description="Type used for pointcut matching.")
    advisors: List[Advisor] = Field(default_factory=list, description="Advisors in application order.")
    proxy_target_type: bool = Field(default=False, description="Force a full-type proxy.")

    def model_post_init(self, __context: Any) -> None:
        if self.target_type is None:
            self.target_type = type(self.target)

    def add_advisor(self, advisor: Advisor, position: Optional[int] = None) -> None:
        """Append an advisor, or insert it at ``position``."""
        if position is None:
            self.advisors.append(advisor)
        else:
            self.advisors.insert(position, advisor)

    def get_interceptors(self, method: MethodDescriptor) -> List[Advice]:
        """Collect, in advisor order, the advices that apply to ``method``.

        Advisors without a pointcut apply to every method.
        """
        interceptors: List[Advice] = []
        for advisor in self.advisors:
            if isinstance(advisor, PointcutAdvisor):
                if advisor.pointcut.matches(method, self.target_type):
                    interceptors.append(advisor.advice)
            else:
                interceptors.append(advisor.advice)
        return interceptors
