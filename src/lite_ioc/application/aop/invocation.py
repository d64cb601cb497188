from typing import Any, Dict, List, Optional, Tuple

from lite_ioc.domain import (
    Advice,
    AfterReturningAdvice,
    MethodBeforeAdvice,
    MethodDescriptor,
    MethodInterceptor,
    MethodInvocation,
)


class ReflectiveMethodInvocation(MethodInvocation):
    """Walks one method call through its interceptor chain.

    Each call to :meth:`proceed` advances a cursor to the next advice; once
    the chain is exhausted the method is invoked on the target. Around advice
    decides itself whether to proceed, before advice always proceeds after
    running, and after-returning advice proceeds first and observes the value
    on the way back. Exceptions unwind through the pending advices untouched.

    Attributes:
        _target: The object the method is finally invoked on.
        _method: The invoked method.
        _arguments: Positional arguments.
        _keyword_arguments: Keyword arguments.
        _interceptors: Advices matching this call, in application order.
        _current_index: Cursor into the chain, ``-1`` before the first advice.
    """

    def __init__(
        self,
        target: Any,
        method: MethodDescriptor,
        arguments: Tuple[Any, ...],
        keyword_arguments: Optional[Dict[str, Any]],
        interceptors: List[Advice],
    ) -> None:
        self._target = target
        self._method = method
        self._arguments = tuple(arguments)
        self._keyword_arguments = dict(keyword_arguments or {})
        self._interceptors = interceptors
        self._current_index = -1

    @property
    def method(self) -> MethodDescriptor:
        return self._method

    @property
    def arguments(self) -> Tuple[Any, ...]:
        return self._arguments

    @property
    def keyword_arguments(self) -> Dict[str, Any]:
        return self._keyword_arguments

    @property
    def target(self) -> Any:
        return self._target

    def proceed(self) -> Any:
        if self._current_index == len(self._interceptors) - 1:
            return self.invoke_joinpoint()

        self._current_index += 1
        advice = self._interceptors[self._current_index]

        if isinstance(advice, MethodInterceptor):
            return advice.invoke(self)

        if isinstance(advice, MethodBeforeAdvice):
            advice.before(self._method, self._arguments, self._target)
            return self.proceed()

        if isinstance(advice, AfterReturningAdvice):
            return_value = self.proceed()
            advice.after_returning(return_value, self._method, self._arguments, self._target)
            return return_value

        # Unknown advice kinds are skipped
        return self.proceed()

    def invoke_joinpoint(self) -> Any:
        """Invoke the method on the target, bypassing any remaining advice."""
        return getattr(self._target, self._method.name)(*self._arguments, **self._keyword_arguments)
