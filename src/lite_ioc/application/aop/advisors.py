from lite_ioc.domain import Advice, Pointcut, PointcutAdvisor


class DefaultPointcutAdvisor(PointcutAdvisor):
    """Pairs a pointcut with the advice to apply to the methods it matches.

    Can be registered as an entity, with the pointcut and the advice passed as
    constructor references.
    """

    def __init__(self, pointcut: Pointcut, advice: Advice) -> None:
        self._pointcut = pointcut
        self._advice = advice

    @property
    def pointcut(self) -> Pointcut:
        return self._pointcut

    @property
    def advice(self) -> Advice:
        return self._advice

    def __repr__(self) -> str:
        return f"DefaultPointcutAdvisor(pointcut={self._pointcut!r}, advice={type(self._advice).__name__})"
