from fnmatch import fnmatchcase
from typing import Iterable, List, Optional, Type

from lite_ioc.domain import MethodDescriptor, Pointcut


class NameMatchPointcut(Pointcut):
    """Matches methods by name.

    Names may be exact (``"save"``) or shell-style patterns (``"find_*"``).
    When ``type_filter`` is given, only targets of that type (or a subtype) match.

    Example:
        >>> pointcut = NameMatchPointcut("save", "find_*")
        >>> pointcut.add_method_name("delete")
    """

    def __init__(self, *method_names: str, type_filter: Optional[Type] = None) -> None:
        self._method_names: List[str] = []
        self.type_filter = type_filter
        self.set_method_names(method_names)

    @property
    def method_names(self) -> List[str]:
        return list(self._method_names)

    @method_names.setter
    def method_names(self, names: List[str]) -> None:
        self.set_method_names(names)

    def add_method_name(self, method_name: str) -> None:
        if method_name not in self._method_names:
            self._method_names.append(method_name)

    def set_method_names(self, method_names: Iterable[str]) -> None:
        """Replace the matched names."""
        self._method_names = []
        for method_name in method_names:
            self.add_method_name(method_name)

    def matches(self, method: MethodDescriptor, target_type: Type) -> bool:
        if self.type_filter is not None and not issubclass(target_type, self.type_filter):
            return False
        return any(fnmatchcase(method.name, pattern) for pattern in self._method_names)

    def __repr__(self) -> str:
        return f"NameMatchPointcut({', '.join(repr(name) for name in self._method_names)})"
