"""Application layer - Literal value coercion."""

import inspect
import types
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Union, get_args, get_origin

from lite_ioc.domain import TypeConversionError

_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})
_UNION_TYPES = (Union, types.UnionType)


def _parse_bool(value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError("valid values are true/false, yes/no, 1/0, on/off")


def _parse_decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError("not a decimal number") from e


class TypeConverter:
    """Coerces literal values to declared parameter and property types.

    Strings are parsed into the scalar types listed in ``_parsers``, enums
    (by member name, then by value) and paths. String targets always receive
    the trimmed value. Other values that already match the target type pass
    through untouched, and integers are promoted to ``float`` or ``complex``
    where those are declared.
    """

    _parsers: Dict[type, Callable[[str], Any]] = {
        int: int,
        float: float,
        complex: complex,
        bool: _parse_bool,
        Decimal: _parse_decimal,
        Path: Path,
        bytes: str.encode,
    }

    def convert(self, value: Any, target_type: Any) -> Any:
        """Convert ``value`` to ``target_type`` if necessary.

        Args:
            value: The literal value.
            target_type: The declared type, or ``None``/``Any`` when unknown.

        Returns:
            The converted value.

        Raises:
            TypeConversionError: If a string cannot be parsed into the target type.

        Example:
            >>> TypeConverter().convert("8080", int)
            8080
            >>> TypeConverter().convert("yes", bool)
            True
        """
        if target_type is None or target_type is Any or target_type is inspect.Parameter.empty:
            return value

        if get_origin(target_type) in _UNION_TYPES:
            return self._convert_union(value, target_type)

        if value is None:
            return None

        concrete_type = get_origin(target_type) or target_type
        if not isinstance(concrete_type, type):
            return value

        if concrete_type is str and isinstance(value, str):
            return self._convert_string(value, str)

        try:
            if isinstance(value, concrete_type):
                return value
        except TypeError:
            # Protocols without runtime checks cannot be verified
            return value

        if isinstance(value, str):
            return self._convert_string(value, concrete_type)

        if isinstance(value, int) and not isinstance(value, bool) and concrete_type in (float, complex):
            return concrete_type(value)

        # Non-string values of another type are left for the caller to accept or reject
        return value

    def can_convert(self, value: Any, target_type: Any) -> bool:
        """Check whether ``convert`` would succeed for ``value``."""
        try:
            self.convert(value, target_type)
        except TypeConversionError:
            return False
        return True

    def _convert_union(self, value: Any, target_type: Any) -> Any:
        members = get_args(target_type)
        if value is None:
            if type(None) in members:
                return None
            raise TypeConversionError(value, target_type, "None is not allowed")

        concrete_members = [member for member in members if member is not type(None)]
        for member in concrete_members:
            concrete = get_origin(member) or member
            if isinstance(concrete, type) and isinstance(value, concrete):
                return self.convert(value, member)

        last_error = None
        for member in concrete_members:
            try:
                return self.convert(value, member)
            except TypeConversionError as e:
                last_error = e
        raise TypeConversionError(value, target_type, str(last_error) if last_error else None)

    def _convert_string(self, value: str, target_type: type) -> Any:
        stripped = value.strip()
        if target_type is str:
            return stripped
        if not stripped:
            return None

        if issubclass(target_type, Enum):
            return self._convert_enum(stripped, target_type)

        parser = self._parsers.get(target_type)
        if parser is None:
            raise TypeConversionError(value, target_type, "unsupported target type")
        try:
            return parser(stripped)
        except (ValueError, TypeError) as e:
            raise TypeConversionError(value, target_type, str(e)) from e

    def _convert_enum(self, value: str, target_type: type) -> Any:
        if value in target_type.__members__:
            return target_type[value]
        try:
            return target_type(value)
        except ValueError as e:
            raise TypeConversionError(value, target_type, "no matching enum member") from e
