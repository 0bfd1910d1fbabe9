"""Element kinds carried by a stream."""

from __future__ import annotations

import operator
from enum import Enum
from typing import Any

_INT_MIN, _INT_MAX = -(2**31), 2**31 - 1
_LONG_MIN, _LONG_MAX = -(2**63), 2**63 - 1


class ElementKind(Enum):
    """Tag describing what a stream yields.

    ``GENERIC`` streams carry arbitrary objects.  The numeric kinds mirror the
    classic primitive specialisations: ``INT`` is a signed 32-bit integer,
    ``LONG`` a signed 64-bit integer and ``FLOAT`` a double-precision float.
    """

    GENERIC = "generic"
    INT = "int"
    LONG = "long"
    FLOAT = "float"

    @property
    def is_numeric(self) -> bool:
        return self is not ElementKind.GENERIC

    def coerce(self, value: Any) -> Any:
        """Convert *value* to this kind, raising on values that do not fit."""
        if self is ElementKind.GENERIC:
            return value
        if self is ElementKind.FLOAT:
            return float(value)
        number = operator.index(value)
        low, high = (_INT_MIN, _INT_MAX) if self is ElementKind.INT else (_LONG_MIN, _LONG_MAX)
        if not low <= number <= high:
            raise OverflowError(f"{number} does not fit in a {self.value} stream")
        return number

    def can_widen_to(self, other: "ElementKind") -> bool:
        """True when every value of this kind is representable in *other*."""
        order = _WIDENING.get(self)
        target = _WIDENING.get(other)
        return order is not None and target is not None and order <= target


_WIDENING = {ElementKind.INT: 0, ElementKind.LONG: 1, ElementKind.FLOAT: 2}
