"""Summary statistics produced by numeric streams."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

Number = Union[int, float]


class SummaryStatistics(BaseModel):
    """Count, sum, min and max of a numeric stream, gathered in one pass."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(default=0, ge=0, description="Number of elements seen")
    sum: Number = Field(default=0, description="Sum of all elements")
    min: Optional[Number] = Field(default=None, description="Smallest element")
    max: Optional[Number] = Field(default=None, description="Largest element")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average(self) -> Optional[float]:
        if self.count == 0:
            return None
        return self.sum / self.count

    @classmethod
    def of(cls, values: Iterable[Number], start: Number = 0) -> "SummaryStatistics":
        """Gather statistics over *values*; *start* is the sum of nothing (use 0.0 for floats)."""
        count = 0
        total: Number = start
        low: Optional[Number] = None
        high: Optional[Number] = None
        for value in values:
            count += 1
            total += value
            if low is None or value < low:
                low = value
            if high is None or value > high:
                high = value
        return cls(count=count, sum=total, min=low, max=high)
