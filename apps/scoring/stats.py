"""Descriptive statistics over score populations.

Both the quiz statistics and the gradebook column statistics use the same
numeric method:

* the median is the element at index ``n // 2`` of the sorted values, so for
  an even population it is the upper-middle element rather than the average
  of the two middle elements;
* the standard deviation is the population one (squared deviations divided by
  ``n``).

An empty population has no summary: :func:`summarize` returns ``None``.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Iterable

__all__ = ["NumericSummary", "summarize"]


@dataclass(frozen=True)
class NumericSummary:
    count: int
    mean: float
    median: float
    min: float
    max: float
    std_deviation: float

    def as_dict(self) -> dict:
        return asdict(self)


def summarize(values: Iterable[float]) -> NumericSummary | None:
    population = [float(value) for value in values]
    if not population:
        return None

    count = len(population)
    mean = sum(population) / count
    ordered = sorted(population)
    variance = sum((value - mean) ** 2 for value in population) / count

    return NumericSummary(
        count=count,
        mean=mean,
        median=ordered[count // 2],
        min=ordered[0],
        max=ordered[-1],
        std_deviation=math.sqrt(variance),
    )
