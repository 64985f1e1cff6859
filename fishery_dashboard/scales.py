"""Linear scales with inversion and d3-style "nice" domain rounding."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def tick_increment(start: float, stop: float, count: int = 10) -> float:
    """
    Tick step for [start, stop] with roughly `count` ticks.

    Positive results are the step itself; negative results are the
    inverse of the step (-10 means 0.1), which keeps sub-unit steps
    free of float error.
    """
    if count <= 0:
        return 0.0
    step = (stop - start) / count
    if not step > 0:
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power >= 0:
        return factor * 10 ** power
    return -(10 ** -power) / factor


def nice_domain(start: float, stop: float, count: int = 10) -> Tuple[float, float]:
    """Extend [start, stop] outward to round tick values."""
    prestep = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == prestep or step == 0:
            break
        if step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        else:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        prestep = step
    return start + 0.0, stop + 0.0


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) * (r1 - r0) / (d1 - d0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2
        return d0 + (pixel - r0) * (d1 - d0) / (r1 - r0)

    def nice(self, count: int = 10) -> "LinearScale":
        return LinearScale(nice_domain(*self.domain, count=count), self.range)
