"""Polynomial value object and critical-point scan."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
import numpy.typing as npt

from ...exceptions import InvalidDomainError


class CriticalPointKind(str, Enum):
    """Classification of a sampled critical point."""
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    SADDLE = "saddle"


@dataclass(frozen=True, slots=True)
class CriticalPoint:
    """A location where the derivative vanishes or changes sign."""
    kind: CriticalPointKind
    location: float


@dataclass(frozen=True, slots=True)
class Polynomial:
    """Polynomial f(x) = sum(c_i * x**i) with coefficients c0..cd."""
    coefficients: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.coefficients:
            object.__setattr__(self, "coefficients", (0.0,))
        else:
            object.__setattr__(
                self, "coefficients", tuple(float(c) for c in self.coefficients)
            )

    @property
    def degree(self) -> int:
        return len(self.coefficients) - 1

    @property
    def is_zero(self) -> bool:
        return all(c == 0.0 for c in self.coefficients)

    def __call__(self, x: float | npt.ArrayLike) -> float | np.ndarray:
        """Evaluate by direct power summation."""
        if np.ndim(x) == 0:
            return sum(c * float(x) ** i for i, c in enumerate(self.coefficients))
        xs = np.asarray(x, dtype=np.float64)
        result = np.zeros_like(xs)
        for i, c in enumerate(self.coefficients):
            result += c * xs ** i
        return result

    def derivative(self) -> Polynomial:
        """Closed-form derivative; a constant differentiates to zero."""
        if self.degree == 0:
            return Polynomial((0.0,))
        return Polynomial(tuple(
            i * c for i, c in enumerate(self.coefficients) if i > 0
        ))

    def find_critical_points(
        self,
        a: float,
        b: float,
        step: float
    ) -> list[CriticalPoint]:
        """Scan the derivative on [a, b) for sign changes.

        The derivative is sampled at a, a + step, a + 2*step, ... < b.
        A negative -> positive change reports a MINIMUM at the later sample,
        positive -> negative a MAXIMUM. Samples where the derivative is
        exactly zero carry no sign: a change of sign across a run of zeros
        is reported at the first zero sample, and a run of zeros with the
        same sign on both sides is reported as a SADDLE. Zeros touching
        either end of the domain are not reported.

        Args:
            a: Inclusive lower bound
            b: Exclusive upper bound
            step: Sampling step

        Returns:
            Critical points in increasing x order

        Raises:
            InvalidDomainError: If a >= b, step <= 0 or a bound is not finite
        """
        if not (math.isfinite(a) and math.isfinite(b) and math.isfinite(step)):
            raise InvalidDomainError(
                f"scan bounds must be finite (a={a}, b={b}, step={step})"
            )
        if a >= b:
            raise InvalidDomainError(f"empty scan domain: a={a} >= b={b}")
        if step <= 0:
            raise InvalidDomainError(f"scan step must be positive, got {step}")

        slope = self.derivative()
        points: list[CriticalPoint] = []

        prev_sign = _sign(slope(a))
        zero_start: float | None = None
        i = 1
        x = a + step
        while x < b:
            sign = _sign(slope(x))
            if sign == 0:
                if zero_start is None:
                    zero_start = x
            elif prev_sign == 0:
                # leading zeros at the domain start have no left-hand sign
                prev_sign = sign
                zero_start = None
            else:
                where = zero_start if zero_start is not None else x
                if prev_sign < 0 < sign:
                    points.append(CriticalPoint(CriticalPointKind.MINIMUM, where))
                elif prev_sign > 0 > sign:
                    points.append(CriticalPoint(CriticalPointKind.MAXIMUM, where))
                elif zero_start is not None:
                    points.append(CriticalPoint(CriticalPointKind.SADDLE, where))
                prev_sign = sign
                zero_start = None
            i += 1
            x = a + i * step

        return points


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0
