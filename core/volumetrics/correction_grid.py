# File: ethanol_gauging/core/volumetrics/correction_grid.py
"""
Volume Correction Factor (FCV) grid for ethanol-water mixtures

Precomputes, over a (density @ 20°C, temperature) grid, the factor

    FCV(r20, T) = ρ(T, INPM(r20)) / r20

where INPM(r20) is the alcohol content whose density at 20°C is r20.
Multiplying an ambient volume at T by FCV gives its equivalent volume at 20°C.

The alcohol content is inverted once per density row and reused across the
whole temperature row, so a build costs one bisection per density node.
Lookups are bilinear and never extrapolate past the outer nodes.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .composition import composition_from_density
from .density_model import REFERENCE_TEMPERATURE_C, density_at

logger = logging.getLogger(__name__)

# Grid resolution, kept as published for the gauging tables.
DENSITY_AXIS_START = 730.0
DENSITY_AXIS_STOP = 860.0
TEMPERATURE_AXIS_START = 10.0
TEMPERATURE_AXIS_STOP = 40.0
AXIS_STEP = 0.5
FACTOR_DECIMALS = 4


def make_axis(start: float, stop: float, step: float) -> np.ndarray:
    """Inclusive arithmetic axis, rounded to one decimal so nodes compare exactly."""
    count = int(round((stop - start) / step)) + 1
    return np.round(start + step * np.arange(count), 1)


def _bracket(axis: np.ndarray, x: float) -> Tuple[int, int, float]:
    """
    Locate the pair of nodes around `x` and the fractional position between them.
    At or beyond either end the edge node is used twice with fraction 0.
    """
    last = len(axis) - 1
    if x <= axis[0]:
        return 0, 0, 0.0
    if x >= axis[last]:
        return last, last, 0.0
    upper = int(np.searchsorted(axis, x, side='right'))
    lower = upper - 1
    fraction = (x - axis[lower]) / (axis[upper] - axis[lower])
    return lower, upper, float(fraction)


@dataclass(frozen=True, eq=False)
class CorrectionGrid:
    """Immutable FCV table. Rows follow the density axis, columns the temperature axis."""
    density_axis: np.ndarray
    temperature_axis: np.ndarray
    factors: np.ndarray

    def __post_init__(self):
        for name in ("density_axis", "temperature_axis", "factors"):
            object.__setattr__(self, name, np.array(getattr(self, name), dtype=float))
        for name in ("density_axis", "temperature_axis"):
            axis = getattr(self, name)
            if axis.ndim != 1 or len(axis) < 1:
                raise ValueError(f"{name} must be a non-empty 1-D array")
            if np.any(np.diff(axis) <= 0):
                raise ValueError(f"{name} must be strictly increasing")
        if self.factors.shape != (len(self.density_axis), len(self.temperature_axis)):
            raise ValueError(
                f"factors shape {self.factors.shape} does not match axes "
                f"({len(self.density_axis)}, {len(self.temperature_axis)})"
            )
        for array in (self.density_axis, self.temperature_axis, self.factors):
            array.flags.writeable = False

    @classmethod
    def build(
        cls,
        density_axis: Optional[np.ndarray] = None,
        temperature_axis: Optional[np.ndarray] = None,
    ) -> "CorrectionGrid":
        """
        Compute a grid. Defaults to the standard 730-860 kg/m³ x 10-40 °C axes at 0.5 steps.

        Args:
            density_axis: Strictly increasing densities at 20°C (kg/m³)
            temperature_axis: Strictly increasing temperatures (°C)
        """
        if density_axis is None:
            density_axis = make_axis(DENSITY_AXIS_START, DENSITY_AXIS_STOP, AXIS_STEP)
        if temperature_axis is None:
            temperature_axis = make_axis(TEMPERATURE_AXIS_START, TEMPERATURE_AXIS_STOP, AXIS_STEP)
        density_axis = np.array(density_axis, dtype=float)
        temperature_axis = np.array(temperature_axis, dtype=float)

        started = time.perf_counter()
        factors = np.empty((len(density_axis), len(temperature_axis)), dtype=float)
        for i, r20 in enumerate(density_axis):
            composition = composition_from_density(float(r20), REFERENCE_TEMPERATURE_C)
            for j, temperature_c in enumerate(temperature_axis):
                factors[i, j] = density_at(float(temperature_c), composition) / r20
        factors = np.round(factors, FACTOR_DECIMALS)

        logger.info(
            f"FCV grid built: {len(density_axis)} x {len(temperature_axis)} nodes "
            f"in {time.perf_counter() - started:.3f}s"
        )
        return cls(density_axis=density_axis, temperature_axis=temperature_axis, factors=factors)

    def factor(self, density_20c: float, temperature_c: float) -> float:
        """Bilinear FCV lookup. Inputs outside the grid are pinned to its edges; NaN in, NaN out."""
        if not (math.isfinite(density_20c) and math.isfinite(temperature_c)):
            return math.nan

        i0, i1, fx = _bracket(self.density_axis, density_20c)
        j0, j1, fy = _bracket(self.temperature_axis, temperature_c)

        f00 = self.factors[i0, j0]
        f01 = self.factors[i0, j1]
        f10 = self.factors[i1, j0]
        f11 = self.factors[i1, j1]

        a = f00 + (f01 - f00) * fy
        b = f10 + (f11 - f10) * fy
        return float(a + (b - a) * fx)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.factors.shape


class CorrectionGridProvider:
    """
    Owns one CorrectionGrid and builds it on first use.

    The build runs at most once per provider even when several threads ask for
    the grid at the same time; later calls return the same object.
    """

    def __init__(self, density_axis: Optional[np.ndarray] = None, temperature_axis: Optional[np.ndarray] = None):
        self._density_axis = density_axis
        self._temperature_axis = temperature_axis
        self._grid: Optional[CorrectionGrid] = None
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self._grid is not None

    def get(self) -> CorrectionGrid:
        grid = self._grid
        if grid is not None:
            return grid
        with self._lock:
            if self._grid is None:
                logger.info("Building FCV correction grid...")
                self._grid = CorrectionGrid.build(self._density_axis, self._temperature_axis)
            return self._grid

    def factor(self, density_20c: float, temperature_c: float) -> float:
        return self.get().factor(density_20c, temperature_c)


_default_provider = CorrectionGridProvider()


def default_grid_provider() -> CorrectionGridProvider:
    """Process-wide provider shared by calculators that are not given their own grid."""
    return _default_provider
