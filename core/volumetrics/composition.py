# File: ethanol_gauging/core/volumetrics/composition.py
"""
Recovers alcohol content (INPM) from an observed density by inverting the
density model with a fixed-length bisection.
"""

import logging
import math

from .density_model import density_at

logger = logging.getLogger(__name__)

COMPOSITION_MIN_PCT = 0.0
COMPOSITION_MAX_PCT = 100.0
BISECTION_ITERATIONS = 60


def composition_from_density(density_kg_m3: float, temperature_c: float) -> float:
    """
    Alcohol content (% by mass) whose model density at `temperature_c` equals `density_kg_m3`.

    Density falls monotonically with alcohol content over [0, 100] at operating
    temperatures; the search relies on that and does not check it. Densities
    outside the curve do not bracket a root, so the lower bound walks up on
    every step and the result ends at 100 on both sides: lighter than pure
    ethanol and heavier than pure water alike.
    """
    if not (math.isfinite(density_kg_m3) and math.isfinite(temperature_c)):
        return math.nan

    lo, hi = COMPOSITION_MIN_PCT, COMPOSITION_MAX_PCT
    f_lo = density_at(temperature_c, lo) - density_kg_m3

    for _ in range(BISECTION_ITERATIONS):
        mid = (lo + hi) / 2.0
        f_mid = density_at(temperature_c, mid) - density_kg_m3
        if f_lo * f_mid <= 0:
            hi = mid
        else:
            lo = mid
            f_lo = f_mid

    composition = (lo + hi) / 2.0
    logger.debug(f"Inverted {density_kg_m3} kg/m³ @ {temperature_c}°C -> {composition:.4f} % INPM")
    return composition
