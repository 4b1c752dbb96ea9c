# File: ethanol_gauging/core/volumetrics/density_model.py
"""
Density model for ethanol-water mixtures.

Empirical polynomial giving the density of an ethanol-water mixture as a
function of temperature and alcohol content (INPM, % by mass). It is the only
physical model in the engine; the inverter, the correction grid and the
measurement calculator are all built on top of it.

References:
- ABNT NBR 5992 (Álcool etílico e suas misturas com água - Tabelas de conversão)
- Bettin & Spieweck, PTB-Mitteilungen 100 (1990), density of ethanol-water mixtures
"""

from typing import Sequence

REFERENCE_TEMPERATURE_C = 20.0

# Regression coefficients. A is the pure composition polynomial at 20°C, B the
# temperature-only correction, C1..C5 the composition polynomials scaled by
# (T-20)^1 .. (T-20)^5.
COEF_A = (
    913.76673, -221.75948, -59.61786, 146.82019, -566.5175, 621.18006,
    3782.4439, -9745.3133, -9573.4653, 32677.808, 8763.7383, -39026.437,
)
COEF_B = (
    -0.7943755, -0.0012168407, 3.5017833e-06, 1.770944e-07, -3.4138828e-09, -9.9880242e-11,
)
COEF_C = (
    (-0.39158709, 1.1518337, -5.0416999, 13.381608, 4.5899913, -118.21,
     190.5402, 339.81954, -900.32344, -349.32012, 1285.9318),
    (-1.2083196e-4, -5.7466248e-3, 0.12030894, -0.23519694, -1.0362738,
     2.1804505, 4.2763108, -6.8624848, -6.9384031, 7.4460428),
    (-3.8683211e-05, -0.00020911429, 0.0026713888, 0.0041042045, -0.049364385,
     -0.017952946, 0.29012506, 0.023001712, -0.54150139),
    (-5.6024906e-07, -1.2649169e-06, 3.486395e-06, -1.5168726e-06),
    (-1.4441741e-08, 1.3470542e-08),
)


def _power_series(coefficients: Sequence[float], x: float) -> float:
    """Sum of c[i] * x**(i+1); the series starts at the first power."""
    total = 0.0
    power = x
    for c in coefficients:
        total += c * power
        power *= x
    return total


def density_at(temperature_c: float, composition_pct: float) -> float:
    """
    Density (kg/m³) of the mixture at a temperature for a given alcohol content.

    Args:
        temperature_c: Liquid temperature in °C
        composition_pct: Alcohol content in % by mass (INPM), 0 to 100

    Returns:
        Density in kg/m³. Non-finite inputs give a non-finite result.
    """
    dt = temperature_c - REFERENCE_TEMPERATURE_C
    y = composition_pct / 100.0 - 0.5

    rho = COEF_A[0] + _power_series(COEF_A[1:], y)
    rho += _power_series(COEF_B, dt)

    dt_power = dt
    for coefficients in COEF_C:
        rho += _power_series(coefficients, y) * dt_power
        dt_power *= dt

    return rho
