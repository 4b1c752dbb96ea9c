# File: ethanol_gauging/core/volumetrics/__init__.py
"""
Volumetric correction engine for fuel ethanol

- Density Model: density of ethanol-water mixtures vs temperature and INPM
- Composition: INPM recovered from an observed density by bisection
- Correction Grid: precomputed FCV table with bilinear lookup
- Measurement Calculator: V20 and compliance verdict per measurement
"""

from .density_model import density_at, REFERENCE_TEMPERATURE_C
from .composition import composition_from_density
from .correction_grid import CorrectionGrid, CorrectionGridProvider, default_grid_provider
from .regulatory import Limit, RegulatorySpec, REGULATORY_SPECS, spec_for
from .measurement_calculator import MeasurementCalculator, MeasurementResult

__all__ = [
    # Density model
    'density_at',
    'REFERENCE_TEMPERATURE_C',
    'composition_from_density',
    # Correction grid
    'CorrectionGrid',
    'CorrectionGridProvider',
    'default_grid_provider',
    # Regulatory limits
    'Limit',
    'RegulatorySpec',
    'REGULATORY_SPECS',
    'spec_for',
    # Calculator
    'MeasurementCalculator',
    'MeasurementResult',
]
