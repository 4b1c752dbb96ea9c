# File: ethanol_gauging/core/volumetrics/measurement_calculator.py
"""
Measurement Calculator for Fuel Ethanol

Turns a field measurement into its volume at 20°C and a compliance verdict:
- Alcohol content (INPM) from observed density and sample temperature
- Corrected density at 20°C
- Volume Correction Factor (FCV) from the correction grid
- Standardized volume V20 = ambient volume × FCV
- Check against the regulatory limits for the product grade

Nothing here raises for bad or missing data. Incomplete measurements come back
"pending" with NaN numbers; out-of-spec product comes back "out-of-range" with
one message per violated limit.

References:
- ABNT NBR 5992 (Álcool etílico e suas misturas com água - Tabelas de conversão)
- ANP fuel ethanol specification
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from core.models import ComplianceStatus, Measurement, ProductType
from utils.helpers import finite_or_none, format_number

from .composition import composition_from_density
from .correction_grid import CorrectionGrid, CorrectionGridProvider, default_grid_provider
from .density_model import REFERENCE_TEMPERATURE_C, density_at
from .regulatory import spec_for

logger = logging.getLogger(__name__)

BULK_MESSAGE = "Bulk product - NBR 5992 volume correction does not apply."


@dataclass
class MeasurementResult:
    """Result of correcting one measurement to 20°C."""
    density_20c_kg_m3: float
    correction_factor: float
    composition_pct: float
    volume_20c_l: float
    status: ComplianceStatus
    messages: List[str] = field(default_factory=list)
    product_type: Optional[ProductType] = None
    measurement_id: Optional[Union[int, str]] = None

    @classmethod
    def pending(cls, product_type: Optional[ProductType] = None,
                measurement_id: Optional[Union[int, str]] = None) -> "MeasurementResult":
        return cls(
            density_20c_kg_m3=math.nan,
            correction_factor=math.nan,
            composition_pct=math.nan,
            volume_20c_l=math.nan,
            status=ComplianceStatus.PENDING,
            product_type=product_type,
            measurement_id=measurement_id,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is ComplianceStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "measurement_id": self.measurement_id,
            "product_type": self.product_type.value if self.product_type else None,
            "density_20c_kg_m3": finite_or_none(self.density_20c_kg_m3),
            "correction_factor": finite_or_none(self.correction_factor),
            "composition_pct": finite_or_none(self.composition_pct),
            "volume_20c_l": finite_or_none(self.volume_20c_l),
            "status": self.status.value,
            "messages": list(self.messages),
        }

    def formatted(self) -> dict:
        """Display strings with a decimal comma, at the precision used on gauging reports."""
        return {
            "density_20c_kg_m3": format_number(self.density_20c_kg_m3, 2),
            "correction_factor": format_number(self.correction_factor, 4),
            "composition_pct": format_number(self.composition_pct, 2),
            "volume_20c_l": format_number(self.volume_20c_l, 3),
        }


class MeasurementCalculator:
    """
    Corrects measurements to 20°C using a correction grid.

    Usage:
        calc = MeasurementCalculator()
        result = calc.calculate(Measurement(
            product_type="hydrated",
            ambient_volume_l=10000,
            observed_density_kg_m3=805.0,
            sample_temperature_c=25.0,
        ))
    """

    def __init__(self, grid: Optional[Union[CorrectionGrid, CorrectionGridProvider]] = None):
        """
        Args:
            grid: A built grid, or a provider that builds one on first use.
                  Defaults to the process-wide provider.
        """
        self._grid_source = grid if grid is not None else default_grid_provider()

    @property
    def grid(self) -> CorrectionGrid:
        if isinstance(self._grid_source, CorrectionGridProvider):
            return self._grid_source.get()
        return self._grid_source

    def calculate(self, measurement: Measurement) -> MeasurementResult:
        product = measurement.product_type
        measurement_id = measurement.measurement_id

        if product is ProductType.BULK:
            volume = measurement.ambient_volume_l
            return MeasurementResult(
                density_20c_kg_m3=0.0,
                correction_factor=1.0,
                composition_pct=0.0,
                volume_20c_l=volume if math.isfinite(volume) else 0.0,
                status=ComplianceStatus.COMPLIANT,
                messages=[BULK_MESSAGE],
                product_type=product,
                measurement_id=measurement_id,
            )

        if measurement.is_empty or measurement.ambient_volume_l == 0:
            return MeasurementResult(
                density_20c_kg_m3=0.0,
                correction_factor=1.0,
                composition_pct=0.0,
                volume_20c_l=0.0,
                status=ComplianceStatus.COMPLIANT,
                product_type=product,
                measurement_id=measurement_id,
            )

        required = (
            measurement.ambient_volume_l,
            measurement.observed_density_kg_m3,
            measurement.sample_temperature_c,
        )
        if not all(math.isfinite(v) for v in required):
            logger.debug(f"Measurement {measurement_id}: volume, density or sample temperature missing. Pending.")
            return MeasurementResult.pending(product, measurement_id)

        composition = composition_from_density(measurement.observed_density_kg_m3, measurement.sample_temperature_c)
        density_20c = density_at(REFERENCE_TEMPERATURE_C, composition)
        fcv = self.grid.factor(density_20c, measurement.correction_temperature_c)
        volume_20c = measurement.ambient_volume_l * fcv

        messages = self._check_limits(product, density_20c, composition)
        status = ComplianceStatus.OUT_OF_RANGE if messages else ComplianceStatus.COMPLIANT

        logger.debug(
            f"Measurement {measurement_id}: {measurement.ambient_volume_l:,.3f} L × FCV {fcv:.4f} "
            f"= {volume_20c:,.3f} L @ 20°C (ρ@20 {density_20c:.2f}, INPM {composition:.2f}) - {status.value}"
        )
        if messages:
            logger.info(f"Measurement {measurement_id} out of specification: {'; '.join(messages)}")

        return MeasurementResult(
            density_20c_kg_m3=density_20c,
            correction_factor=fcv,
            composition_pct=composition,
            volume_20c_l=volume_20c,
            status=status,
            messages=messages,
            product_type=product,
            measurement_id=measurement_id,
        )

    def calculate_all(self, measurements: Iterable[Measurement]) -> List[MeasurementResult]:
        """Recalculates every measurement. Each result depends only on its own measurement."""
        return [self.calculate(m) for m in measurements]

    @staticmethod
    def _check_limits(product: ProductType, density_20c: float, composition: float) -> List[str]:
        spec = spec_for(product)
        if spec is None:
            return []
        messages = []
        if math.isfinite(composition) and not spec.composition_pct.contains(composition):
            messages.append(f"INPM {composition:.2f} outside limit {spec.composition_pct}")
        if math.isfinite(density_20c) and not spec.density_20c_kg_m3.contains(density_20c):
            messages.append(f"ρ@20 {density_20c:.2f} outside limit {spec.density_20c_kg_m3}")
        return messages
