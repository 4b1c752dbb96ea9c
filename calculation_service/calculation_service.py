# File: ethanol_gauging/calculation_service/calculation_service.py
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from core.models import ComplianceStatus, Measurement
from core.volumetrics import CorrectionGrid, CorrectionGridProvider, MeasurementCalculator, MeasurementResult
from utils.helpers import finite_or_none

logger = logging.getLogger(__name__)


@dataclass
class OperationSummary:
    """Totals for one loading/discharge operation."""
    total_volume_20c_l: float
    mean_composition_pct: float
    mean_density_20c_kg_m3: float
    measurement_count: int
    status_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_volume_20c_l": round(self.total_volume_20c_l, 3),
            "mean_composition_pct": finite_or_none(self.mean_composition_pct),
            "mean_density_20c_kg_m3": finite_or_none(self.mean_density_20c_kg_m3),
            "measurement_count": self.measurement_count,
            "status_counts": dict(self.status_counts),
        }


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else math.nan


def summarize_results(results: Iterable[MeasurementResult]) -> OperationSummary:
    """
    Aggregates results of one operation.

    V20 is summed over every finite result, bulk and empty included. Mean INPM
    and mean ρ@20 only cover measurements that were actually corrected, so
    empty and bulk compartments (reported as zeros) do not drag them down.
    """
    results = list(results)
    volumes = [r.volume_20c_l for r in results if math.isfinite(r.volume_20c_l)]
    corrected = [
        r for r in results
        if r.product_type is not None and r.product_type.is_regulated
        and math.isfinite(r.composition_pct) and r.density_20c_kg_m3 > 0
    ]
    return OperationSummary(
        total_volume_20c_l=sum(volumes),
        mean_composition_pct=_mean([r.composition_pct for r in corrected]),
        mean_density_20c_kg_m3=_mean([r.density_20c_kg_m3 for r in corrected]),
        measurement_count=len(results),
        status_counts=dict(Counter(r.status.value for r in results)),
    )


class CalculationService:
    """Recalculates a working set of measurements and totals the operation."""

    def __init__(self, grid: Optional[Union[CorrectionGrid, CorrectionGridProvider]] = None):
        self.calculator = MeasurementCalculator(grid)
        logger.info("Calculation Service initialized.")

    def run_batch(self, measurements: Iterable[Any]) -> Tuple[List[MeasurementResult], OperationSummary]:
        """
        Args:
            measurements: Measurement objects or dicts with Measurement fields

        Raises:
            pydantic.ValidationError: if a dict is not a valid measurement
        """
        parsed = [m if isinstance(m, Measurement) else Measurement(**m) for m in measurements]
        results = self.calculator.calculate_all(parsed)
        summary = summarize_results(results)

        pending = summary.status_counts.get(ComplianceStatus.PENDING.value, 0)
        out_of_range = summary.status_counts.get(ComplianceStatus.OUT_OF_RANGE.value, 0)
        logger.info(
            f"Batch of {summary.measurement_count} measurement(s): V20 total {summary.total_volume_20c_l:,.3f} L, "
            f"{out_of_range} out of range, {pending} pending."
        )
        if out_of_range:
            logger.warning(f"{out_of_range} measurement(s) outside the regulatory limits.")
        return results, summary
