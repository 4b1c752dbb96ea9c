"""
Measurement calculator tests: full pipeline, pass-through grades and the
pending/out-of-range verdicts.
"""

import math

import numpy as np
import pytest
from pydantic import ValidationError

from core.models import ComplianceStatus, Measurement, ProductType
from core.volumetrics import CorrectionGrid, MeasurementCalculator, REGULATORY_SPECS
from core.volumetrics.measurement_calculator import BULK_MESSAGE


def _measurement(**overrides):
    fields = dict(
        product_type="hydrated",
        ambient_volume_l=10000.0,
        observed_density_kg_m3=805.0,
        sample_temperature_c=25.0,
    )
    fields.update(overrides)
    return Measurement(**fields)


class TestHydratedScenario:
    """10 000 L of hydrated ethanol at 805.0 kg/m³ and 25 °C."""

    def test_is_compliant(self, calculator):
        result = calculator.calculate(_measurement())
        assert result.status is ComplianceStatus.COMPLIANT
        assert result.messages == []

    def test_values_inside_hydrated_limits(self, calculator):
        result = calculator.calculate(_measurement())
        spec = REGULATORY_SPECS[ProductType.HYDRATED]
        assert spec.density_20c_kg_m3.contains(result.density_20c_kg_m3)
        assert spec.composition_pct.contains(result.composition_pct)

    def test_warm_volume_shrinks_at_20c(self, calculator):
        result = calculator.calculate(_measurement())
        assert result.correction_factor < 1.0
        assert 9900.0 < result.volume_20c_l < 10000.0
        assert result.volume_20c_l == pytest.approx(10000.0 * result.correction_factor)

    def test_corrected_density_above_observed(self, calculator):
        result = calculator.calculate(_measurement())
        assert result.density_20c_kg_m3 > 805.0


class TestAnhydrousOutOfRange:
    """Same liquid declared as anhydrous ethanol."""

    def test_is_out_of_range(self, calculator):
        result = calculator.calculate(_measurement(product_type="anhydrous"))
        assert result.status is ComplianceStatus.OUT_OF_RANGE
        assert result.composition_pct < 99.3

    def test_names_each_violation(self, calculator):
        result = calculator.calculate(_measurement(product_type="anhydrous"))
        assert len(result.messages) == 2
        assert result.messages[0].startswith("INPM")
        assert result.messages[1].startswith("ρ@20")

    def test_numbers_still_computed(self, calculator):
        result = calculator.calculate(_measurement(product_type="anhydrous"))
        assert math.isfinite(result.volume_20c_l)
        assert math.isfinite(result.correction_factor)


class TestPassThroughAndEmpty:
    """Bulk product and empty compartments skip the physical correction."""

    def test_bulk_keeps_volume(self, calculator):
        result = calculator.calculate(Measurement(product_type="bulk", ambient_volume_l=500))
        assert result.volume_20c_l == 500.0
        assert result.correction_factor == 1.0
        assert result.status is ComplianceStatus.COMPLIANT
        assert result.messages == [BULK_MESSAGE]

    def test_bulk_ignores_density_and_temperature(self, calculator):
        result = calculator.calculate(Measurement(
            product_type="bulk", ambient_volume_l=500,
            observed_density_kg_m3=1200.0, sample_temperature_c=90.0,
        ))
        assert result.volume_20c_l == 500.0
        assert result.status is ComplianceStatus.COMPLIANT

    def test_bulk_without_volume_reports_zero(self, calculator):
        result = calculator.calculate(Measurement(product_type="bulk"))
        assert result.volume_20c_l == 0.0

    def test_empty_flag(self, calculator):
        result = calculator.calculate(_measurement(is_empty=True, observed_density_kg_m3=None))
        assert result.volume_20c_l == 0.0
        assert result.density_20c_kg_m3 == 0.0
        assert result.status is ComplianceStatus.COMPLIANT
        assert result.messages == []

    def test_zero_volume_is_empty(self, calculator):
        result = calculator.calculate(_measurement(ambient_volume_l=0, product_type="anhydrous"))
        assert result.volume_20c_l == 0.0
        assert result.status is ComplianceStatus.COMPLIANT
        assert result.messages == []


class TestPending:
    """Incomplete measurements are pending, with every number NaN."""

    @pytest.mark.parametrize("missing", ["ambient_volume_l", "observed_density_kg_m3", "sample_temperature_c"])
    def test_missing_required_field(self, calculator, missing):
        result = calculator.calculate(_measurement(**{missing: None}))
        assert result.status is ComplianceStatus.PENDING
        assert result.is_pending
        assert result.messages == []
        for value in (result.density_20c_kg_m3, result.correction_factor,
                      result.composition_pct, result.volume_20c_l):
            assert math.isnan(value)

    def test_unreadable_text_is_missing(self, calculator):
        result = calculator.calculate(_measurement(observed_density_kg_m3="n/a"))
        assert result.is_pending

    def test_pending_serializes_as_null(self, calculator):
        data = calculator.calculate(_measurement(sample_temperature_c="")).to_dict()
        assert data["status"] == "pending"
        assert data["volume_20c_l"] is None
        assert data["correction_factor"] is None


class TestOutOfDomainDensity:
    """Densities off the ethanol-water curve invert to 100 % INPM and are judged on that."""

    @pytest.mark.parametrize("observed", [1100.0, 700.0])
    def test_reads_as_pure_ethanol(self, calculator, observed):
        result = calculator.calculate(_measurement(observed_density_kg_m3=observed, product_type="anhydrous"))
        assert result.composition_pct == pytest.approx(100.0, abs=1e-6)
        assert result.density_20c_kg_m3 == pytest.approx(789.24, abs=0.1)

    def test_heavy_liquid_passes_anhydrous_limits(self, calculator):
        result = calculator.calculate(_measurement(observed_density_kg_m3=1100.0, product_type="anhydrous"))
        assert result.status is ComplianceStatus.COMPLIANT
        assert result.messages == []
        assert math.isfinite(result.volume_20c_l)

    def test_heavy_liquid_fails_hydrated_limits(self, calculator):
        result = calculator.calculate(_measurement(observed_density_kg_m3=1100.0))
        assert result.status is ComplianceStatus.OUT_OF_RANGE
        assert len(result.messages) == 2


class TestCorrectionTemperature:
    """The tank temperature is preferred for the FCV lookup."""

    def test_uses_tank_temperature(self, calculator, grid):
        result = calculator.calculate(_measurement(tank_temperature_c=30.0))
        assert result.correction_factor == pytest.approx(grid.factor(result.density_20c_kg_m3, 30.0))

    def test_falls_back_to_sample_temperature(self, calculator, grid):
        result = calculator.calculate(_measurement(tank_temperature_c=None))
        assert result.correction_factor == pytest.approx(grid.factor(result.density_20c_kg_m3, 25.0))

    def test_tank_temperature_does_not_change_composition(self, calculator):
        with_tank = calculator.calculate(_measurement(tank_temperature_c=30.0))
        without_tank = calculator.calculate(_measurement())
        assert with_tank.composition_pct == without_tank.composition_pct
        assert with_tank.volume_20c_l < without_tank.volume_20c_l


class TestInputs:
    """Form values, legacy codes and an injected grid."""

    def test_decimal_comma_text(self, calculator):
        from_text = calculator.calculate(_measurement(
            ambient_volume_l="10.000,0", observed_density_kg_m3="805,0", sample_temperature_c="25",
        ))
        from_numbers = calculator.calculate(_measurement())
        assert from_text.volume_20c_l == from_numbers.volume_20c_l

    def test_dot_grouped_volume_is_thousands(self, calculator):
        from_text = calculator.calculate(_measurement(ambient_volume_l="10.000", observed_density_kg_m3="805,0"))
        assert from_text.status is ComplianceStatus.COMPLIANT
        assert from_text.volume_20c_l == calculator.calculate(_measurement()).volume_20c_l
        assert 9900.0 < from_text.volume_20c_l < 10000.0

    def test_legacy_product_codes(self):
        assert _measurement(product_type="hidratado").product_type is ProductType.HYDRATED
        assert _measurement(product_type="ANIDRO").product_type is ProductType.ANHYDROUS
        assert _measurement(product_type="granel").product_type is ProductType.BULK

    def test_unknown_product_rejected(self):
        with pytest.raises(ValidationError):
            _measurement(product_type="diesel")

    def test_injected_grid(self):
        constant = CorrectionGrid(
            density_axis=np.array([700.0, 900.0]),
            temperature_axis=np.array([0.0, 50.0]),
            factors=np.full((2, 2), 0.5),
        )
        result = MeasurementCalculator(constant).calculate(_measurement())
        assert result.correction_factor == 0.5
        assert result.volume_20c_l == 5000.0

    def test_calculate_all_matches_single_calls(self, calculator):
        batch = [_measurement(), _measurement(product_type="bulk"), _measurement(is_empty=True)]
        results = calculator.calculate_all(batch)
        assert [r.to_dict() for r in results] == [calculator.calculate(m).to_dict() for m in batch]


class TestFormatting:
    """Display strings use a decimal comma."""

    def test_bulk_formatted(self, calculator):
        formatted = calculator.calculate(Measurement(product_type="bulk", ambient_volume_l=500)).formatted()
        assert formatted["correction_factor"] == "1,0000"
        assert formatted["volume_20c_l"] == "500,000"

    def test_pending_formatted(self, calculator):
        formatted = calculator.calculate(_measurement(ambient_volume_l=None)).formatted()
        assert formatted["volume_20c_l"] == "—"
