import pytest

from core.volumetrics import CorrectionGrid, MeasurementCalculator


@pytest.fixture(scope="session")
def grid():
    """Full-resolution FCV grid, built once for the whole test session."""
    return CorrectionGrid.build()


@pytest.fixture(scope="session")
def calculator(grid):
    return MeasurementCalculator(grid)
