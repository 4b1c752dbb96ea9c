# File: ethanol_gauging/core/volumetrics/regulatory.py
"""
Regulatory limits for fuel ethanol (ANP specification).

Corrected density at 20°C and alcohol content (INPM) must both fall inside
closed ranges for the product grade. Bulk product is not checked.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from core.models import ProductType


@dataclass(frozen=True)
class Limit:
    minimum: float
    maximum: float

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def __str__(self) -> str:
        return f"[{self.minimum} - {self.maximum}]"

    def to_dict(self) -> dict:
        return {"min": self.minimum, "max": self.maximum}


@dataclass(frozen=True)
class RegulatorySpec:
    density_20c_kg_m3: Limit
    composition_pct: Limit

    def to_dict(self) -> dict:
        return {
            "density_20c_kg_m3": self.density_20c_kg_m3.to_dict(),
            "composition_pct": self.composition_pct.to_dict(),
        }


REGULATORY_SPECS: Dict[ProductType, RegulatorySpec] = {
    ProductType.ANHYDROUS: RegulatorySpec(
        density_20c_kg_m3=Limit(789.0, 793.0),
        composition_pct=Limit(99.3, 100.0),
    ),
    ProductType.HYDRATED: RegulatorySpec(
        density_20c_kg_m3=Limit(805.2, 811.2),
        composition_pct=Limit(92.5, 94.6),
    ),
}


def spec_for(product_type: ProductType) -> Optional[RegulatorySpec]:
    """Limits for a product grade, or None for grades that are not checked."""
    return REGULATORY_SPECS.get(product_type)
