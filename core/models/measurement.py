# File: ethanol_gauging/core/models/measurement.py
import math
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, field_validator

from utils.helpers import to_number


class ProductType(str, Enum):
    """Product grades handled by the gauging engine."""
    ANHYDROUS = "anhydrous"
    HYDRATED = "hydrated"
    BULK = "bulk"

    @classmethod
    def parse(cls, value: Any) -> "ProductType":
        """Accepts the canonical values and the legacy form codes (anidro, hidratado, granel)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        product = _PRODUCT_ALIASES.get(key)
        if product is None:
            raise ValueError(f"Unknown product type '{value}'. Expected one of: {', '.join(p.value for p in cls)}")
        return product

    @property
    def is_regulated(self) -> bool:
        return self is not ProductType.BULK


_PRODUCT_ALIASES = {
    "anhydrous": ProductType.ANHYDROUS,
    "anidro": ProductType.ANHYDROUS,
    "hydrated": ProductType.HYDRATED,
    "hidratado": ProductType.HYDRATED,
    "bulk": ProductType.BULK,
    "granel": ProductType.BULK,
}


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    OUT_OF_RANGE = "out-of-range"
    PENDING = "pending"


class Measurement(BaseModel):
    """
    One field measurement of a tank, wagon or vessel compartment.

    Numeric fields left blank (None, "") are stored as NaN: the form is filled
    in incrementally and a partial measurement is a normal state, not an error.
    Text values may use a decimal comma ("10.000,5").
    """
    measurement_id: Optional[Union[int, str]] = None
    product_type: ProductType
    ambient_volume_l: float = math.nan
    observed_density_kg_m3: float = math.nan
    sample_temperature_c: float = math.nan
    tank_temperature_c: float = math.nan
    is_empty: bool = False

    @field_validator('product_type', mode='before')
    @classmethod
    def validate_product_type(cls, v):
        return ProductType.parse(v)

    @field_validator(
        'ambient_volume_l', 'observed_density_kg_m3', 'sample_temperature_c', 'tank_temperature_c',
        mode='before'
    )
    @classmethod
    def validate_number(cls, v):
        return to_number(v)

    @property
    def correction_temperature_c(self) -> float:
        """Tank temperature when it was taken, otherwise the sample temperature."""
        if math.isfinite(self.tank_temperature_c):
            return self.tank_temperature_c
        return self.sample_temperature_c
