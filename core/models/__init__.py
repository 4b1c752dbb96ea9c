# File: ethanol_gauging/core/models/__init__.py
from .measurement import ComplianceStatus, Measurement, ProductType

__all__ = [
    "ComplianceStatus",
    "Measurement",
    "ProductType",
]
