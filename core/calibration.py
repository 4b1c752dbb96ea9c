# File: ethanol_gauging/core/calibration.py
"""
Calibration (strapping) tables: gauge position -> volume.

A table is a list of (position, volume) points for one tank, wagon or vessel
compartment. The position is an innage height or an ullage (empty space),
whichever the certificate was issued for. Vessel certificates publish one
curve per trim value; `curve_for_trim` picks one out.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_POSITION_KEYS = ("position", "height", "ullage", "empty_space_mm")
_VOLUME_KEYS = ("volume", "volume_l")


@dataclass(frozen=True)
class CalibrationPoint:
    position: float
    volume: float
    trim: float = 0.0


def as_calibration_point(point: Any) -> CalibrationPoint:
    """Accepts a CalibrationPoint, a (position, volume[, trim]) sequence or a mapping."""
    if isinstance(point, CalibrationPoint):
        return point
    if isinstance(point, Mapping):
        position = next((point[k] for k in _POSITION_KEYS if k in point), None)
        volume = next((point[k] for k in _VOLUME_KEYS if k in point), None)
        if position is None or volume is None:
            raise ValueError(f"Calibration point needs a position and a volume: {dict(point)}")
        return CalibrationPoint(float(position), float(volume), float(point.get("trim", 0.0)))
    if isinstance(point, Sequence) and len(point) in (2, 3):
        return CalibrationPoint(*(float(v) for v in point))
    raise TypeError(f"Unsupported calibration point: {point!r}")


def curve_for_trim(points: Iterable[Any], trim: float) -> List[CalibrationPoint]:
    """The points of a vessel table that belong to one trim value."""
    return [p for p in map(as_calibration_point, points) if p.trim == trim]


def interpolate_volume(position: float, points: Iterable[Any]) -> float:
    """
    Volume at a gauge position by linear interpolation over a calibration table.

    Args:
        position: Measured height or ullage, in the table's unit
        points: Calibration points in any order

    Returns:
        The interpolated volume. Positions below the first point or above the
        last return that point's volume; a position on a point returns its
        volume exactly. NaN when the position is not finite or the table has
        fewer than two points.
    """
    table = [as_calibration_point(p) for p in points]
    if len(table) < 2 or position is None or not math.isfinite(position):
        return math.nan

    positions = np.array([p.position for p in table], dtype=float)
    volumes = np.array([p.volume for p in table], dtype=float)
    order = np.argsort(positions, kind="stable")
    positions, volumes = positions[order], volumes[order]

    if position <= positions[0]:
        return float(volumes[0])
    if position >= positions[-1]:
        return float(volumes[-1])

    knots = np.flatnonzero(positions == position)
    if knots.size:
        return float(volumes[knots[0]])

    upper = int(np.searchsorted(positions, position, side="right"))
    p1, p2 = positions[upper - 1], positions[upper]
    v1, v2 = volumes[upper - 1], volumes[upper]
    return float(v1 + (v2 - v1) * (position - p1) / (p2 - p1))


def interpolate_volume_for_trim(position: float, points: Iterable[Any], trim: float) -> float:
    """Interpolates on the curve of one trim value of a vessel table."""
    curve = curve_for_trim(points, trim)
    if len(curve) < 2:
        logger.warning(f"Calibration table has {len(curve)} point(s) for trim {trim}. Cannot interpolate.")
    return interpolate_volume(position, curve)
