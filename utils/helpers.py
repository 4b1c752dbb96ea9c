# File: utils/helpers.py
import logging
import math
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "—"

# "10.000", "1.234.567", "-2.500": dot-grouped integers in Brazilian notation
_DOT_GROUPED = re.compile(r'^-?\d{1,3}(\.\d{3})+$')


def setup_main_logging(level: Optional[str] = None):
    """Sets up basic root logging configuration."""
    level = (level or "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)


def to_number(value: Any) -> float:
    """
    Converts a form value to a float, returning NaN when it is missing or unreadable.

    Brazilian notation is assumed: dots group thousands and a comma marks the
    decimals ("1.234,5" -> 1234.5, "10.000" -> 10000.0). A string with a single
    dot that is not followed by exactly three digits is read as a plain
    decimal ("805.0" -> 805.0).
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        return math.nan
    if ',' in text:
        text = text.replace('.', '').replace(',', '.')
    elif _DOT_GROUPED.match(text):
        text = text.replace('.', '')
    try:
        return float(text)
    except ValueError:
        logger.debug(f"Could not read '{value}' as a number. Treating it as missing.")
        return math.nan


def format_number(value: float, decimals: int = 2) -> str:
    """Formats a number with a decimal comma; non-finite values become a dash."""
    if value is None or not math.isfinite(value):
        return NOT_AVAILABLE
    return f"{value:.{decimals}f}".replace('.', ',')


def finite_or_none(value: float) -> Optional[float]:
    """NaN and infinities are not valid JSON; serialize them as null."""
    if value is None or not math.isfinite(value):
        return None
    return value
