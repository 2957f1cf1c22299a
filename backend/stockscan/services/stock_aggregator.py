"""Warehouse stock totals and alternate unit conversion."""

import math
import re
from numbers import Real
from typing import Any, Iterable, List, Optional

from stockscan.schemas.stock import AlternateQuantity, StockLineItem, UnitConversion

DEFAULT_STORAGE_LOCATION = "FG01"
DEFAULT_STOCK_TYPE = "01"

# Leading decimal prefix, the way SAP clients have always read these strings
_DECIMAL_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _finite(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (OverflowError, ValueError):
        return None
    return value if math.isfinite(value) else None


def parse_quantity(raw: Any) -> Optional[float]:
    """Parse a stock quantity from a numeric or string payload value.

    A missing value counts as 0. Anything that does not start with a decimal
    number yields None so callers can drop the line instead of counting it.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Real):
        return _finite(raw)
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    match = _DECIMAL_PREFIX.match(text)
    if not match:
        return None
    return _finite(match.group(0))


def compute_ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    """numerator / denominator, or None when either is missing or denominator is 0."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def sum_warehouse_stock(
    items: Iterable[StockLineItem],
    storage_location: str = DEFAULT_STORAGE_LOCATION,
    stock_type: str = DEFAULT_STOCK_TYPE,
) -> float:
    """Sum the quantity of lines in the given storage location and stock type.

    Lines elsewhere are filtered out; that is policy, not an error.
    """
    total = 0.0
    for item in items:
        if item.storage_location != storage_location:
            continue
        if item.stock_type != stock_type:
            continue
        total += item.quantity
    return total


def convert_quantity(total: float, conversion: UnitConversion) -> Optional[float]:
    """Express a base-unit quantity in the conversion's alternate unit.

    One alternate unit equals numerator/denominator base units, so the
    alternate quantity is total * denominator / numerator. None means the
    factor is unavailable and must not be shown as zero.
    """
    numerator = conversion.numerator
    denominator = conversion.denominator
    if numerator is None or denominator is None or numerator == 0:
        return None
    return total * (denominator / numerator)


def alternate_quantities(
    total: float,
    base_unit: Optional[str],
    conversions: Iterable[UnitConversion],
) -> List[AlternateQuantity]:
    """Converted totals for every alternate unit other than the base unit."""
    results = []
    for conversion in conversions:
        if conversion.unit_code == base_unit:
            continue
        results.append(AlternateQuantity(
            unit_code=conversion.unit_code,
            iso_unit_code=conversion.iso_unit_code,
            quantity=convert_quantity(total, conversion),
            numerator=conversion.numerator,
            denominator=conversion.denominator,
            ratio=conversion.ratio,
        ))
    return results
