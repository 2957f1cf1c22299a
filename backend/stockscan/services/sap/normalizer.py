"""Pull product, unit-of-measure and stock data out of SAP payloads.

Every function accepts whatever the response body decoded to (or None when
it did not decode) and returns an absent/empty value instead of raising
when no known envelope carries the data.
"""

from typing import Any, List, Optional, Sequence, Tuple

from stockscan.schemas.stock import StockLineItem, UnitConversion
from stockscan.services.sap.envelopes import Record, expand_navigation, first_record
from stockscan.services.stock_aggregator import compute_ratio, parse_quantity

PRODUCT_KEY = "Product"
PRODUCT_TEXT_NAV = "_ProductBasicText"
PRODUCT_NAME_FIELD = "ProductLongText"
STOCK_NAV = "to_MatlStkInAcctMod"

# Order matters: these track field renames across service versions and the
# first present value is the one trusted. Do not reorder.
BASE_UNIT_ALIASES = ("BaseUnit", "BaseUnitOfMeasure", "MaterialBaseUnit")
BASE_ISO_UNIT_ALIASES = ("BaseISOUnit", "BaseUnitISOCode", "ISOUnit")
UNIT_NAVS = ("_ProductUnitOfMeasure", "to_ProductUnitsOfMeasure")
UNIT_CODE_ALIASES = (
    "AlternativeUnit",
    "AlternativeUnitOfMeasure",
    "UnitOfMeasure",
    "QuantityUnit",
    "Unit",
)
ISO_UNIT_CODE_ALIASES = (
    "AlternativeUnitISOCode",
    "UnitOfMeasureISOCode",
    "ISOUnit",
    "ISOCode",
)
NUMERATOR_ALIASES = ("QuantityNumerator", "Numerator")
DENOMINATOR_ALIASES = ("QuantityDenominator", "Denominator")

STOCK_LOCATION_FIELD = "StorageLocation"
STOCK_TYPE_FIELD = "InventoryStockType"
STOCK_QUANTITY_FIELD = "MatlWrhsStkQtyInMatlBaseUnit"


def first_string(record: Record, aliases: Sequence[str]) -> Optional[str]:
    """Value of the first alias holding a non-empty string."""
    for alias in aliases:
        value = record.get(alias)
        if isinstance(value, str) and value:
            return value
    return None


def _first_number(record: Record, aliases: Sequence[str]) -> Optional[float]:
    for alias in aliases:
        if record.get(alias) is None:
            continue
        return parse_quantity(record[alias])
    return None


def _product_record(payload: Any) -> Optional[Record]:
    return first_record(payload, PRODUCT_KEY, value_type=str)


def extract_product(payload: Any) -> Optional[str]:
    record = _product_record(payload)
    if record is None:
        return None
    return record[PRODUCT_KEY]


def extract_product_name(payload: Any) -> Optional[str]:
    record = _product_record(payload)
    if record is None:
        return None
    texts = expand_navigation(record.get(PRODUCT_TEXT_NAV))
    if not texts:
        return None
    name = texts[0].get(PRODUCT_NAME_FIELD)
    return name if isinstance(name, str) else None


def extract_base_units(payload: Any) -> Tuple[Optional[str], Optional[str]]:
    """(base unit, base ISO unit) of the product."""
    record = _product_record(payload)
    if record is None:
        return None, None
    return (
        first_string(record, BASE_UNIT_ALIASES),
        first_string(record, BASE_ISO_UNIT_ALIASES),
    )


def _unit_records(record: Record) -> List[Record]:
    for nav in UNIT_NAVS:
        if nav in record:
            return expand_navigation(record[nav])
    return []


def extract_unit_conversions(payload: Any) -> List[UnitConversion]:
    """Alternate units of measure, in backend order.

    Records without a resolvable unit code are skipped.
    """
    record = _product_record(payload)
    if record is None:
        return []

    conversions = []
    for unit in _unit_records(record):
        unit_code = first_string(unit, UNIT_CODE_ALIASES)
        if unit_code is None:
            continue
        numerator = _first_number(unit, NUMERATOR_ALIASES)
        denominator = _first_number(unit, DENOMINATOR_ALIASES)
        conversions.append(UnitConversion(
            unit_code=unit_code,
            iso_unit_code=first_string(unit, ISO_UNIT_CODE_ALIASES),
            numerator=numerator,
            denominator=denominator,
            ratio=compute_ratio(numerator, denominator),
        ))
    return conversions


def _optional_code(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def extract_stock_items(payload: Any) -> List[StockLineItem]:
    """Stock lines of the first material stock record.

    Lines whose quantity cannot be parsed are left out; a missing quantity
    counts as zero.
    """
    record = first_record(payload, STOCK_NAV)
    if record is None:
        return []

    items = []
    for line in expand_navigation(record.get(STOCK_NAV)):
        quantity = parse_quantity(line.get(STOCK_QUANTITY_FIELD))
        if quantity is None:
            continue
        items.append(StockLineItem(
            storage_location=_optional_code(line.get(STOCK_LOCATION_FIELD)),
            stock_type=_optional_code(line.get(STOCK_TYPE_FIELD)),
            quantity=quantity,
        ))
    return items
