"""Stock lookup schemas.

Field names are snake_case in Python and serialize to the camelCase keys the
scanner UI reads (``model_dump(by_alias=True)``).
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnitConversion(BaseModel):
    """An alternate unit of measure relative to the product's base unit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    unit_code: str = Field(alias="uom")
    iso_unit_code: Optional[str] = Field(default=None, alias="isoUom")
    numerator: Optional[float] = None
    denominator: Optional[float] = None
    ratio: Optional[float] = None


class ProductInfo(BaseModel):
    """First-hop result: the product behind a barcode."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_id: str = Field(alias="product")
    product_name: Optional[str] = Field(default=None, alias="productName")
    base_unit: Optional[str] = Field(default=None, alias="baseUom")
    base_iso_unit: Optional[str] = Field(default=None, alias="baseIsoUom")
    alternate_units: List[UnitConversion] = Field(default_factory=list, alias="alternateUnits")


class StockLineItem(BaseModel):
    """One stock-ledger line for a storage location / stock type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    storage_location: Optional[str] = Field(default=None, alias="storageLocation")
    stock_type: Optional[str] = Field(default=None, alias="stockType")
    quantity: float


class AlternateQuantity(BaseModel):
    """Total stock expressed in an alternate unit.

    ``quantity`` is None when the conversion factor is unavailable, which is
    not the same thing as zero stock.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    unit_code: str = Field(alias="uom")
    iso_unit_code: Optional[str] = Field(default=None, alias="isoUom")
    quantity: Optional[float] = None
    numerator: Optional[float] = None
    denominator: Optional[float] = None
    ratio: Optional[float] = None


class RawEnvelopes(BaseModel):
    """Backend payloads exactly as received, for diagnostics."""

    model_config = ConfigDict(frozen=True)

    product: Any = None
    stock: Any = None


class StockResult(BaseModel):
    """Terminal result of one lookup. Built fresh per lookup, never cached."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    barcode: str
    product_id: str = Field(alias="product")
    product_name: Optional[str] = Field(default=None, alias="productName")
    base_unit: Optional[str] = Field(default=None, alias="baseUom")
    base_iso_unit: Optional[str] = Field(default=None, alias="baseIsoUom")
    total_base_quantity: float = Field(alias="stock")
    alternate_quantities: List[AlternateQuantity] = Field(default_factory=list, alias="alternateUnits")
    line_items: List[StockLineItem] = Field(default_factory=list, alias="stockItems")
    raw_envelopes: RawEnvelopes = Field(default_factory=RawEnvelopes, alias="raw")
