"""Outbound SAP OData query construction.

Two queries per lookup: the product service (barcode -> Product) and the
material stock service (Product -> stock per storage location).
"""

import base64
from typing import Dict, Optional
from urllib.parse import urlencode, quote

from stockscan.core.config import Settings

PRODUCT_PATH = "/sap/opu/odata4/sap/api_product/srvd_a2x/sap/product/0002/Product"
STOCK_PATH = "/sap/opu/odata/sap/API_MATERIAL_STOCK_SRV/A_MaterialStock"

PRODUCT_SELECT = "Product,BaseUnit"
PRODUCT_EXPAND = "_ProductBasicText($select=ProductLongText),_ProductUnitOfMeasure"

STOCK_EXPAND = "to_MatlStkInAcctMod"
STOCK_SELECT = ",".join([
    "to_MatlStkInAcctMod/MatlWrhsStkQtyInMatlBaseUnit",
    "to_MatlStkInAcctMod/StorageLocation",
    "to_MatlStkInAcctMod/InventoryStockType",
])


def odata_literal(value: str) -> str:
    """Quote a value as an OData string literal ('' escapes a quote).

    The barcode otherwise reaches the filter unchanged; doubling quotes is the
    only rewrite, so a stray ``'`` cannot close the literal early.
    """
    return "'" + value.replace("'", "''") + "'"


def _service_url(settings: Settings, path: str, params: Dict[str, str]) -> Optional[str]:
    base_url = settings.sap_base_api_url or ""
    if not base_url:
        return None
    query = urlencode(params, quote_via=quote, safe="$(),/")
    return f"{base_url.rstrip('/')}{path}?{query}"


def build_product_url(barcode: str, settings: Settings) -> Optional[str]:
    """URL of the product query filtering the configured field on the barcode.

    Returns None when SAP_BASE_API_URL is unset.
    """
    return _service_url(settings, PRODUCT_PATH, {
        "$filter": f"{settings.sap_product_filter_field} eq {odata_literal(barcode)}",
        "$select": PRODUCT_SELECT,
        "$expand": PRODUCT_EXPAND,
    })


def build_stock_url(product_id: str, settings: Settings) -> Optional[str]:
    """URL of the material stock query for a resolved product.

    Returns None when SAP_BASE_API_URL is unset.
    """
    return _service_url(settings, STOCK_PATH, {
        "$filter": f"Material eq {odata_literal(product_id)}",
        "$expand": STOCK_EXPAND,
        "$select": STOCK_SELECT,
    })


def build_headers(settings: Settings) -> Dict[str, str]:
    """Request headers for both hops.

    Authorization precedence: basic user+pass, then the literal basic
    token, then the bearer token, then none. The API-key header is added
    on top of whichever applies.
    """
    headers = {
        "Accept": "application/json",
        "Cache-Control": "no-store",
    }

    user = settings.sap_basic_auth_user
    password = settings.sap_basic_auth_pass
    if user and password:
        credentials = base64.b64encode(f"{user}:{password}".encode()).decode()
        headers["Authorization"] = f"Basic {credentials}"
    elif settings.sap_basic_auth:
        token = settings.sap_basic_auth
        headers["Authorization"] = token if token.startswith("Basic ") else f"Basic {token}"
    elif settings.sap_api_token:
        headers["Authorization"] = f"Bearer {settings.sap_api_token}"

    if settings.sap_api_key_header and settings.sap_api_key_value:
        headers[settings.sap_api_key_header] = settings.sap_api_key_value

    return headers
