"""Barcode -> product -> warehouse stock lookup against SAP.

One lookup makes two GET requests strictly in series:

    IDLE -> PRODUCT_QUERY_IN_FLIGHT -> PRODUCT_RESOLVED -> STOCK_QUERY_IN_FLIGHT -> DONE
                                    -> PRODUCT_NOT_FOUND
                                    -> PRODUCT_QUERY_FAILED
                                                           -> STOCK_QUERY_FAILED

Failures raise a StockLookupError subclass carrying the terminal state.
Nothing is cached and nothing is retried.
"""

import logging
from enum import Enum
from typing import Any, Optional, Tuple

import httpx

from stockscan.core.config import Settings
from stockscan.core.errors import (
    BarcodeValidationError,
    ConfigurationError,
    ProductNotFoundError,
    UpstreamNetworkError,
    UpstreamShapeError,
    UpstreamTransportError,
)
from stockscan.schemas.stock import ProductInfo, RawEnvelopes, StockResult
from stockscan.services.sap import normalizer
from stockscan.services.sap.envelopes import is_empty_result, parse_envelope
from stockscan.services.sap.query_builder import (
    build_headers,
    build_product_url,
    build_stock_url,
)
from stockscan.services.stock_aggregator import alternate_quantities, sum_warehouse_stock

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "SAP_BASE_API_URL is not configured on the server."
MAX_BODY_PREVIEW = 2000


class LookupState(str, Enum):
    IDLE = "idle"
    PRODUCT_QUERY_IN_FLIGHT = "product_query_in_flight"
    PRODUCT_RESOLVED = "product_resolved"
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_QUERY_FAILED = "product_query_failed"
    STOCK_QUERY_IN_FLIGHT = "stock_query_in_flight"
    STOCK_QUERY_FAILED = "stock_query_failed"
    DONE = "done"


def validate_barcode(barcode: Optional[str], required_length: Optional[int] = None) -> str:
    """Trimmed barcode, or BarcodeValidationError.

    The exact-length policy is only applied when ``required_length`` is given.
    """
    code = (barcode or "").strip()
    if not code:
        raise BarcodeValidationError("Missing barcode query parameter.")
    if required_length is not None and len(code) != required_length:
        raise BarcodeValidationError(f"Barcode must be exactly {required_length} characters.")
    return code


class StockLookup:
    """A single lookup run. Tracks its own state; not reusable."""

    def __init__(self, service: "StockLookupService", barcode: str):
        self.service = service
        self.barcode = barcode
        self.state = LookupState.IDLE

    def _transition(self, state: LookupState) -> None:
        logger.debug(f"Lookup {self.barcode}: {self.state.value} -> {state.value}")
        self.state = state

    async def _get_json(self, url: str, label: str, failed_state: LookupState) -> Tuple[httpx.Response, Any]:
        """GET ``url``; returns the response and its decoded body (None if undecodable)."""
        try:
            response = await self.service.client.get(url, headers=self.service.headers())
        except httpx.RequestError as e:
            self._transition(failed_state)
            logger.warning(f"SAP {label} request failed for {self.barcode}: {e!r}")
            raise UpstreamNetworkError("SAP request failed.", e, state=failed_state.value) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return response, payload

    def _transport_failure(
        self, response: httpx.Response, payload: Any, label: str, failed_state: LookupState
    ) -> UpstreamTransportError:
        self._transition(failed_state)
        details = payload if payload is not None else (response.text[:MAX_BODY_PREVIEW] or None)
        logger.warning(
            f"SAP {label} request for {self.barcode} returned {response.status_code}"
            f"{'' if payload is not None else ' with an undecodable body'}"
        )
        return UpstreamTransportError(
            f"SAP {label} request failed.",
            details=details,
            upstream_status=response.status_code,
            state=failed_state.value,
        )

    async def resolve_product(self) -> Tuple[ProductInfo, Any]:
        settings = self.service.settings
        url = build_product_url(self.barcode, settings)
        if url is None:
            self._transition(LookupState.PRODUCT_QUERY_FAILED)
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE, state=self.state.value)

        self._transition(LookupState.PRODUCT_QUERY_IN_FLIGHT)
        logger.info(f"[SAP] Product URL: {url}")
        failed = LookupState.PRODUCT_QUERY_FAILED
        response, payload = await self._get_json(url, "product", failed)

        if not response.is_success or payload is None:
            raise self._transport_failure(response, payload, "product", failed)

        if is_empty_result(payload):
            self._transition(LookupState.PRODUCT_NOT_FOUND)
            logger.info(f"No SAP product matches barcode {self.barcode}")
            raise ProductNotFoundError(
                f"No product found for barcode {self.barcode}.",
                details=payload,
                state=self.state.value,
            )

        product_id = normalizer.extract_product(payload)
        if not product_id:
            self._transition(failed)
            envelope = parse_envelope(payload, normalizer.PRODUCT_KEY)
            logger.warning(
                f"SAP product response for {self.barcode} has no Product key "
                f"(envelope: {type(envelope).__name__ if envelope else 'unknown'})"
            )
            raise UpstreamShapeError(
                "SAP product response missing Product key.",
                details="No Product key found in any known response envelope.",
                raw=payload,
                state=self.state.value,
            )

        base_unit, base_iso_unit = normalizer.extract_base_units(payload)
        product = ProductInfo(
            product_id=product_id,
            product_name=normalizer.extract_product_name(payload),
            base_unit=base_unit,
            base_iso_unit=base_iso_unit,
            alternate_units=normalizer.extract_unit_conversions(payload),
        )
        self._transition(LookupState.PRODUCT_RESOLVED)
        return product, payload

    async def fetch_stock(self, product: ProductInfo) -> Any:
        url = build_stock_url(product.product_id, self.service.settings)
        if url is None:
            self._transition(LookupState.STOCK_QUERY_FAILED)
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE, state=self.state.value)

        self._transition(LookupState.STOCK_QUERY_IN_FLIGHT)
        logger.info(f"[SAP] Stock URL: {url}")
        failed = LookupState.STOCK_QUERY_FAILED
        response, payload = await self._get_json(url, "stock", failed)

        if not response.is_success or payload is None:
            raise self._transport_failure(response, payload, "stock", failed)
        return payload

    async def run(self) -> StockResult:
        product, product_payload = await self.resolve_product()
        stock_payload = await self.fetch_stock(product)

        settings = self.service.settings
        items = normalizer.extract_stock_items(stock_payload)
        total = sum_warehouse_stock(
            items,
            storage_location=settings.warehouse_storage_location,
            stock_type=settings.warehouse_stock_type,
        )

        result = StockResult(
            barcode=self.barcode,
            product_id=product.product_id,
            product_name=product.product_name,
            base_unit=product.base_unit,
            base_iso_unit=product.base_iso_unit,
            total_base_quantity=total,
            alternate_quantities=alternate_quantities(total, product.base_unit, product.alternate_units),
            line_items=items,
            raw_envelopes=RawEnvelopes(product=product_payload, stock=stock_payload),
        )
        self._transition(LookupState.DONE)
        logger.info(
            f"Stock for {self.barcode} (product {product.product_id}): {total} "
            f"from {len(items)} ledger lines"
        )
        return result


class StockLookupService:
    """Resolves scanned barcodes to warehouse stock.

    The httpx client is owned by the caller (the app lifespan in production,
    a MockTransport client in tests).
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.settings = settings

    def headers(self):
        return build_headers(self.settings)

    async def lookup(self, barcode: Optional[str]) -> StockResult:
        """Run one fresh lookup for ``barcode``.

        Raises:
            BarcodeValidationError: barcode missing (or wrong length when
                ENFORCE_BARCODE_LENGTH is set).
            ConfigurationError: SAP_BASE_API_URL unset; no request is made.
            ProductNotFoundError: the product service returned no rows.
            UpstreamTransportError: either hop failed at the HTTP level.
            UpstreamShapeError: the product payload has no Product key.
        """
        required_length = self.settings.barcode_length if self.settings.enforce_barcode_length else None
        code = validate_barcode(barcode, required_length)
        if not self.settings.sap_configured:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE, state=LookupState.IDLE.value)
        return await StockLookup(self, code).run()
