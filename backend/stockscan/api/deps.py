"""Request-scoped dependencies."""

from typing import Annotated

import httpx
from fastapi import Depends, Request

from stockscan.core.config import Settings, get_settings
from stockscan.services.stock_lookup_service import StockLookupService


def get_sap_client(request: Request) -> httpx.AsyncClient:
    """The shared SAP client opened by the application lifespan."""
    return request.app.state.sap_client


def get_stock_lookup_service(
    client: Annotated[httpx.AsyncClient, Depends(get_sap_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> StockLookupService:
    return StockLookupService(client, settings)


LookupService = Annotated[StockLookupService, Depends(get_stock_lookup_service)]
