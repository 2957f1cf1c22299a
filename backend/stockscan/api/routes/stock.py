"""Stock lookup routes.

GET /stock?barcode=... resolves a scanned barcode through SAP and returns
the warehouse stock. Lookup failures are rendered by the StockLookupError
handler registered in main.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from stockscan.api.deps import LookupService
from stockscan.core.auth import CurrentOperator
from stockscan.core.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


@router.get("/stock")
@limiter.limit("60/minute")
async def get_stock(
    request: Request,
    current_operator: CurrentOperator,
    service: LookupService,
    barcode: Optional[str] = Query(None, description="Scanned barcode"),
):
    """Current FG01 / 01 stock for a barcode, with alternate-unit totals."""
    logger.info(f"Stock lookup for {barcode!r} by {current_operator.subject}")
    result = await service.lookup(barcode)
    return JSONResponse(
        content=result.model_dump(mode="json", by_alias=True),
        headers=NO_STORE_HEADERS,
    )
