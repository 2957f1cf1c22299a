"""API routes."""

from fastapi import APIRouter

from stockscan.api.routes import auth, stock

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(stock.router, tags=["stock"])
