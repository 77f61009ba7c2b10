"""
API router.
Combines every endpoint.
"""
from fastapi import APIRouter

from backend.app.api.v1.endpoints import price, rebalance

api_router = APIRouter()

api_router.include_router(
    price.router,
    prefix="/price",
    tags=["price"]
)

api_router.include_router(
    rebalance.router,
    prefix="/rebalance",
    tags=["rebalance"]
)
