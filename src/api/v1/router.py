# src/api/v1/router.py

from fastapi import APIRouter
from src.api.v1.holdings import router as holdings_router
from src.api.v1.bonuses import router as bonuses_router

router = APIRouter()

router.include_router(holdings_router, prefix="/holdings", tags=["Holdings"])
router.include_router(bonuses_router, prefix="/bonuses", tags=["Bonuses"])
