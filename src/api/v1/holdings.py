# src/api/v1/holdings.py

from fastapi import APIRouter, Depends

from src.api.v1.dependencies import get_holdings_service
from src.core.models.request import (
    HoldingsSummaryRequest,
    SecurityHoldersRequest,
    TransactionHistoryRequest,
    WeightedAverageCostRequest,
)
from src.core.models.response import (
    HoldingsSummaryResponse,
    SecurityHoldersResponse,
    TransactionHistoryResponse,
    WeightedAverageCostResponse,
)
from src.services.holdings_service import HoldingsService

router = APIRouter()


@router.post(
    "/history",
    response_model=TransactionHistoryResponse,
    summary="Transaction history of one security with running FIFO holdings",
    description="Replays the security's transactions and matched bonus issues up to the as-of date "
                "and returns one row per event with holding, cost basis, weighted average price "
                "and realized profit/loss of each sale."
)
async def transaction_history_endpoint(
    request: TransactionHistoryRequest,
    service: HoldingsService = Depends(get_holdings_service)
) -> TransactionHistoryResponse:
    return service.transaction_history(
        account_id=request.account_id,
        security_name=request.security_name,
        raw_transactions=request.transactions,
        raw_bonuses=request.bonuses,
        security_code=request.security_code,
        as_of_date=request.as_of_date
    )


@router.post(
    "/summary",
    response_model=HoldingsSummaryResponse,
    summary="Per-security holdings summary of an account",
    description="ACTIVE returns securities still held; ALL_TRADED also returns fully sold positions."
)
async def holdings_summary_endpoint(
    request: HoldingsSummaryRequest,
    service: HoldingsService = Depends(get_holdings_service)
) -> HoldingsSummaryResponse:
    return service.holdings_summary(
        account_id=request.account_id,
        raw_transactions=request.transactions,
        raw_bonuses=request.bonuses,
        view=request.view,
        as_of_date=request.as_of_date
    )


@router.post(
    "/weighted-average-cost",
    response_model=WeightedAverageCostResponse,
    summary="FIFO weighted average cost of current holdings"
)
async def weighted_average_cost_endpoint(
    request: WeightedAverageCostRequest,
    service: HoldingsService = Depends(get_holdings_service)
) -> WeightedAverageCostResponse:
    return service.weighted_average_cost(
        account_id=request.account_id,
        raw_transactions=request.transactions,
        raw_bonuses=request.bonuses,
        security_name=request.security_name,
        as_of_date=request.as_of_date
    )


@router.post(
    "/holders",
    response_model=SecurityHoldersResponse,
    summary="Accounts currently holding a security"
)
async def security_holders_endpoint(
    request: SecurityHoldersRequest,
    service: HoldingsService = Depends(get_holdings_service)
) -> SecurityHoldersResponse:
    return service.security_holders(
        security_name=request.security_name,
        raw_transactions=request.transactions,
        raw_bonuses=request.bonuses,
        as_of_date=request.as_of_date
    )
