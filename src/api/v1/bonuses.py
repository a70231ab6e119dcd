# src/api/v1/bonuses.py

from fastapi import APIRouter, Depends

from src.api.v1.dependencies import get_holdings_service
from src.core.models.request import BonusMatchRequest
from src.core.models.response import BonusMatchResponse
from src.services.holdings_service import HoldingsService

router = APIRouter()


@router.post(
    "/match",
    response_model=BonusMatchResponse,
    summary="Bonus records that join to a company",
    description="Applies the same account filter and normalized-name (or security code) join "
                "the ledger uses when merging bonus issues."
)
async def match_bonuses_endpoint(
    request: BonusMatchRequest,
    service: HoldingsService = Depends(get_holdings_service)
) -> BonusMatchResponse:
    return service.match_bonuses(
        company_name=request.company_name,
        raw_bonuses=request.bonuses,
        account_id=request.account_id,
        security_code=request.security_code
    )
