"""Investment position endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from finledger.api.deps import get_reporting_service
from finledger.api.schemas import InvestmentSummaryResponse, PositionResponse
from finledger.services import ReportingService

router = APIRouter(prefix="/investments", tags=["investments"])


@router.get("", response_model=list[PositionResponse])
def list_investments(
    is_open: Optional[bool] = Query(None, description="Only open (true) or closed (false)"),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[PositionResponse]:
    """List stake positions in the order they were opened."""
    return [PositionResponse.model_validate(p) for p in reporting.list_investments(is_open)]


@router.get("/summary", response_model=InvestmentSummaryResponse)
def get_investment_summary(
    reporting: ReportingService = Depends(get_reporting_service),
) -> InvestmentSummaryResponse:
    """Totals across all positions."""
    return InvestmentSummaryResponse.model_validate(reporting.get_investment_summary())
