"""Reporting endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from finledger.api.deps import get_reporting_service
from finledger.api.schemas import (
    AssetPnlResponse,
    CashFlowBucketResponse,
    CashFlowResponse,
    ExpenseItemResponse,
    HoldingResponse,
    HoldingsResponse,
    OutflowProjectionResponse,
    OutstandingBorrowResponse,
    PnlResponse,
    RealizedEntryResponse,
    SpendingGroupResponse,
    SpendingResponse,
)
from finledger.core.timezone import today_local
from finledger.domain.views import Period
from finledger.services import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/holdings", response_model=HoldingsResponse)
def get_holdings(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    strict: bool = Query(False, description="Fail instead of leaving assets unpriced"),
    reporting: ReportingService = Depends(get_reporting_service),
) -> HoldingsResponse:
    """Holdings per asset and account, valued in USD."""
    view = reporting.get_holdings(as_of or today_local(), strict=strict)
    return HoldingsResponse(
        as_of=view.as_of,
        items=[HoldingResponse.model_validate(i) for i in view.items],
        total_value_usd=view.total_value_usd,
        unpriced=view.unpriced,
    )


@router.get("/holdings/by-asset", response_model=list[HoldingResponse])
def get_holdings_by_asset(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    strict: bool = Query(False),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[HoldingResponse]:
    """Holdings summed across accounts."""
    holdings = reporting.get_holdings_by_asset(as_of or today_local(), strict=strict)
    return [HoldingResponse.model_validate(h) for h in holdings.values()]


@router.get("/spending", response_model=SpendingResponse)
def get_spending(
    start: date = Query(...),
    end: date = Query(...),
    limit: Optional[int] = Query(None, ge=0, description="Number of top expenses"),
    reporting: ReportingService = Depends(get_reporting_service),
) -> SpendingResponse:
    """Realized spending by tag and counterparty."""
    report = reporting.get_spending(Period(start, end), top_limit=limit)
    return SpendingResponse(
        start_date=start,
        end_date=end,
        total_usd=report.total_usd,
        total_vnd=report.total_vnd,
        by_tag=[SpendingGroupResponse.model_validate(g) for g in report.by_tag.values()],
        by_counterparty=[
            SpendingGroupResponse.model_validate(g) for g in report.by_counterparty.values()
        ],
        top_expenses=[ExpenseItemResponse.model_validate(e) for e in report.top_expenses],
    )


@router.get("/cashflow", response_model=CashFlowResponse)
def get_cash_flow(
    start: date = Query(...),
    end: date = Query(...),
    reporting: ReportingService = Depends(get_reporting_service),
) -> CashFlowResponse:
    """Inflows and outflows, split into operating and financing."""
    report = reporting.get_cash_flow(Period(start, end))
    return CashFlowResponse(
        start_date=start,
        end_date=end,
        totals=CashFlowBucketResponse.model_validate(report.totals),
        operating=CashFlowBucketResponse.model_validate(report.operating),
        financing=CashFlowBucketResponse.model_validate(report.financing),
        by_type={k: CashFlowBucketResponse.model_validate(v) for k, v in report.by_type.items()},
        by_tag={k: CashFlowBucketResponse.model_validate(v) for k, v in report.by_tag.items()},
    )


@router.get("/pnl", response_model=PnlResponse)
def get_pnl(
    start: date = Query(...),
    end: date = Query(...),
    reporting: ReportingService = Depends(get_reporting_service),
) -> PnlResponse:
    """Realized PnL of withdrawals in the period."""
    report = reporting.get_pnl(Period(start, end))
    return PnlResponse(
        start_date=start,
        end_date=end,
        realized_pnl_usd=report.realized_pnl_usd,
        deposit_cost_usd=report.deposit_cost_usd,
        roi_percent=report.roi_percent,
        by_asset=[AssetPnlResponse.model_validate(a) for a in report.by_asset.values()],
        entries=[RealizedEntryResponse.model_validate(e) for e in report.entries],
    )


@router.get("/borrows/outflows", response_model=list[OutflowProjectionResponse])
def get_borrow_outflows(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[OutflowProjectionResponse]:
    """Principal plus interest to term end for open borrows."""
    projections = reporting.get_expected_borrow_outflows(as_of or today_local())
    return [OutflowProjectionResponse.model_validate(p) for p in projections]


@router.get("/borrows/outstanding", response_model=list[OutstandingBorrowResponse])
def get_outstanding_borrows(
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[OutstandingBorrowResponse]:
    """Borrowed minus repaid per account and asset."""
    borrows = reporting.get_outstanding_borrows(as_of or today_local())
    return [OutstandingBorrowResponse.model_validate(b) for b in borrows]
