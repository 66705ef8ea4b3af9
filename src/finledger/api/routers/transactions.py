"""Transaction ledger endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from finledger.api.deps import get_ledger_service
from finledger.api.schemas import (
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from finledger.domain.models import TransactionType
from finledger.repositories.protocols import TransactionFilter
from finledger.services import LedgerService, TransactionCreate

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionResponse, status_code=201)
def create_transaction(
    data: TransactionCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Validate, derive and record a transaction."""
    created = ledger.create_transaction(TransactionCreate(**data.model_dump()))
    return TransactionResponse.model_validate(created)


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    start: Optional[date] = Query(None, description="Earliest ledger date (inclusive)"),
    end: Optional[date] = Query(None, description="Latest ledger date (inclusive)"),
    txn_type: Optional[list[TransactionType]] = Query(None),
    account: Optional[list[str]] = Query(None),
    asset: Optional[list[str]] = Query(None),
    investment_id: Optional[str] = Query(None),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """List transactions ordered by date, with optional filters."""
    transactions = ledger.query_transactions(
        TransactionFilter(
            start_date=start,
            end_date=end,
            txn_types=txn_type,
            accounts=account,
            assets=[a.upper() for a in asset] if asset else None,
            investment_id=investment_id,
        )
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.get("/{txn_id}", response_model=TransactionResponse)
def get_transaction(
    txn_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Get a single transaction."""
    return TransactionResponse.model_validate(ledger.get_transaction(txn_id))
