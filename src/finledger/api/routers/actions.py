"""Stake and unstake endpoints."""

from fastapi import APIRouter, Depends

from finledger.api.deps import get_action_service
from finledger.api.schemas import (
    ActionResponse,
    PositionResponse,
    RealizedEntryResponse,
    StakeRequestSchema,
    TransactionResponse,
    UnstakeRequestSchema,
)
from finledger.services import ActionResult, ActionService, StakeRequest, UnstakeRequest

router = APIRouter(prefix="/actions", tags=["actions"])


def _to_response(result: ActionResult) -> ActionResponse:
    return ActionResponse(
        position=PositionResponse.model_validate(result.position),
        transactions=[TransactionResponse.model_validate(t) for t in result.transactions],
        realized=(
            RealizedEntryResponse.model_validate(result.realized)
            if result.realized else None
        ),
    )


@router.post("/stake", response_model=ActionResponse, status_code=201)
def stake(
    data: StakeRequestSchema,
    actions: ActionService = Depends(get_action_service),
) -> ActionResponse:
    """Move funds into a stake position."""
    return _to_response(actions.stake(StakeRequest(**data.model_dump())))


@router.post("/unstake", response_model=ActionResponse, status_code=201)
def unstake(
    data: UnstakeRequestSchema,
    actions: ActionService = Depends(get_action_service),
) -> ActionResponse:
    """Take funds out of a stake position, realizing PnL."""
    return _to_response(actions.unstake(UnstakeRequest(**data.model_dump())))
