"""Action service: stake/unstake as atomic paired writes plus lot ledger updates."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from finledger.core.exceptions import PriceUnavailableError, ValidationError
from finledger.domain.models import (
    InvestmentPosition,
    PositionKey,
    Transaction,
    TransactionType,
)
from finledger.domain.views import RealizedEntry
from finledger.repositories.protocols import TransactionFilter, UnitOfWork
from finledger.services.ledger_service import LedgerService, TransactionCreate
from finledger.services.lot_ledger import (
    LotLedger,
    PositionLockRegistry,
    get_position_locks,
)
from finledger.services.price_service import PriceService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass
class StakeRequest:
    """Move amount of asset from source_account into a stake position."""

    date: date
    source_account: str
    investment_account: str
    asset: str
    amount: Decimal
    fee_percent: Decimal = ZERO
    entry_price_usd: Optional[Decimal] = None
    fx_to_vnd: Optional[Decimal] = None
    horizon: Optional[str] = None
    counterparty: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None


@dataclass
class UnstakeRequest:
    """
    Take amount out of a position into destination_account.

    With close_all the whole position is unwound; amount, when given, is
    what was actually received for it.
    """

    date: date
    investment_id: str
    destination_account: str
    amount: Optional[Decimal] = None
    close_all: bool = False
    exit_price_usd: Optional[Decimal] = None
    fx_to_vnd: Optional[Decimal] = None
    counterparty: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None


@dataclass
class ActionResult:
    position: InvestmentPosition
    transactions: list[Transaction] = field(default_factory=list)
    realized: Optional[RealizedEntry] = None


class ActionService:
    """
    Orchestrates stake and unstake.

    Both actions lock the position key and then the investment id. The
    ledger is rebuilt from the store inside that critical section, the lot
    event is applied to it first (so InsufficientLots and
    PositionNotFound surface before anything is written), and then every
    transaction leg is committed in a single unit of work.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        price_service: PriceService,
        credit_accounts: Optional[Iterable[str]] = None,
        locks: Optional[PositionLockRegistry] = None,
    ):
        self._uow_factory = uow_factory
        self._price_service = price_service
        self._credit_accounts = credit_accounts
        self._locks = locks or get_position_locks()

    def stake(self, request: StakeRequest) -> ActionResult:
        self._validate_stake(request)
        asset = request.asset.upper()
        key = PositionKey(asset, request.investment_account, request.horizon)
        fee_qty = request.amount * (request.fee_percent or ZERO) / HUNDRED
        net_qty = request.amount - fee_qty
        entry_price = self._resolve_entry_price(request, asset)

        with self._locks.lock(key):
            with self._uow_factory() as uow:
                ledger = self._load_ledger(uow, TransactionFilter(assets=[asset]))
                existing = ledger.find_open_position(key)
                investment_id = existing.investment_id if existing else str(uuid.uuid4())

                with self._locks.lock(investment_id):
                    position = ledger.deposit(
                        key, request.date, net_qty, entry_price, investment_id=investment_id
                    )
                    fx_to_vnd = self._fx_to_vnd(request.fx_to_vnd, request.date)
                    ledger_service = LedgerService(uow.transactions, self._credit_accounts)
                    common = dict(
                        asset=asset,
                        price_local=entry_price,
                        date=request.date,
                        local_currency="USD",
                        fx_to_usd=Decimal("1"),
                        fx_to_vnd=fx_to_vnd,
                        counterparty=request.counterparty,
                        tag=request.tag,
                        note=request.note,
                        horizon=request.horizon,
                        investment_id=investment_id,
                        investment_account=request.investment_account,
                    )
                    legs = [
                        ledger_service.prepare(TransactionCreate(
                            txn_type=TransactionType.STAKE,
                            account=request.source_account,
                            quantity=net_qty,
                            **common,
                        )),
                        ledger_service.prepare(TransactionCreate(
                            txn_type=TransactionType.TRANSFER_IN,
                            account=request.investment_account,
                            quantity=net_qty,
                            internal_flow=True,
                            **common,
                        )),
                    ]
                    if fee_qty > ZERO:
                        legs.append(ledger_service.prepare(TransactionCreate(
                            txn_type=TransactionType.FEE,
                            account=request.source_account,
                            quantity=fee_qty,
                            **common,
                        )))
                    uow.transactions.create_many(legs)
                    uow.commit()

        logger.info(
            "Staked %s %s from %s into position %s (%s)",
            net_qty,
            asset,
            request.source_account,
            investment_id,
            request.investment_account,
        )
        return ActionResult(position=position, transactions=legs)

    def unstake(self, request: UnstakeRequest) -> ActionResult:
        self._validate_unstake(request)
        # Same key-then-id lock order as stake
        key = self._position_key(request.investment_id)

        with self._locks.lock(key), self._locks.lock(request.investment_id):
            with self._uow_factory() as uow:
                ledger = self._load_ledger(
                    uow, TransactionFilter(investment_id=request.investment_id)
                )
                position = ledger.get_position(request.investment_id)
                exit_price = self._resolve_exit_price(request, position)
                leaving = position.quantity_remaining if request.close_all else request.amount
                received = request.amount if request.amount is not None else leaving

                realized = ledger.withdraw(
                    request.investment_id,
                    request.date,
                    received,
                    exit_price,
                    close_all=request.close_all,
                )

                fx_to_vnd = self._fx_to_vnd(request.fx_to_vnd, request.date)
                ledger_service = LedgerService(uow.transactions, self._credit_accounts)
                common = dict(
                    asset=position.asset,
                    price_local=exit_price,
                    date=request.date,
                    local_currency="USD",
                    fx_to_usd=Decimal("1"),
                    fx_to_vnd=fx_to_vnd,
                    counterparty=request.counterparty,
                    tag=request.tag,
                    note=request.note,
                    horizon=position.horizon,
                    investment_id=position.investment_id,
                    investment_account=position.account,
                )
                legs = [
                    ledger_service.prepare(TransactionCreate(
                        txn_type=TransactionType.TRANSFER_OUT,
                        account=position.account,
                        quantity=leaving,
                        internal_flow=True,
                        **common,
                    )),
                    ledger_service.prepare(TransactionCreate(
                        txn_type=TransactionType.UNSTAKE,
                        account=request.destination_account,
                        quantity=received,
                        close_all=request.close_all,
                        **common,
                    )),
                ]
                uow.transactions.create_many(legs)
                uow.commit()

        logger.info(
            "Unstaked %s %s from position %s into %s; realized %s USD%s",
            received,
            position.asset,
            position.investment_id,
            request.destination_account,
            realized.realized_pnl_usd,
            " (closed)" if realized.closed_position else "",
        )
        return ActionResult(position=position, transactions=legs, realized=realized)

    def _load_ledger(self, uow: UnitOfWork, txn_filter: TransactionFilter) -> LotLedger:
        txn_filter.txn_types = [TransactionType.STAKE, TransactionType.UNSTAKE]
        # The caller already holds the position lock; the ledger gets its own
        # registry so replay never contends with it.
        return LotLedger.from_transactions(uow.transactions.query(txn_filter))

    def _position_key(self, investment_id: str) -> PositionKey:
        """Look up the key of a position; keys never change once opened."""
        with self._uow_factory() as uow:
            ledger = self._load_ledger(uow, TransactionFilter(investment_id=investment_id))
            return ledger.get_position(investment_id).key

    def _resolve_entry_price(self, request: StakeRequest, asset: str) -> Decimal:
        if request.entry_price_usd is not None:
            return request.entry_price_usd
        return self._price_service.get_price(asset, "USD", request.date)

    def _resolve_exit_price(self, request: UnstakeRequest, position: InvestmentPosition) -> Decimal:
        if request.exit_price_usd is not None:
            return request.exit_price_usd
        try:
            return self._price_service.get_price(position.asset, "USD", request.date)
        except PriceUnavailableError as exc:
            fallback = position.average_unit_cost_usd
            logger.warning(
                "%s; using average entry cost %s for position %s",
                exc.message,
                fallback,
                position.investment_id,
            )
            if fallback is None:
                raise
            return fallback

    def _fx_to_vnd(self, explicit: Optional[Decimal], on: date) -> Decimal:
        if explicit is not None:
            return explicit
        return self._price_service.get_price("USD", "VND", on)

    @staticmethod
    def _validate_stake(request: StakeRequest) -> None:
        if request.date is None:
            raise ValidationError("stake requires a date")
        for name in ("source_account", "investment_account", "asset"):
            if not getattr(request, name):
                raise ValidationError(f"stake requires {name}")
        if request.amount is None or request.amount <= ZERO:
            raise ValidationError("stake amount must be positive")
        fee = request.fee_percent or ZERO
        if fee < ZERO or fee >= HUNDRED:
            raise ValidationError("fee_percent must be in [0, 100)")
        if request.entry_price_usd is not None and request.entry_price_usd < ZERO:
            raise ValidationError("entry_price_usd cannot be negative")

    @staticmethod
    def _validate_unstake(request: UnstakeRequest) -> None:
        if request.date is None:
            raise ValidationError("unstake requires a date")
        if not request.investment_id:
            raise ValidationError("unstake requires investment_id")
        if not request.destination_account:
            raise ValidationError("unstake requires destination_account")
        if request.amount is None and not request.close_all:
            raise ValidationError("unstake requires amount unless close_all is set")
        if request.amount is not None and request.amount <= ZERO:
            raise ValidationError("unstake amount must be positive")
        if request.exit_price_usd is not None and request.exit_price_usd < ZERO:
            raise ValidationError("exit_price_usd cannot be negative")
