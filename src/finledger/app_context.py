"""In-process access to the ledger services for scripts and notebooks."""

from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from finledger.config.settings import Settings, get_settings, set_settings
from finledger.providers import AssetPriceSource, LedgerPriceSource
from finledger.repositories.sqlalchemy import SqlAlchemyTransactionRepository, SqlAlchemyUnitOfWork
from finledger.repositories.sqlalchemy.database import (
    get_session,
    get_session_factory,
    init_db,
    reset_database,
)
from finledger.services import (
    ActionService,
    LedgerService,
    PriceService,
    ReportingService,
    get_position_locks,
)


class AppContext:
    """
    Lazily built services over one ledger database.

    Readers share a single session; stake and unstake open their own unit
    of work per call. Call refresh_session() after writes made elsewhere.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        price_source: Optional[AssetPriceSource] = None,
    ):
        self._data_dir = data_dir
        self._price_source = price_source
        self._session: Optional[Session] = None
        self._services: dict[str, object] = {}
        self._initialized = False

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """Point settings at data_dir (ledger.db inside it) and create the tables."""
        self._data_dir = data_dir or self._data_dir
        set_settings(Settings(data_dir=self._data_dir))
        reset_database()
        init_db()
        self.close()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def data_dir(self) -> Path:
        return get_settings().get_data_dir()

    def refresh_session(self) -> None:
        self.close()
        self._session = get_session()

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
        self._services.clear()

    @property
    def ledger(self) -> LedgerService:
        if "ledger" not in self._services:
            self._services["ledger"] = LedgerService(
                transaction_repo=self._repo(),
                credit_accounts=get_settings().credit_accounts,
            )
        return self._services["ledger"]

    @property
    def prices(self) -> PriceService:
        if "prices" not in self._services:
            self._services["prices"] = PriceService(
                source=self._price_source or LedgerPriceSource(self._repo()),
                pegged_assets=get_settings().usd_pegged_assets,
            )
        return self._services["prices"]

    @property
    def reporting(self) -> ReportingService:
        if "reporting" not in self._services:
            self._services["reporting"] = ReportingService(
                transaction_repo=self._repo(),
                price_service=self.prices,
                settings=get_settings(),
            )
        return self._services["reporting"]

    @property
    def actions(self) -> ActionService:
        if "actions" not in self._services:
            session_factory = get_session_factory()
            self._services["actions"] = ActionService(
                uow_factory=lambda: SqlAlchemyUnitOfWork(session_factory),
                price_service=self.prices,
                credit_accounts=get_settings().credit_accounts,
                locks=get_position_locks(),
            )
        return self._services["actions"]

    def _repo(self) -> SqlAlchemyTransactionRepository:
        if self._session is None:
            self._session = get_session()
        return SqlAlchemyTransactionRepository(self._session)
