"""Timezone utilities for the ledger's reporting calendar."""

from datetime import date, datetime
from typing import Union

import pytz
from dateutil import parser as date_parser

from finledger.config.settings import get_settings


def get_ledger_tz() -> pytz.BaseTzInfo:
    """Return the timezone that defines a ledger day."""
    return pytz.timezone(get_settings().ledger_timezone)


def now_local() -> datetime:
    """Return current time in the ledger timezone."""
    return datetime.now(get_ledger_tz())


def today_local() -> date:
    """Return today's date in the ledger timezone."""
    return now_local().date()


def to_ledger_date(value: Union[date, datetime, str]) -> date:
    """
    Normalize a date, datetime or string to a ledger date.

    Aware datetimes are converted to the ledger timezone before the date is
    taken; naive datetimes and strings without an offset are assumed to be
    local already.
    """
    if isinstance(value, str):
        value = date_parser.parse(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(get_ledger_tz())
        return value.date()
    return value
