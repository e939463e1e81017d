"""
Expiry alert rules.

A contract is "expiring soon" when its expiry date lies strictly after the
reference moment and no more than ``horizon_days`` days ahead, counting
partial days as whole ones. Everything here is a pure function of the
records passed in.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, List, Union

from ..exceptions import ValidationError
from ..models import ContractRecord

DEFAULT_HORIZON_DAYS = 30

SECONDS_PER_DAY = 24 * 60 * 60

AsOf = Union[date, datetime]


@dataclass(frozen=True)
class ExpiryAlert:
    """A contract inside the alert horizon and how many days it has left."""

    record: ContractRecord
    days_remaining: int


@dataclass(frozen=True)
class AlertSummary:
    """Dashboard counters shown next to the alert list."""

    total_contracts: int
    expiring_soon: int


def days_remaining(expiry: date, as_of: AsOf) -> int:
    """
    Whole days from ``as_of`` until ``expiry``, rounded up.

    With a plain date the difference is exact. With a datetime the expiry is
    taken as midnight at the start of its day, in the same timezone as
    ``as_of``, so any time later on the day before still counts as one day.
    """
    if isinstance(as_of, datetime):
        expiry_start = datetime.combine(expiry, time.min, tzinfo=as_of.tzinfo)
        return math.ceil((expiry_start - as_of).total_seconds() / SECONDS_PER_DAY)
    return (expiry - as_of).days


def _check_horizon(horizon_days: int) -> None:
    if horizon_days < 0:
        raise ValidationError(f"Alert horizon must be >= 0 days, got {horizon_days}")


def alerts(
    records: Iterable[ContractRecord],
    as_of: AsOf,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> List[ExpiryAlert]:
    """
    Contracts expiring within the horizon, soonest first.

    Records without an expiry date are ignored. Records sharing an expiry
    date keep their order in ``records``.
    """
    _check_horizon(horizon_days)

    found = []
    for record in records:
        if record.expiry_date is None:
            continue
        remaining = days_remaining(record.expiry_date, as_of)
        if 0 < remaining <= horizon_days:
            found.append(ExpiryAlert(record=record, days_remaining=remaining))

    # sorted() is stable, so ties keep store order
    return sorted(found, key=lambda alert: alert.record.expiry_date)


def upcoming(
    records: Iterable[ContractRecord],
    as_of: AsOf,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> List[ContractRecord]:
    """The records of ``alerts(...)``, soonest expiry first."""
    return [alert.record for alert in alerts(records, as_of, horizon_days)]


def summarize(
    records: Iterable[ContractRecord],
    as_of: AsOf,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> AlertSummary:
    records = list(records)
    return AlertSummary(
        total_contracts=len(records),
        expiring_soon=len(alerts(records, as_of, horizon_days)),
    )
