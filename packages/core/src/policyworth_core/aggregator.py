"""Tally aggregation per service.

Filters tally records to the reporting range and the selected services,
then folds them into one bucket per service. Folding only adds integers and
exact Decimal products, so the totals do not depend on record order or on
how the records were batched.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Sequence

import structlog

from .exceptions import ValidationError
from .models.period import DateRange
from .models.tally import LocationKey, ServiceCode, TallyRecord

logger = structlog.get_logger()


@dataclass
class ServiceBucket:
    """Running totals for one service while records are folded.

    ``avoided_yearly`` is the sum over records of accepted clients times the
    yearly cost each of them avoided, before proration to the period.
    """

    yes: int = 0
    no: int = 0
    avoided_yearly: Decimal = Decimal("0")
    record_count: int = 0


@dataclass
class Selection:
    """Records retained for a report, with the distinct locations they touch."""

    records: list[TallyRecord]
    locations: list[LocationKey]
    skipped_missing_location: int = 0


def normalize_services(selected: Iterable) -> list[ServiceCode]:
    """Turn a caller's selection into an ordered, de-duplicated code list.

    Raises:
        ValidationError: If the selection is empty or holds an unknown code.
    """
    services: list[ServiceCode] = []
    for item in selected:
        try:
            code = ServiceCode(item)
        except ValueError as e:
            raise ValidationError(
                f"Unknown service: {item}",
                field="selected_services",
                value=str(item),
                constraint=f"One of: {', '.join(c.value for c in ServiceCode)}",
            ) from e
        if code not in services:
            services.append(code)

    if not services:
        raise ValidationError(
            "Select at least one service.",
            field="selected_services",
            constraint="At least one service code is required",
        )
    return services


class TallyAggregator:
    """Select and fold tally records for one report run."""

    def __init__(self, services: Sequence[ServiceCode], date_range: DateRange):
        """
        Args:
            services: Selected services, in the caller's order
            date_range: Resolved reporting range
        """
        self.services = list(services)
        self.date_range = date_range
        self._selected = set(self.services)

    def matches(self, record: TallyRecord) -> bool:
        """True when a record is in range and for a selected service."""
        return record.service in self._selected and self.date_range.contains(record.date)

    def select(self, records: Iterable[TallyRecord]) -> Selection:
        """Keep matching records and collect the locations they reference.

        Matching records without a state or county cannot be priced; they
        are dropped and counted.
        """
        kept: list[TallyRecord] = []
        locations: dict[LocationKey, None] = {}
        skipped = 0

        for record in records:
            if not self.matches(record):
                continue
            if not record.has_location:
                skipped += 1
                continue
            kept.append(record)
            locations.setdefault(record.location, None)

        if skipped:
            logger.warning("tallies_missing_location", skipped=skipped)

        return Selection(
            records=kept,
            locations=list(locations),
            skipped_missing_location=skipped,
        )

    def fold(
        self,
        records: Iterable[TallyRecord],
        baselines: Mapping[LocationKey, Decimal],
        avoided_cost: Callable[[TallyRecord, Decimal], Decimal],
    ) -> dict[ServiceCode, ServiceBucket]:
        """Fold records into one bucket per selected service.

        Args:
            records: Records returned by :meth:`select`
            baselines: Yearly institutional cost per location
            avoided_cost: ``avoided_cost(record, baseline)`` giving the yearly
                cost avoided by the record's accepted clients

        Returns:
            A bucket for every selected service, in selection order
        """
        buckets = {service: ServiceBucket() for service in self.services}
        for record in records:
            bucket = buckets[record.service]
            bucket.yes += record.yes_count
            bucket.no += record.no_count
            bucket.avoided_yearly += avoided_cost(record, baselines[record.location])
            bucket.record_count += 1
        return buckets
