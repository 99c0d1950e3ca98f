"""Institutional-care cost baselines per location.

The yearly cost of the institutional alternative (e.g. nursing-home care)
varies by county. Reference data may be supplied as:

- a mapping keyed by ``(state, county)`` tuples, :class:`LocationKey` or
  reference-data document ids (``FL__Sarasota``)
- an iterable of :class:`LocationCostRecord`
- a callable ``lookup(state, county)``, typically backed by a remote store

A location with no record, no usable cost, or a failed lookup resolves to the
configured default baseline. Each distinct location is looked up at most once
per resolver, and callable sources are queried concurrently.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Optional, Union

import structlog

from .config import parse_number
from .models.period import DAYS_PER_YEAR
from .models.tally import LocationCostRecord, LocationKey

logger = structlog.get_logger()

LocationCostLookup = Callable[[str, str], Any]
LocationCostSource = Union[
    Mapping[Any, Any],
    Iterable[LocationCostRecord],
    LocationCostLookup,
    None,
]

_YEARLY_KEYS = ("yearly_institutional_cost", "yearlyInstitutionalCost", "nhYearly")
_DAILY_KEYS = ("daily_institutional_cost", "dailyInstitutionalCost", "nhDaily")


def _valid_cost(value: Any) -> Optional[Decimal]:
    number = parse_number(value)
    if number is None or number < 0:
        return None
    return number


def yearly_cost_from_entry(entry: Any) -> Optional[Decimal]:
    """Extract a usable yearly baseline from a reference-data entry.

    Entries may be a LocationCostRecord, a raw document mapping, or a bare
    number. A valid yearly figure wins, zero included; otherwise a positive
    daily figure is scaled to a 365-day year. A daily figure of zero is what
    the settings form stores for a blank field, so it counts as absent.
    Returns None when neither is usable.
    """
    if entry is None:
        return None
    if isinstance(entry, LocationCostRecord):
        yearly, daily = entry.yearly_institutional_cost, entry.daily_institutional_cost
    elif isinstance(entry, Mapping):
        yearly = next((entry[k] for k in _YEARLY_KEYS if entry.get(k) is not None), None)
        daily = next((entry[k] for k in _DAILY_KEYS if entry.get(k) is not None), None)
    else:
        return _valid_cost(entry)

    yearly_cost = _valid_cost(yearly)
    if yearly_cost is not None:
        return yearly_cost
    daily_cost = _valid_cost(daily)
    if daily_cost:
        return daily_cost * DAYS_PER_YEAR
    return None


def _as_lookup(source: LocationCostSource) -> tuple[LocationCostLookup, bool]:
    """Normalise any supported source to ``lookup(state, county)``.

    The flag is True for callables, whose lookups may block on I/O.
    """
    if source is None:
        return (lambda state, county: None), False

    if callable(source) and not isinstance(source, Mapping):
        return source, True

    by_key: dict[LocationKey, Any] = {}
    by_doc_id: dict[str, Any] = {}
    if isinstance(source, Mapping):
        for raw_key, entry in source.items():
            if isinstance(raw_key, LocationKey):
                by_key[raw_key] = entry
            elif isinstance(raw_key, tuple) and len(raw_key) == 2:
                by_key[LocationKey(state=raw_key[0], county=raw_key[1])] = entry
            elif isinstance(raw_key, str):
                by_doc_id[raw_key] = entry
    else:
        for record in source:
            by_key[record.key] = record

    def lookup(state: str, county: str) -> Any:
        key = LocationKey(state=state, county=county)
        if key in by_key:
            return by_key[key]
        return by_doc_id.get(key.doc_id)

    return lookup, False


class CostBaselineResolver:
    """Resolve yearly institutional-care costs for the locations in one report.

    A resolver is created per report run; its memo table lives and dies with
    it, so concurrent report runs never share state.

    Attributes:
        default_yearly_cost: Baseline used when a location has no usable cost
        defaulted: Locations that fell back to the default
        failed: Locations whose lookup raised
        lookups_issued: Number of calls made to the underlying source
    """

    def __init__(
        self,
        source: LocationCostSource,
        default_yearly_cost: Decimal,
        *,
        max_workers: int = 8,
    ):
        self.default_yearly_cost = default_yearly_cost
        self.max_workers = max_workers
        self._lookup, self._blocking = _as_lookup(source)
        self._memo: dict[LocationKey, Decimal] = {}
        self.defaulted: set[LocationKey] = set()
        self.failed: set[LocationKey] = set()
        self.lookups_issued = 0

    def _fetch(self, key: LocationKey) -> Any:
        self.lookups_issued += 1
        return self._lookup(key.state, key.county)

    def _settle(self, key: LocationKey, entry: Any) -> Decimal:
        cost = yearly_cost_from_entry(entry)
        if cost is None:
            self.defaulted.add(key)
            cost = self.default_yearly_cost
        self._memo[key] = cost
        return cost

    def _record_failure(self, key: LocationKey, error: Exception) -> None:
        self.failed.add(key)
        logger.warning(
            "location_cost_lookup_failed",
            location=key.doc_id,
            error=str(error),
        )

    def resolve_all(self, keys: Iterable[LocationKey]) -> dict[LocationKey, Decimal]:
        """Resolve every location, issuing outstanding lookups concurrently.

        Waits for all lookups to finish. A lookup that raises resolves to
        the default baseline.
        """
        wanted = list(dict.fromkeys(keys))
        pending = [key for key in wanted if key not in self._memo]

        if pending and self._blocking and len(pending) > 1:
            workers = min(self.max_workers, len(pending))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = {key: pool.submit(self._lookup, key.state, key.county) for key in pending}
                self.lookups_issued += len(futures)
                for key, future in futures.items():
                    try:
                        entry = future.result()
                    except Exception as e:
                        self._record_failure(key, e)
                        entry = None
                    self._settle(key, entry)
        else:
            for key in pending:
                self.resolve(key)

        logger.debug(
            "location_costs_resolved",
            locations=len(wanted),
            lookups=self.lookups_issued,
            defaulted=len(self.defaulted),
        )
        return {key: self._memo[key] for key in wanted}

    def resolve(self, key: LocationKey) -> Decimal:
        """Yearly baseline for a single location."""
        if key in self._memo:
            return self._memo[key]
        try:
            entry = self._fetch(key)
        except Exception as e:
            self._record_failure(key, e)
            entry = None
        return self._settle(key, entry)
