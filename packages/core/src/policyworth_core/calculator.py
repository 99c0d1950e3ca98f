"""Savings and tax calculations for the economic impact report.

Savings are computed per record from the gap between the institutional
baseline and the program's own yearly cost, prorated to the reporting
period, then scaled by the taxpayer multiplier. Taxes are levied on the
multiplied figure, never on the base figure.
"""

from decimal import Decimal
from typing import Mapping, NamedTuple

from .aggregator import ServiceBucket
from .config import ImpactParameters
from .models.period import DateRange
from .models.report import ServiceAggregate, TaxBreakdown
from .models.tally import ServiceCode, TallyRecord

ZERO = Decimal("0")


class SavingsCalculator:
    """
    Convert aggregated tallies into base and multiplier-adjusted savings.

    Every accepted client avoids the institutional baseline minus the
    program's cost for the fraction of a year covered by the report. A
    program dearer than the baseline avoids nothing; savings never go
    negative.
    """

    def __init__(self, taxpayer_multiplier: Decimal):
        self.taxpayer_multiplier = taxpayer_multiplier

    @staticmethod
    def avoided_per_year(baseline_yearly_cost: Decimal, program_yearly_cost: Decimal) -> Decimal:
        """Yearly cost avoided by one client, floored at zero."""
        return max(ZERO, baseline_yearly_cost - program_yearly_cost)

    def record_avoided_cost(self, record: TallyRecord, baseline_yearly_cost: Decimal) -> Decimal:
        """Yearly cost avoided by a record's accepted clients, before proration."""
        avoided = self.avoided_per_year(baseline_yearly_cost, record.yearly_program_cost)
        return record.yes_count * avoided

    def finalize(
        self,
        buckets: Mapping[ServiceCode, ServiceBucket],
        date_range: DateRange,
    ) -> dict[ServiceCode, ServiceAggregate]:
        """Prorate each bucket to the period and apply the multiplier."""
        aggregates: dict[ServiceCode, ServiceAggregate] = {}
        for service, bucket in buckets.items():
            saved_base = max(ZERO, date_range.prorate(bucket.avoided_yearly))
            saved_adjusted = max(ZERO, saved_base * self.taxpayer_multiplier)
            aggregates[service] = ServiceAggregate(
                yes=bucket.yes,
                no=bucket.no,
                saved_base=saved_base,
                saved_adjusted=saved_adjusted,
                record_count=bucket.record_count,
            )
        return aggregates

    @staticmethod
    def totals(aggregates: Mapping[ServiceCode, ServiceAggregate]) -> tuple[Decimal, Decimal]:
        """Sum base and multiplied savings across services."""
        base = sum((a.saved_base for a in aggregates.values()), ZERO)
        multiplied = sum((a.saved_adjusted for a in aggregates.values()), ZERO)
        return base, multiplied


class TaxAllocation(NamedTuple):
    """Taxes and totals derived from the multiplied savings."""

    taxes: TaxBreakdown
    economic_impact: Decimal
    state_share: Decimal
    federal_share: Decimal


class TaxAllocator:
    """Derive tax revenue and total economic impact from multiplied savings."""

    def __init__(self, params: ImpactParameters):
        self.params = params

    def allocate(self, multiplied_savings: Decimal) -> TaxAllocation:
        """
        Apply the federal, state and local rates to the multiplied savings.

        Economic impact is the multiplied savings plus all three taxes. The
        state and federal split shares are informational and are not part of
        the economic impact.
        """
        taxes = TaxBreakdown(
            federal=multiplied_savings * self.params.federal_tax_rate,
            state=multiplied_savings * self.params.state_tax_rate,
            local=multiplied_savings * self.params.local_tax_rate,
        )
        return TaxAllocation(
            taxes=taxes,
            economic_impact=multiplied_savings + taxes.federal + taxes.state + taxes.local,
            state_share=multiplied_savings * self.params.state_split_share,
            federal_share=multiplied_savings * self.params.federal_split_share,
        )
