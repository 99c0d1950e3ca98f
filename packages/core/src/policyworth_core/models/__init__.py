"""Data models for policyworth-core.

This package provides the structures that flow through the impact engine:
- Tally records, service codes and location cost reference data (tally.py)
- Reporting period variants and the resolved date range (period.py)
- Per-service aggregates, tax breakdown and the final report (report.py)
"""

from policyworth_core.models.tally import (
    SERVICE_LABELS,
    LocationCostRecord,
    LocationKey,
    ServiceCode,
    TallyRecord,
)
from policyworth_core.models.period import (
    DAYS_PER_YEAR,
    CustomPeriod,
    DateRange,
    PeriodSpec,
    QuarterPeriod,
    YearPeriod,
    YearToDatePeriod,
)
from policyworth_core.models.report import (
    AuditEntry,
    ReportResult,
    ReportWarning,
    ServiceAggregate,
    TaxBreakdown,
    WarningCode,
    allocate_impact,
)

__all__ = [
    # Tallies and reference data
    "SERVICE_LABELS",
    "LocationCostRecord",
    "LocationKey",
    "ServiceCode",
    "TallyRecord",
    # Periods
    "DAYS_PER_YEAR",
    "CustomPeriod",
    "DateRange",
    "PeriodSpec",
    "QuarterPeriod",
    "YearPeriod",
    "YearToDatePeriod",
    # Report
    "AuditEntry",
    "ReportResult",
    "ReportWarning",
    "ServiceAggregate",
    "TaxBreakdown",
    "WarningCode",
    "allocate_impact",
]
