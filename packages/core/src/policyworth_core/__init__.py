"""PolicyWorth Core - Economic impact calculations for social-care services."""

__version__ = "0.1.0"

from .engine import ImpactReportEngine, run_report
from .config import EngineSettings, ImpactParameters, validate_config_params
from .exceptions import ConfigurationError, PolicyWorthError, ValidationError
from .models import (
    CustomPeriod,
    DateRange,
    LocationCostRecord,
    LocationKey,
    QuarterPeriod,
    ReportResult,
    ReportWarning,
    ServiceAggregate,
    ServiceCode,
    TallyRecord,
    TaxBreakdown,
    WarningCode,
    YearPeriod,
    YearToDatePeriod,
)
from .periods import period_label, resolve_period
from .baselines import CostBaselineResolver
from .aggregator import TallyAggregator
from .calculator import SavingsCalculator, TaxAllocator
from .ranking import rank_services
from .narratives import format_usd, generate_narrative

__all__ = [
    # Engine
    "ImpactReportEngine",
    "run_report",
    # Configuration
    "EngineSettings",
    "ImpactParameters",
    "validate_config_params",
    # Errors
    "ConfigurationError",
    "PolicyWorthError",
    "ValidationError",
    # Models
    "CustomPeriod",
    "DateRange",
    "LocationCostRecord",
    "LocationKey",
    "QuarterPeriod",
    "ReportResult",
    "ReportWarning",
    "ServiceAggregate",
    "ServiceCode",
    "TallyRecord",
    "TaxBreakdown",
    "WarningCode",
    "YearPeriod",
    "YearToDatePeriod",
    # Components
    "period_label",
    "resolve_period",
    "CostBaselineResolver",
    "TallyAggregator",
    "SavingsCalculator",
    "TaxAllocator",
    "rank_services",
    "format_usd",
    "generate_narrative",
]
