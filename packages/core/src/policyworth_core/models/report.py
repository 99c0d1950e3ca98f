"""Economic impact report models.

These models are built once per report run and never mutated afterwards;
running the report again returns a new ReportResult. Collections on a result
are tuples and read-only mappings, so the object can be shared between
consumers.
"""

from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .period import DateRange
from .tally import ServiceCode

ZERO = Decimal("0")


class ServiceAggregate(BaseModel):
    """Totals for one service over the reporting range.

    Attributes:
        yes: Clients who accepted the service
        no: Clients who declined the service
        saved_base: Avoided institutional cost before the multiplier
        saved_adjusted: saved_base scaled by the taxpayer multiplier
        record_count: Tally records folded into this service
    """

    model_config = ConfigDict(frozen=True)

    yes: int = Field(default=0, ge=0)
    no: int = Field(default=0, ge=0)
    saved_base: Decimal = Field(default=ZERO, ge=0)
    saved_adjusted: Decimal = Field(default=ZERO, ge=0)
    record_count: int = Field(default=0, ge=0)

    @property
    def clients(self) -> int:
        """Clients recorded for this service."""
        return self.yes + self.no


class TaxBreakdown(BaseModel):
    """Tax revenue generated by the multiplied savings."""

    model_config = ConfigDict(frozen=True)

    federal: Decimal = ZERO
    state: Decimal = ZERO
    local: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        """Sum of federal, state and local tax."""
        return self.federal + self.state + self.local


class WarningCode(str, Enum):
    """Non-fatal conditions attached to a finished report."""

    SPLIT_SHARE_MISMATCH = "split_share_mismatch"
    DEFAULT_LOCATION_COST = "default_location_cost"
    LOCATION_LOOKUP_FAILED = "location_lookup_failed"
    MISSING_LOCATION = "missing_location"
    INVALID_TALLY = "invalid_tally"


def _read_only(value: Mapping) -> Mapping:
    return MappingProxyType(dict(value))


class ReportWarning(BaseModel):
    """A non-fatal condition noticed while building the report."""

    model_config = ConfigDict(frozen=True)

    code: WarningCode
    message: str
    details: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("details")
    @classmethod
    def freeze_details(cls, v):
        """Expose details as a read-only mapping."""
        return _read_only(v)

    @field_serializer("details")
    def serialize_details(self, v):
        return dict(v)


class AuditEntry(BaseModel):
    """One step of the calculation, kept for the report's audit trail."""

    model_config = ConfigDict(frozen=True)

    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class ReportResult(BaseModel):
    """Complete economic impact report for one period and service selection.

    ``per_service`` holds an entry for every selected service, in selection
    order, including services with no matching records. Sequences are stored
    as tuples and ``per_service`` and ``narratives`` as read-only mappings.
    """

    model_config = ConfigDict(frozen=True)

    range: DateRange
    period_label: str
    selected_services: tuple[ServiceCode, ...]

    # Counts
    clients_total: int = Field(ge=0)
    yes_total: int = Field(ge=0)
    no_total: int = Field(ge=0)
    record_count: int = Field(ge=0)
    location_count: int = Field(ge=0)
    locations_using_default: int = Field(ge=0)

    # Money
    per_service: Mapping[ServiceCode, ServiceAggregate]
    taxpayer_savings_base: Decimal
    multiplied_savings: Decimal
    taxes: TaxBreakdown
    economic_impact: Decimal
    state_share: Decimal
    federal_share: Decimal

    # Presentation
    ranked_services: tuple[ServiceCode, ...]
    headline_count: int = 2
    narratives: Mapping[ServiceCode, str] = Field(default_factory=dict, validate_default=True)

    warnings: tuple[ReportWarning, ...] = ()
    audit_log: tuple[AuditEntry, ...] = ()

    @field_validator("per_service", "narratives")
    @classmethod
    def freeze_mappings(cls, v):
        """Expose per-service mappings read-only."""
        return _read_only(v)

    @field_serializer("per_service", "narratives")
    def serialize_mappings(self, v):
        return dict(v)

    @property
    def headline_services(self) -> tuple[ServiceCode, ...]:
        """Top services for the headline callouts."""
        return self.ranked_services[: self.headline_count]

    @property
    def run_note(self) -> str:
        """Status line summarising what the report was built from."""
        return (
            f"Report updated • {self.record_count:,} entries across "
            f"{self.location_count} location(s)."
        )

    def allocated_impact(self, service: ServiceCode) -> Decimal:
        """Multiplied savings of a service plus its proportional share of tax."""
        aggregate = self.per_service.get(service)
        if aggregate is None:
            return ZERO
        return allocate_impact(
            aggregate.saved_adjusted, self.multiplied_savings, self.taxes.total
        )

    def impact_composition(self) -> dict[str, Decimal]:
        """Four-way breakdown of the economic impact for composition charts."""
        return {
            "multiplied_savings": self.multiplied_savings,
            "federal_tax": self.taxes.federal,
            "state_tax": self.taxes.state,
            "local_tax": self.taxes.local,
        }

    def has_warning(self, code: WarningCode) -> bool:
        """True if a warning with this code was attached."""
        return any(w.code == code for w in self.warnings)


def allocate_impact(
    saved_adjusted: Decimal, multiplied_savings: Decimal, total_tax: Decimal
) -> Decimal:
    """Allocate total tax to one service in proportion to its multiplied savings.

    Returns the service's multiplied savings plus its tax share. The share is
    zero when there are no multiplied savings to apportion.
    """
    if multiplied_savings <= 0:
        return saved_adjusted
    return saved_adjusted + saved_adjusted / multiplied_savings * total_tax
