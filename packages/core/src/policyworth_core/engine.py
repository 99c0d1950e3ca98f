"""Economic impact report assembly.

The engine runs one report as a single deterministic pass:

1. Validate the service selection and resolve the period
2. Check the calculation parameters (fails closed)
3. Select matching tallies and the distinct locations they reference
4. Look up every location's cost baseline concurrently
5. Fold tallies per service, compute savings, then taxes
6. Rank services and write narratives

Fatal problems raise before any aggregation. Non-fatal ones are attached to
the result as warnings.
"""

import datetime as dt
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

import structlog

from .aggregator import TallyAggregator, normalize_services
from .baselines import CostBaselineResolver, LocationCostSource
from .calculator import SavingsCalculator, TaxAllocator
from .config import EngineSettings, validate_config_params
from .exceptions import ValidationError
from .models.period import PeriodSpec
from .models.report import AuditEntry, ReportResult, ReportWarning, WarningCode
from .models.tally import ServiceCode, TallyRecord
from .narratives import build_narratives
from .periods import period_label, resolve_period
from .ranking import rank_services

logger = structlog.get_logger()

TallyInput = Union[TallyRecord, Mapping[str, Any]]


def _coerce_records(tally_records: Iterable[TallyInput]) -> tuple[list[TallyRecord], int]:
    """Turn tally inputs into records, skipping documents that cannot form one.

    Returns the records and the number of documents skipped.
    """
    records: list[TallyRecord] = []
    invalid = 0
    for item in tally_records:
        if isinstance(item, TallyRecord):
            records.append(item)
            continue
        try:
            records.append(TallyRecord.from_document(item))
        except ValidationError as e:
            invalid += 1
            logger.debug("tally_document_skipped", field=e.field, error=e.message)
    if invalid:
        logger.warning("tally_documents_invalid", skipped=invalid)
    return records, invalid


class ImpactReportEngine:
    """
    Build economic impact reports from service-delivery tallies.

    The engine holds only immutable settings. Everything computed during a
    run, including the location cost memo, is local to that run, so one
    engine can serve concurrent report requests.

    Example:
        engine = ImpactReportEngine()
        result = engine.run(
            YearPeriod(year=2024),
            [ServiceCode.CASE_MANAGEMENT],
            params,
            records,
            location_costs,
        )
        print(result.economic_impact)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize the engine.

        Args:
            settings: Engine settings (default: loaded from the environment)
        """
        self.settings = settings or EngineSettings()

    def run(
        self,
        period: PeriodSpec,
        selected_services: Sequence[Union[ServiceCode, str]],
        config_params: Optional[Mapping[str, Any]],
        tally_records: Iterable[TallyInput],
        location_costs: LocationCostSource = None,
        *,
        today: Optional[dt.date] = None,
    ) -> ReportResult:
        """
        Run one report.

        Args:
            period: Reporting period to cover
            selected_services: Services to report on, in display order
            config_params: Calculation parameters; when None the parameters
                from the engine settings are used
            tally_records: Tally records or stored tally documents
            location_costs: Location cost mapping, records or lookup callable
            today: Anchor date for year-to-date periods

        Returns:
            The assembled ReportResult

        Raises:
            ValidationError: Empty or unknown service selection, or invalid period
            ConfigurationError: Missing or non-numeric calculation parameters
        """
        audit_log: list[AuditEntry] = []

        def log_step(
            step: str,
            input_value: str,
            output_value: str,
            source: str,
            notes: Optional[str] = None,
        ) -> None:
            audit_log.append(
                AuditEntry(
                    step=step,
                    input_value=input_value,
                    output_value=output_value,
                    source=source,
                    notes=notes,
                )
            )
            logger.debug(
                "calculation_step",
                step=step,
                input=input_value,
                output=output_value,
                source=source,
            )

        # Step 1: Selection and period
        services = normalize_services(selected_services)
        date_range = resolve_period(period, today)
        label = period_label(period, today)
        log_step(
            step="period",
            input_value=label,
            output_value=f"{date_range} ({date_range.days} days)",
            source="Period resolution",
            notes=f"period fraction {date_range.period_fraction}",
        )

        # Step 2: Parameters
        params, warnings = validate_config_params(
            self.settings.params if config_params is None else config_params,
            split_share_tolerance=self.settings.split_share_tolerance,
        )

        # Step 3: Select tallies
        records, invalid = _coerce_records(tally_records)
        if invalid:
            warnings.append(
                ReportWarning(
                    code=WarningCode.INVALID_TALLY,
                    message=f"{invalid} tally document(s) could not be read and were left out",
                    details={"skipped": invalid},
                )
            )
        aggregator = TallyAggregator(services, date_range)
        selection = aggregator.select(records)
        log_step(
            step="tally_selection",
            input_value=f"{len(records)} records",
            output_value=f"{len(selection.records)} matching records",
            source="Tally records",
            notes=f"{len(selection.locations)} distinct locations",
        )
        if selection.skipped_missing_location:
            warnings.append(
                ReportWarning(
                    code=WarningCode.MISSING_LOCATION,
                    message=(
                        f"{selection.skipped_missing_location} matching record(s) "
                        "had no state or county and were left out"
                    ),
                    details={"skipped": selection.skipped_missing_location},
                )
            )

        # Step 4: Location baselines
        resolver = CostBaselineResolver(
            location_costs,
            params.default_institutional_yearly_cost,
            max_workers=self.settings.lookup_max_workers,
        )
        baselines = resolver.resolve_all(selection.locations)
        if resolver.defaulted:
            warnings.append(
                ReportWarning(
                    code=WarningCode.DEFAULT_LOCATION_COST,
                    message=(
                        f"{len(resolver.defaulted)} location(s) used the default "
                        f"institutional cost of {params.default_institutional_yearly_cost}"
                    ),
                    details={"locations": tuple(sorted(k.doc_id for k in resolver.defaulted))},
                )
            )
        if resolver.failed:
            warnings.append(
                ReportWarning(
                    code=WarningCode.LOCATION_LOOKUP_FAILED,
                    message=f"Cost lookup failed for {len(resolver.failed)} location(s)",
                    details={"locations": tuple(sorted(k.doc_id for k in resolver.failed))},
                )
            )

        # Step 5: Savings and taxes
        savings = SavingsCalculator(params.taxpayer_multiplier)
        buckets = aggregator.fold(selection.records, baselines, savings.record_avoided_cost)
        per_service = savings.finalize(buckets, date_range)
        taxpayer_savings_base, multiplied_savings = savings.totals(per_service)
        log_step(
            step="taxpayer_savings_base",
            input_value=", ".join(f"{s.value}={a.saved_base}" for s, a in per_service.items()),
            output_value=str(taxpayer_savings_base),
            source="Sum of base savings",
        )
        log_step(
            step="multiplied_savings",
            input_value=f"{taxpayer_savings_base} x {params.taxpayer_multiplier}",
            output_value=str(multiplied_savings),
            source="Taxpayer multiplier",
        )

        allocation = TaxAllocator(params).allocate(multiplied_savings)
        log_step(
            step="taxes",
            input_value=(
                f"{multiplied_savings} x ({params.federal_tax_rate}, "
                f"{params.state_tax_rate}, {params.local_tax_rate})"
            ),
            output_value=(
                f"federal={allocation.taxes.federal}, state={allocation.taxes.state}, "
                f"local={allocation.taxes.local}"
            ),
            source="Configured tax rates",
        )
        log_step(
            step="economic_impact",
            input_value=f"{multiplied_savings} + {allocation.taxes.total}",
            output_value=str(allocation.economic_impact),
            source="Multiplied savings plus taxes",
        )

        # Step 6: Presentation
        ranked = rank_services(services, per_service)
        narratives = build_narratives(
            services, per_service, multiplied_savings, allocation.taxes.total
        )

        yes_total = sum(a.yes for a in per_service.values())
        no_total = sum(a.no for a in per_service.values())

        result = ReportResult(
            range=date_range,
            period_label=label,
            selected_services=services,
            clients_total=yes_total + no_total,
            yes_total=yes_total,
            no_total=no_total,
            record_count=len(selection.records),
            location_count=len(selection.locations),
            locations_using_default=len(resolver.defaulted),
            per_service=per_service,
            taxpayer_savings_base=taxpayer_savings_base,
            multiplied_savings=multiplied_savings,
            taxes=allocation.taxes,
            economic_impact=allocation.economic_impact,
            state_share=allocation.state_share,
            federal_share=allocation.federal_share,
            ranked_services=ranked,
            headline_count=self.settings.headline_count,
            narratives=narratives,
            warnings=warnings,
            audit_log=audit_log,
        )

        logger.info(
            "report_completed",
            period=label,
            records=result.record_count,
            locations=result.location_count,
            economic_impact=str(result.economic_impact),
            warnings=len(warnings),
        )
        return result


def run_report(
    period: PeriodSpec,
    selected_services: Sequence[Union[ServiceCode, str]],
    config_params: Mapping[str, Any],
    tally_records: Iterable[TallyInput],
    location_costs: LocationCostSource = None,
    *,
    today: Optional[dt.date] = None,
    settings: Optional[EngineSettings] = None,
) -> ReportResult:
    """Run one economic impact report with a throwaway engine."""
    engine = ImpactReportEngine(settings)
    return engine.run(
        period,
        selected_services,
        config_params,
        tally_records,
        location_costs,
        today=today,
    )
