#!/usr/bin/env python3
"""
Economic Impact Report Demonstration

This script demonstrates the complete reporting workflow:
1. Build tally records and county cost reference data
2. Run the impact report for a quarter
3. Print the headline figures, service table and narratives

Run: python examples/impact_report_demo.py
"""

from datetime import date
from decimal import Decimal

from policyworth_core import (
    ImpactReportEngine,
    LocationCostRecord,
    QuarterPeriod,
    ServiceCode,
    TallyRecord,
    format_usd,
)
from policyworth_core.config import EngineSettings
from policyworth_core.logging_config import configure_from_settings
from policyworth_core.narratives import service_label

PARAMS = {
    "defaultInstitutionalYearlyCost": "68000",
    "taxpayerMultiplier": "1.58",
    "federalTaxRate": "0.275",
    "stateTaxRate": "0.04375",
    "localTaxRate": "0.01125",
    "stateSplitShare": "0.4",
    "federalSplitShare": "0.6",
}


def create_sample_tallies() -> list[TallyRecord]:
    """Create a quarter's worth of tallies across three counties."""
    rows = [
        (date(2024, 1, 8), "FL", "Sarasota", ServiceCode.CASE_MANAGEMENT, "12000", 14, 3),
        (date(2024, 1, 22), "FL", "Manatee", ServiceCode.HOME_DELIVERED_MEALS, "4200", 22, 5),
        (date(2024, 2, 5), "FL", "Sarasota", ServiceCode.CAREGIVER_RESPITE, "9500", 9, 1),
        (date(2024, 2, 19), "FL", "Charlotte", ServiceCode.CRISIS_INTERVENTION, "15000", 4, 2),
        (date(2024, 3, 11), "FL", "Manatee", ServiceCode.CASE_MANAGEMENT, "12000", 11, 4),
        (date(2024, 3, 25), "FL", "Charlotte", ServiceCode.HOME_DELIVERED_MEALS, "4200", 17, 2),
    ]
    return [
        TallyRecord(
            date=day,
            state=state,
            county=county,
            service=service,
            yearly_program_cost=Decimal(cost),
            yes_count=yes,
            no_count=no,
        )
        for day, state, county, service, cost, yes, no in rows
    ]


def create_sample_costs() -> list[LocationCostRecord]:
    """County institutional-care costs; Charlotte is left to the default."""
    return [
        LocationCostRecord(
            state="FL",
            county="Sarasota",
            yearly_institutional_cost=Decimal("104000"),
            source="State Medicaid rate survey",
            effective_year=2024,
        ),
        LocationCostRecord(
            state="FL",
            county="Manatee",
            daily_institutional_cost=Decimal("265"),
            source="County nursing-home rates",
            effective_year=2024,
        ),
    ]


def main():
    """Run the impact report demonstration."""
    settings = EngineSettings()
    configure_from_settings(settings)

    print("=" * 70)
    print("POLICYWORTH CORE - Economic Impact Report Demo")
    print("=" * 70)
    print()

    print("Step 1: Creating sample tallies...")
    tallies = create_sample_tallies()
    costs = create_sample_costs()
    print(f"  - Tallies: {len(tallies)}")
    print(f"  - Counties with cost data: {len(costs)}")
    print()

    print("Step 2: Running report for Q1 2024...")
    engine = ImpactReportEngine(settings)
    result = engine.run(
        QuarterPeriod(year=2024, quarter=1),
        list(ServiceCode),
        PARAMS,
        tallies,
        costs,
    )
    print(f"  - Range: {result.range} ({result.range.days} days)")
    print(f"  - Clients: {result.clients_total:,} ({result.yes_total:,} yes / {result.no_total:,} no)")
    print(f"  - Taxpayer savings: ${result.taxpayer_savings_base:,.2f}")
    print(f"  - Multiplied savings: ${result.multiplied_savings:,.2f}")
    print(f"  - Federal / state / local tax: ${result.taxes.federal:,.2f} / "
          f"${result.taxes.state:,.2f} / ${result.taxes.local:,.2f}")
    print(f"  - Economic impact: ${result.economic_impact:,.2f}")
    print(f"  - {result.run_note}")
    print()

    print("Step 3: Service breakdown")
    for service in result.ranked_services:
        aggregate = result.per_service[service]
        print(
            f"  {service_label(service):<22} yes={aggregate.yes:<4} no={aggregate.no:<4} "
            f"saved={format_usd(aggregate.saved_base):<9} "
            f"impact={format_usd(result.allocated_impact(service))}"
        )
    print()

    print("Headline services: " + ", ".join(service_label(s) for s in result.headline_services))
    print()
    for service, text in result.narratives.items():
        print(f"{service_label(service)}:")
        print(f"  {text}")
        print()

    for warning in result.warnings:
        print(f"Note: {warning.message}")

    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
