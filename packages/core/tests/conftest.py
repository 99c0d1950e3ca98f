"""Shared fixtures for policyworth-core tests."""

from datetime import date
from decimal import Decimal

import pytest

from policyworth_core.config import EngineSettings
from policyworth_core.models import LocationCostRecord, ServiceCode, TallyRecord


@pytest.fixture
def config_params() -> dict:
    """A complete parameter set as stored by the settings page."""
    return {
        "defaultInstitutionalYearlyCost": "60000",
        "taxpayerMultiplier": "1.5",
        "federalTaxRate": "0.275",
        "stateTaxRate": "0.04375",
        "localTaxRate": "0.01125",
        "stateSplitShare": "0.5",
        "federalSplitShare": "0.5",
    }


@pytest.fixture
def settings() -> EngineSettings:
    """Engine settings that ignore the environment's calculation params."""
    return EngineSettings(env="test", params={})


@pytest.fixture
def location_costs() -> list[LocationCostRecord]:
    """Reference data with a baseline for Sarasota only."""
    return [
        LocationCostRecord(
            state="FL",
            county="Sarasota",
            yearly_institutional_cost=Decimal("68000"),
            source="State survey",
            effective_year=2023,
        ),
    ]


@pytest.fixture
def tally_records() -> list[TallyRecord]:
    """Tallies spanning two counties, three services and two years."""
    return [
        TallyRecord(
            date=date(2023, 2, 1),
            state="FL",
            county="Sarasota",
            service=ServiceCode.CASE_MANAGEMENT,
            yearly_program_cost=Decimal("12000"),
            yes_count=10,
            no_count=2,
        ),
        TallyRecord(
            date=date(2023, 5, 5),
            state="FL",
            county="Manatee",
            service=ServiceCode.HOME_DELIVERED_MEALS,
            yearly_program_cost=Decimal("6000"),
            yes_count=5,
            no_count=1,
        ),
        TallyRecord(
            date=date(2023, 8, 1),
            state="fl",
            county=" Sarasota ",
            service=ServiceCode.CAREGIVER_RESPITE,
            yearly_program_cost=Decimal("70000"),
            yes_count=3,
            no_count=0,
        ),
        TallyRecord(
            date=date(2022, 12, 31),
            state="FL",
            county="Sarasota",
            service=ServiceCode.CASE_MANAGEMENT,
            yearly_program_cost=Decimal("12000"),
            yes_count=100,
            no_count=0,
        ),
        TallyRecord(
            date=date(2023, 3, 3),
            state="FL",
            county="Sarasota",
            service=ServiceCode.CRISIS_INTERVENTION,
            yearly_program_cost=Decimal("1000"),
            yes_count=7,
            no_count=7,
        ),
    ]
