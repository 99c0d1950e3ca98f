"""Tests for tally, location and report models."""

from datetime import date
from decimal import Decimal

import pydantic
import pytest

from policyworth_core.exceptions import ValidationError
from policyworth_core.models import (
    DateRange,
    LocationCostRecord,
    LocationKey,
    ReportWarning,
    ServiceCode,
    TallyRecord,
    TaxBreakdown,
    WarningCode,
    allocate_impact,
)


class TestServiceCode:
    """Tests for ServiceCode enum."""

    def test_codes_match_stored_values(self):
        """Enum values are the codes stored with each tally."""
        assert ServiceCode.CASE_MANAGEMENT.value == "case_mgmt"
        assert ServiceCode.HOME_DELIVERED_MEALS.value == "hdm"
        assert ServiceCode.CAREGIVER_RESPITE.value == "caregiver_respite"
        assert ServiceCode.CRISIS_INTERVENTION.value == "crisis_intervention"

    def test_every_code_has_label(self):
        """Each service has a display label."""
        assert ServiceCode.HOME_DELIVERED_MEALS.label == "Home-Delivered Meals"
        assert all(code.label for code in ServiceCode)

    def test_is_string_enum(self):
        """ServiceCode compares equal to its stored string."""
        assert ServiceCode.CASE_MANAGEMENT == "case_mgmt"


class TestTallyRecord:
    """Tests for TallyRecord model."""

    def test_create_record(self):
        """Should create a record and coerce numeric inputs."""
        record = TallyRecord(
            date=date(2024, 1, 5),
            state=" FL ",
            county="Sarasota",
            service="hdm",
            yearly_program_cost=6000.5,
            yes_count=4,
            no_count=1,
        )

        assert record.service == ServiceCode.HOME_DELIVERED_MEALS
        assert record.state == "FL"
        assert record.yearly_program_cost == Decimal("6000.5")
        assert record.clients == 5
        assert record.has_location

    def test_record_is_immutable(self):
        """Records cannot be modified after creation."""
        record = TallyRecord(date=date(2024, 1, 5), service="hdm")

        with pytest.raises(pydantic.ValidationError):
            record.yes_count = 3

    def test_negative_counts_rejected(self):
        """Counts and costs must be non-negative."""
        with pytest.raises(pydantic.ValidationError):
            TallyRecord(date=date(2024, 1, 5), service="hdm", yes_count=-1)

        with pytest.raises(pydantic.ValidationError):
            TallyRecord(date=date(2024, 1, 5), service="hdm", yearly_program_cost="-5")

    def test_missing_location(self):
        """A record without a county has no location."""
        record = TallyRecord(date=date(2024, 1, 5), service="hdm", state="FL", county=None)
        assert not record.has_location

    def test_from_document_data_entry_shape(self):
        """Stored tally documents map onto the record fields."""
        record = TallyRecord.from_document(
            {
                "date": "2024-03-09",
                "state": "FL",
                "county": "Manatee",
                "service": "caregiver_respite",
                "avgCostYear": "9000",
                "yes": 6,
                "no": "2",
            }
        )

        assert record.date == date(2024, 3, 9)
        assert record.service == ServiceCode.CAREGIVER_RESPITE
        assert record.yearly_program_cost == Decimal("9000")
        assert record.yes_count == 6
        assert record.no_count == 2

    def test_from_document_rejects_bad_document(self):
        """Malformed documents raise the engine's ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            TallyRecord.from_document({"date": "not a date", "service": "hdm"})

        assert exc_info.value.field == "date"

    def test_from_document_rejects_unknown_service(self):
        """Free-text services are not accepted."""
        with pytest.raises(ValidationError):
            TallyRecord.from_document({"date": "2024-03-09", "service": "yoga"})


class TestLocationKey:
    """Tests for LocationKey normalisation."""

    def test_state_case_insensitive(self):
        """State is upper-cased so matching ignores case."""
        assert LocationKey(state="fl", county="Sarasota") == LocationKey(
            state="FL", county="Sarasota"
        )

    def test_county_trimmed_but_case_sensitive(self):
        """County is trimmed but otherwise matched exactly."""
        assert LocationKey(state="FL", county=" Sarasota ") == LocationKey(
            state="FL", county="Sarasota"
        )
        assert LocationKey(state="FL", county="sarasota") != LocationKey(
            state="FL", county="Sarasota"
        )

    def test_hashable(self):
        """Keys can be used in sets and as dict keys."""
        keys = {LocationKey(state="FL", county="Lee"), LocationKey(state="fl", county="Lee")}
        assert len(keys) == 1

    def test_doc_id(self):
        """Document ids slug the county name."""
        assert LocationKey(state="fl", county="Miami-Dade").doc_id == "FL__Miami_Dade"
        assert LocationKey(state="NY", county="St. Lawrence").doc_id == "NY__St_Lawrence"


class TestLocationCostRecord:
    """Tests for LocationCostRecord model."""

    def test_absent_cost_is_valid(self):
        """A record may omit its cost."""
        record = LocationCostRecord(state="FL", county="Lee")
        assert record.yearly_institutional_cost is None
        assert record.key == LocationKey(state="FL", county="Lee")

    def test_cost_coerced(self):
        """Numeric strings become Decimal."""
        record = LocationCostRecord(state="FL", county="Lee", daily_institutional_cost="210.5")
        assert record.daily_institutional_cost == Decimal("210.5")


class TestReportHelpers:
    """Tests for small report model helpers."""

    def test_tax_total(self):
        """Tax total sums all three levels."""
        taxes = TaxBreakdown(federal=Decimal("10"), state=Decimal("2"), local=Decimal("1"))
        assert taxes.total == Decimal("13")

    def test_allocate_impact(self):
        """A service receives tax in proportion to its multiplied savings."""
        assert allocate_impact(Decimal("300"), Decimal("1000"), Decimal("100")) == Decimal("330")

    def test_allocate_impact_without_savings(self):
        """No multiplied savings means no tax to allocate."""
        assert allocate_impact(Decimal("0"), Decimal("0"), Decimal("0")) == Decimal("0")

    def test_date_range_str(self):
        """Ranges print as from → to."""
        rng = DateRange(from_date=date(2024, 1, 1), to_date=date(2024, 3, 31), days=91)
        assert str(rng) == "2024-01-01 → 2024-03-31"

    def test_warning_model(self):
        """Warnings carry a code and message."""
        warning = ReportWarning(code=WarningCode.MISSING_LOCATION, message="1 skipped")
        assert warning.details == {}

    def test_warning_details_are_read_only(self):
        """Details passed in are copied into a read-only mapping."""
        details = {"skipped": 2}
        warning = ReportWarning(code=WarningCode.INVALID_TALLY, message="2 skipped", details=details)

        details["skipped"] = 5
        assert warning.details["skipped"] == 2
        with pytest.raises(TypeError):
            warning.details["skipped"] = 3
        assert warning.model_dump()["details"] == {"skipped": 2}
