"""Service-delivery tally and location reference-data models.

This module provides the read-only inputs of the impact engine:
- Service codes offered by the reporting agency
- Tally records logged by data-entry staff
- Location keys and their institutional-care cost baselines
"""

import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


class ServiceCode(str, Enum):
    """Services whose outcomes are tallied.

    Values are the codes stored by the data-entry collaborator. Adding a
    service means adding a member here together with its label and
    narrative template.
    """

    CASE_MANAGEMENT = "case_mgmt"
    HOME_DELIVERED_MEALS = "hdm"
    CAREGIVER_RESPITE = "caregiver_respite"
    CRISIS_INTERVENTION = "crisis_intervention"

    @property
    def label(self) -> str:
        """Display name of the service."""
        return SERVICE_LABELS[self]


SERVICE_LABELS: dict[ServiceCode, str] = {
    ServiceCode.CASE_MANAGEMENT: "Case Management",
    ServiceCode.HOME_DELIVERED_MEALS: "Home-Delivered Meals",
    ServiceCode.CAREGIVER_RESPITE: "Caregiver Respite",
    ServiceCode.CRISIS_INTERVENTION: "Crisis Intervention",
}


def coerce_decimal(value: Any) -> Any:
    """Coerce floats, ints and numeric strings to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion. Anything else is returned unchanged for
    pydantic to reject.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return value
    return value


class TallyRecord(BaseModel):
    """One logged observation of clients accepting or declining a service.

    Records are created by data-entry collaborators and consumed read-only.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "date": "2024-02-14",
                    "state": "FL",
                    "county": "Sarasota",
                    "service": "case_mgmt",
                    "yearly_program_cost": "12000",
                    "yes_count": 10,
                    "no_count": 2,
                }
            ]
        },
    )

    date: dt.date = Field(description="Date the outcome was observed")
    state: str = Field(default="", description="State of the client's location")
    county: str = Field(default="", description="County of the client's location")
    service: ServiceCode = Field(description="Service that was offered")
    yearly_program_cost: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Yearly cost of delivering the service to one client",
    )
    yes_count: int = Field(default=0, ge=0, description="Clients who accepted")
    no_count: int = Field(default=0, ge=0, description="Clients who declined")

    @field_validator("yearly_program_cost", mode="before")
    @classmethod
    def coerce_cost_to_decimal(cls, v):
        """Coerce numeric cost inputs to Decimal."""
        return coerce_decimal(v)

    @field_validator("state", "county", mode="before")
    @classmethod
    def strip_location(cls, v):
        """Trim surrounding whitespace from location names."""
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def has_location(self) -> bool:
        """True when both state and county are filled in."""
        return bool(self.state) and bool(self.county)

    @property
    def location(self) -> "LocationKey":
        """Normalised location key of this record."""
        return LocationKey(state=self.state, county=self.county)

    @property
    def clients(self) -> int:
        """Total clients recorded, accepted plus declined."""
        return self.yes_count + self.no_count

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "TallyRecord":
        """Build a record from a stored tally document.

        Accepts the data-entry shape (``avgCostYear``, ``yes``, ``no``) as
        well as this model's own field names.

        Raises:
            ValidationError: If the document cannot form a valid record.
        """
        data = {
            "date": document.get("date"),
            "state": document.get("state"),
            "county": document.get("county"),
            "service": document.get("service"),
            "yearly_program_cost": _first_present(
                document, "yearly_program_cost", "yearlyProgramCost", "avgCostYear"
            ),
            "yes_count": _first_present(document, "yes_count", "yesCount", "yes"),
            "no_count": _first_present(document, "no_count", "noCount", "no"),
        }
        data = {k: v for k, v in data.items() if v is not None}
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValidationError(
                f"Invalid tally document: {', '.join(fields) or 'unknown field'}",
                field=fields[0] if fields else None,
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e


def _first_present(document: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if document.get(key) is not None:
            return document[key]
    return None


_SLUG_PATTERN = re.compile(r"[^A-Za-z0-9]+")


class LocationKey(BaseModel):
    """A (state, county) pair used to look up cost baselines.

    State matching is case-insensitive; county matching is exact after
    trimming.
    """

    model_config = ConfigDict(frozen=True)

    state: str
    county: str

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v):
        """Upper-case and trim the state."""
        return str(v or "").strip().upper()

    @field_validator("county", mode="before")
    @classmethod
    def normalize_county(cls, v):
        """Trim the county."""
        return str(v or "").strip()

    @property
    def doc_id(self) -> str:
        """Reference-data document id, e.g. ``FL__Miami_Dade``."""
        slug = _SLUG_PATTERN.sub("_", self.county).strip("_")
        return f"{self.state}__{slug}"

    def __str__(self) -> str:
        return f"{self.county}, {self.state}"


class LocationCostRecord(BaseModel):
    """Institutional-care cost reference data for one location.

    A missing yearly cost is legitimate and means the configured default
    baseline applies. When only a daily cost is known, the yearly baseline
    is the daily cost over a 365-day year.
    """

    model_config = ConfigDict(frozen=True)

    state: str
    county: str
    yearly_institutional_cost: Optional[Decimal] = Field(
        default=None,
        description="Yearly cost of the institutional alternative",
    )
    daily_institutional_cost: Optional[Decimal] = Field(
        default=None,
        description="Daily cost of the institutional alternative",
    )
    source: Optional[str] = Field(default=None, description="Where the figure came from")
    effective_year: Optional[int] = Field(default=None, description="Year the figure applies to")

    @field_validator("yearly_institutional_cost", "daily_institutional_cost", mode="before")
    @classmethod
    def coerce_cost_to_decimal(cls, v):
        """Coerce numeric cost inputs to Decimal."""
        return coerce_decimal(v)

    @property
    def key(self) -> LocationKey:
        """Normalised location key."""
        return LocationKey(state=self.state, county=self.county)
