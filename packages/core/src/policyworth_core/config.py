"""Configuration for the PolicyWorth impact engine.

Two layers live here:

1. The calculation parameters (multiplier, tax rates, split shares, default
   institutional cost). They are administrator-managed, have no defaults and
   are checked by :func:`validate_config_params`, which fails closed and
   reports every missing or non-numeric key in one error.
2. Engine settings (log level, headline count, lookup concurrency), loaded
   with Pydantic Settings from environment variables and ``.env`` files.

Usage:
    from policyworth_core.config import EngineSettings, validate_config_params

    settings = EngineSettings()
    params, warnings = validate_config_params(settings.params)
    print(params.taxpayer_multiplier)
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .models.report import ReportWarning, WarningCode

logger = structlog.get_logger()

# Stored (camelCase) name -> field name on ImpactParameters, in reporting order.
REQUIRED_PARAMS: dict[str, str] = {
    "defaultInstitutionalYearlyCost": "default_institutional_yearly_cost",
    "taxpayerMultiplier": "taxpayer_multiplier",
    "federalTaxRate": "federal_tax_rate",
    "stateTaxRate": "state_tax_rate",
    "localTaxRate": "local_tax_rate",
    "stateSplitShare": "state_split_share",
    "federalSplitShare": "federal_split_share",
}

DEFAULT_SPLIT_SHARE_TOLERANCE = Decimal("0.001")


class ImpactParameters(BaseModel):
    """Validated calculation parameters for one report run."""

    model_config = ConfigDict(frozen=True)

    default_institutional_yearly_cost: Decimal
    taxpayer_multiplier: Decimal
    federal_tax_rate: Decimal
    state_tax_rate: Decimal
    local_tax_rate: Decimal
    state_split_share: Decimal
    federal_split_share: Decimal


def parse_number(value: Any) -> Optional[Decimal]:
    """Read a finite number from an int, float, Decimal or numeric string.

    Returns None for anything else, including booleans, NaN and infinities.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return Decimal(value)
    try:
        if isinstance(value, float):
            number = Decimal(str(value))
        elif isinstance(value, Decimal):
            number = value
        elif isinstance(value, str) and value.strip():
            number = Decimal(value.strip())
        else:
            return None
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _lookup(params: Mapping[str, Any], stored_name: str, field_name: str) -> Any:
    if params.get(stored_name) is not None:
        return params[stored_name]
    return params.get(field_name)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_config_params(
    params: Mapping[str, Any],
    *,
    split_share_tolerance: Decimal = DEFAULT_SPLIT_SHARE_TOLERANCE,
) -> tuple[ImpactParameters, list[ReportWarning]]:
    """Check that every calculation parameter is present and numeric.

    Keys may use the stored camelCase names or the snake_case field names.
    Numeric strings are accepted and normalised to Decimal.

    Args:
        params: Parameter mapping from the settings collaborator
        split_share_tolerance: Allowed distance of the split-share sum from 1

    Returns:
        The validated parameters and any non-fatal warnings

    Raises:
        ConfigurationError: Listing every missing and every invalid key.
    """
    missing: list[str] = []
    invalid: list[str] = []
    values: dict[str, Decimal] = {}

    for stored_name, field_name in REQUIRED_PARAMS.items():
        raw = _lookup(params, stored_name, field_name)
        if _is_blank(raw):
            missing.append(stored_name)
            continue
        number = parse_number(raw)
        if number is None:
            invalid.append(stored_name)
            continue
        values[field_name] = number

    if missing or invalid:
        parts = []
        if missing:
            parts.append(f"missing: {', '.join(missing)}")
        if invalid:
            parts.append(f"not numeric: {', '.join(invalid)}")
        message = f"Report settings are incomplete ({'; '.join(parts)})"
        logger.error("configuration_invalid", missing=missing, invalid=invalid)
        raise ConfigurationError(message, missing_keys=missing, invalid_keys=invalid)

    validated = ImpactParameters(**values)
    warnings: list[ReportWarning] = []

    share_sum = validated.state_split_share + validated.federal_split_share
    if abs(share_sum - 1) > split_share_tolerance:
        logger.warning(
            "split_share_mismatch",
            state_split_share=str(validated.state_split_share),
            federal_split_share=str(validated.federal_split_share),
            total=str(share_sum),
        )
        warnings.append(
            ReportWarning(
                code=WarningCode.SPLIT_SHARE_MISMATCH,
                message=(
                    f"stateSplitShare + federalSplitShare = {share_sum}, expected 1"
                ),
                details={"total": str(share_sum)},
            )
        )

    return validated, warnings


class EngineSettings(BaseSettings):
    """Engine-level settings.

    Environment Variables:
        POLICYWORTH_ENV: Environment name (development, staging, production, test)
        POLICYWORTH_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        POLICYWORTH_SPLIT_SHARE_TOLERANCE: Allowed split-share deviation from 1
        POLICYWORTH_HEADLINE_COUNT: Services called out in the headline
        POLICYWORTH_LOOKUP_MAX_WORKERS: Concurrent location cost lookups
        POLICYWORTH_PARAMS: JSON object of calculation parameters

    Example:
        settings = EngineSettings(headline_count=3)
        engine = ImpactReportEngine(settings)
    """

    model_config = SettingsConfigDict(
        env_prefix="POLICYWORTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    split_share_tolerance: Decimal = Field(
        default=DEFAULT_SPLIT_SHARE_TOLERANCE,
        ge=0,
        description="Allowed distance of stateSplitShare + federalSplitShare from 1",
    )
    headline_count: int = Field(
        default=2,
        ge=1,
        le=4,
        description="Number of top services called out in the headline",
    )
    lookup_max_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum concurrent location cost lookups",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Calculation parameters, used when the caller supplies none",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"
