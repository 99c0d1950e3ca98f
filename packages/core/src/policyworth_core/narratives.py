"""Plain-language service summaries for the impact report.

Narratives are derived only from aggregated numbers, so the same aggregate
always produces the same sentence. Nothing here depends on the clock or on
randomness.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence, Union

from .models.report import ServiceAggregate, allocate_impact
from .models.tally import SERVICE_LABELS, ServiceCode

MILLION = Decimal("1000000")
THOUSAND = Decimal("1000")

NARRATIVE_TEMPLATES: dict[ServiceCode, str] = {
    ServiceCode.CASE_MANAGEMENT: (
        "Case management services helped {yes} seniors avoid premature "
        "institutional placement, generating {base} in direct healthcare savings "
        "and {impact} in total economic impact through sustained independence."
    ),
    ServiceCode.HOME_DELIVERED_MEALS: (
        "Home-delivered meal programs served {yes} seniors, preventing malnutrition "
        "and maintaining independence. This resulted in {base} in healthcare cost "
        "avoidance and {impact} in total community benefit."
    ),
    ServiceCode.CAREGIVER_RESPITE: (
        "Respite services supported {yes} family caregivers, preventing burnout and "
        "institutional placement. These interventions saved {base} in direct costs "
        "while generating {impact} in broader economic value."
    ),
    ServiceCode.CRISIS_INTERVENTION: (
        "Rapid crisis response served {yes} seniors in acute need, averting "
        "emergency room visits and institutional placement. Direct savings totaled "
        "{base}, with {impact} in comprehensive economic impact."
    ),
}

GENERIC_TEMPLATE = (
    "Services supported {yes} seniors, generating {base} in savings and "
    "{impact} in total economic impact."
)

NO_CLIENTS_TEMPLATE = (
    "No clients accepted {label} during this period, so no institutional care "
    "costs were avoided."
)


def service_label(service: Union[ServiceCode, str]) -> str:
    """Display name for a service code; unknown codes are shown as given."""
    if isinstance(service, ServiceCode):
        return SERVICE_LABELS[service]
    try:
        return SERVICE_LABELS[ServiceCode(service)]
    except ValueError:
        return str(service)


def format_usd(amount: Decimal) -> str:
    """Compact dollar amount: ``$1.23M``, ``$45.6K`` or ``$789``."""
    if amount >= MILLION:
        scaled = (amount / MILLION).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"${scaled}M"
    if amount >= THOUSAND:
        scaled = (amount / THOUSAND).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        return f"${scaled}K"
    whole = int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"${whole:,}"


def generate_narrative(
    service: Union[ServiceCode, str],
    yes_count: int,
    saved_base: Decimal,
    allocated_impact: Decimal,
) -> str:
    """Summarise one service's outcome in a sentence or two.

    Args:
        service: Service code; codes without a template use a generic one
        yes_count: Clients who accepted the service
        saved_base: Base (unmultiplied) savings
        allocated_impact: Multiplied savings plus the service's share of tax
    """
    if yes_count == 0:
        return NO_CLIENTS_TEMPLATE.format(label=service_label(service))

    try:
        template = NARRATIVE_TEMPLATES.get(ServiceCode(service), GENERIC_TEMPLATE)
    except ValueError:
        template = GENERIC_TEMPLATE

    return template.format(
        yes=f"{yes_count:,}",
        base=format_usd(saved_base),
        impact=format_usd(allocated_impact),
    )


def build_narratives(
    services: Sequence[ServiceCode],
    aggregates: Mapping[ServiceCode, ServiceAggregate],
    multiplied_savings: Decimal,
    total_tax: Decimal,
) -> dict[ServiceCode, str]:
    """Narratives for the given services, keyed in the order given."""
    narratives: dict[ServiceCode, str] = {}
    for service in services:
        aggregate = aggregates[service]
        narratives[service] = generate_narrative(
            service,
            aggregate.yes,
            aggregate.saved_base,
            allocate_impact(aggregate.saved_adjusted, multiplied_savings, total_tax),
        )
    return narratives
