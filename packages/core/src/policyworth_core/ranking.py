"""Service ranking for headline callouts."""

from typing import Mapping, Sequence

from .models.report import ServiceAggregate
from .models.tally import ServiceCode


def rank_services(
    services: Sequence[ServiceCode],
    aggregates: Mapping[ServiceCode, ServiceAggregate],
) -> list[ServiceCode]:
    """Order services by base savings, highest first.

    Ranking uses ``saved_base``, not the multiplied figure. Services with
    equal savings keep their selection order; services without records
    have zero savings and therefore sort last.
    """
    return sorted(
        services,
        key=lambda service: aggregates[service].saved_base,
        reverse=True,
    )
