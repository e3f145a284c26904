from typing import Optional, Union

from .errors import ValidationFailure
from .models import Advisory, AdvisoryType, SeriesCollection, format_timestamp
from .resolver import WaterSeriesResolver


def parse_advisory_type(raw: Union[AdvisoryType, str, None]) -> Optional[AdvisoryType]:
    if raw is None or isinstance(raw, AdvisoryType):
        return raw
    try:
        return AdvisoryType(raw.strip().lower())
    except ValueError as error:
        allowed = ", ".join(item.value for item in AdvisoryType)
        raise ValidationFailure(f"unknown advisory type {raw!r} (expected one of: {allowed})") from error


def reduce_advisories(
    collection: SeriesCollection,
    type_filter: Union[AdvisoryType, str, None] = None,
) -> list[Advisory]:
    """Flatten, de-duplicate by id (last seen wins), filter and order newest first."""
    advisory_type = parse_advisory_type(type_filter)

    unique: dict[str, Advisory] = {}
    for series in collection.data:
        for advisory in series.advisories:
            unique[advisory.id] = advisory

    results = list(unique.values())
    if advisory_type is not None:
        results = [advisory for advisory in results if advisory.type == advisory_type]
    return sorted(results, key=lambda advisory: advisory.issued_at, reverse=True)


def collect_advisories(
    resolver: WaterSeriesResolver,
    type_filter: Union[AdvisoryType, str, None] = None,
) -> list[Advisory]:
    advisory_type = parse_advisory_type(type_filter)
    return reduce_advisories(resolver.resolve_collection(), advisory_type)


def datasources_overview(resolver: WaterSeriesResolver) -> dict[str, object]:
    collection = resolver.resolve_collection()
    return {
        "contaminants": [
            {
                "contaminant": series.contaminant.value,
                "region": series.region,
                "source": series.source,
                "updatedAt": format_timestamp(series.updated_at),
                "status": series.status.value,
            }
            for series in collection.data
        ],
        "generatedAt": format_timestamp(collection.generated_at),
    }
