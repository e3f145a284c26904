import csv
import io
from collections.abc import Iterable

from .models import Advisory, WaterSeries, format_timestamp


SERIES_COLUMNS = ("date", "value", "status", "unit", "region")
ADVISORY_COLUMNS = (
    "id",
    "type",
    "contaminant",
    "title",
    "issued_at",
    "expires_at",
    "status",
    "source",
)


def _render(columns: tuple[str, ...], rows: Iterable[tuple[object, ...]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if cell is None else cell for cell in row])
    return buffer.getvalue()


def series_to_csv(series: WaterSeries) -> str:
    return _render(
        SERIES_COLUMNS,
        (
            (
                point.date.isoformat(),
                point.value,
                point.status.value if point.status else None,
                series.unit,
                series.region,
            )
            for point in series.points
        ),
    )


def advisories_to_csv(advisories: Iterable[Advisory]) -> str:
    return _render(
        ADVISORY_COLUMNS,
        (
            (
                advisory.id,
                advisory.type.value,
                advisory.contaminant.value if advisory.contaminant else None,
                advisory.title,
                format_timestamp(advisory.issued_at),
                format_timestamp(advisory.expires_at),
                advisory.status.value,
                advisory.source,
            )
            for advisory in advisories
        ),
    )
