import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Optional

from .errors import ValidationFailure
from .models import (
    Advisory,
    AdvisoryType,
    Contaminant,
    RegionType,
    SamplePoint,
    WaterSeries,
    WaterStatus,
)


def parse_datetime(value: object) -> Optional[datetime]:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        pass
    else:
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%Y%m%d"):
        try:
            return datetime.strptime(raw[:10], fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            pass
    return None


def parse_date(value: object) -> Optional[date]:
    """Reduce a loosely formatted timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        if len(cleaned) >= 10:
            try:
                return date.fromisoformat(cleaned[:10])
            except ValueError:
                pass
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def to_float(value: object) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned or cleaned in {".", "NA", "NaN", "ND"}:
            return None
        match = re.match(r"^[<>]?\s*(-?\d+(?:\.\d+)?(?:[eE]-?\d+)?)", cleaned)
        if match is None:
            return None
        number = float(match.group(1))
        return number if math.isfinite(number) else None
    return None


def first_present(row: Mapping[str, object], *keys: str) -> object:
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def lowercase_keys(row: Mapping[object, object]) -> dict[str, object]:
    return {str(key).strip().lower(): value for key, value in row.items()}


def advisory_id(*parts: str) -> str:
    joined = "-".join(parts).lower()
    return re.sub(r"[^a-z0-9]+", "-", joined).strip("-")


def day_start(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _enum_value(enum_cls, raw: object, field_name: str, default=None):
    if raw is None:
        if default is not None:
            return default
        raise ValidationFailure(f"missing {field_name}")
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as error:
        raise ValidationFailure(f"invalid {field_name}: {raw!r}") from error


def _required_text(payload: Mapping[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailure(f"missing {key}")
    return value


def _optional_text(payload: Mapping[str, object], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def decode_point(payload: object) -> SamplePoint:
    if not isinstance(payload, Mapping):
        raise ValidationFailure("point is not an object")
    day = parse_date(payload.get("date"))
    if day is None:
        raise ValidationFailure(f"point has no usable date: {payload.get('date')!r}")
    raw_value = payload.get("value")
    value = to_float(raw_value)
    if raw_value is not None and value is None:
        raise ValidationFailure(f"point value is not numeric: {raw_value!r}")
    status = payload.get("status")
    return SamplePoint(
        date=day,
        value=value,
        status=_enum_value(WaterStatus, status, "point status") if status is not None else None,
        qualifier=_optional_text(payload, "qualifier"),
        sample_id=_optional_text(payload, "sampleId"),
    )


def decode_advisory(payload: object) -> Advisory:
    if not isinstance(payload, Mapping):
        raise ValidationFailure("advisory is not an object")
    issued_at = parse_datetime(payload.get("issuedAt"))
    if issued_at is None:
        raise ValidationFailure("advisory has no usable issuedAt")
    contaminant = payload.get("contaminant")
    affected = payload.get("affectedSystems")
    return Advisory(
        id=_required_text(payload, "id"),
        type=_enum_value(AdvisoryType, payload.get("type"), "advisory type"),
        title=_required_text(payload, "title"),
        summary=_required_text(payload, "summary"),
        issued_at=issued_at,
        source=_required_text(payload, "source"),
        contaminant=(
            _enum_value(Contaminant, contaminant, "contaminant") if contaminant is not None else None
        ),
        status=_enum_value(
            WaterStatus, payload.get("status"), "advisory status", default=WaterStatus.ALERT
        ),
        updated_at=parse_datetime(payload.get("updatedAt")),
        expires_at=parse_datetime(payload.get("expiresAt")),
        source_url=_optional_text(payload, "sourceUrl"),
        affected_systems=tuple(str(item) for item in affected) if isinstance(affected, list) else (),
    )


def decode_series(payload: object) -> WaterSeries:
    """Decode a persisted series snapshot.

    The stored ``status`` and ``threshold`` are read but not trusted; callers run
    the result through ``apply_status`` before handing it out.
    """
    if not isinstance(payload, Mapping):
        raise ValidationFailure("series snapshot is not a JSON object")

    points = payload.get("points")
    if not isinstance(points, list):
        raise ValidationFailure("series snapshot has no points list")
    advisories = payload.get("advisories") or []
    if not isinstance(advisories, list):
        raise ValidationFailure("series snapshot advisories is not a list")

    updated_at = parse_datetime(payload.get("updatedAt"))
    if updated_at is None:
        raise ValidationFailure("series snapshot has no usable updatedAt")

    decoded_points = sorted((decode_point(point) for point in points), key=lambda p: p.date)
    return WaterSeries(
        contaminant=_enum_value(Contaminant, payload.get("contaminant"), "contaminant"),
        metric=_required_text(payload, "metric"),
        unit=_required_text(payload, "unit"),
        source=_required_text(payload, "source"),
        updated_at=updated_at,
        region=_required_text(payload, "region"),
        points=tuple(decoded_points),
        status=_enum_value(
            WaterStatus, payload.get("status"), "series status", default=WaterStatus.UNKNOWN
        ),
        region_type=_enum_value(
            RegionType, payload.get("regionType"), "region type", default=RegionType.SYSTEM
        ),
        system_id=_optional_text(payload, "systemId"),
        source_url=_optional_text(payload, "sourceUrl"),
        advisories=tuple(decode_advisory(advisory) for advisory in advisories),
        notes=_optional_text(payload, "notes"),
    )
