from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Literal, Optional, Union

from .models import AdvisoryType, SamplePoint, ThresholdMetadata, WaterSeries, WaterStatus
from .thresholds import DEFAULT_FRESHNESS_DAYS, threshold_for


StatusReason = Literal["advisory", "value", "stale", "no-data"]

STATUS_PRIORITY: dict[WaterStatus, int] = {
    WaterStatus.UNKNOWN: 0,
    WaterStatus.SAFE: 1,
    WaterStatus.WARN: 2,
    WaterStatus.ALERT: 3,
}


@dataclass(frozen=True)
class StatusEvaluation:
    status: WaterStatus
    reason: StatusReason
    latest_value: Optional[float]
    latest_sample_date: Optional[date]
    days_since_sample: Optional[int]

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "reason": self.reason,
            "latest_value": self.latest_value,
            "latest_sample_date": (
                self.latest_sample_date.isoformat() if self.latest_sample_date else None
            ),
            "days_since_sample": self.days_since_sample,
        }


def point_status(value: Optional[float], threshold: ThresholdMetadata) -> WaterStatus:
    if value is None:
        return WaterStatus.UNKNOWN
    if threshold.alert_level is not None and value >= threshold.alert_level:
        return WaterStatus.ALERT
    if threshold.warn_level is not None and value >= threshold.warn_level:
        return WaterStatus.WARN
    if threshold.health_advisory is not None and value >= threshold.health_advisory:
        return WaterStatus.WARN
    return WaterStatus.SAFE


def latest_point(series: WaterSeries) -> Optional[SamplePoint]:
    for point in reversed(series.points):
        if point.value is not None:
            return point
    return None


def _as_day(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date()
    return now


def evaluate_status(
    series: WaterSeries,
    threshold: Optional[ThresholdMetadata] = None,
    now: Optional[Union[date, datetime]] = None,
) -> StatusEvaluation:
    threshold = threshold or threshold_for(series.contaminant)
    today = _as_day(now if now is not None else datetime.now(timezone.utc))

    latest = latest_point(series)
    latest_value = latest.value if latest else None
    latest_date = latest.date if latest else None
    days_since = (today - latest_date).days if latest_date else None

    def _result(status: WaterStatus, reason: StatusReason) -> StatusEvaluation:
        return StatusEvaluation(
            status=status,
            reason=reason,
            latest_value=latest_value,
            latest_sample_date=latest_date,
            days_since_sample=days_since,
        )

    if any(
        advisory.status == WaterStatus.ALERT or advisory.type == AdvisoryType.BOIL
        for advisory in series.advisories
    ):
        return _result(WaterStatus.ALERT, "advisory")

    if latest is None:
        return _result(WaterStatus.UNKNOWN, "no-data")

    value_status = point_status(latest_value, threshold)
    if value_status == WaterStatus.ALERT:
        return _result(WaterStatus.ALERT, "value")

    freshness_days = threshold.freshness_days
    if freshness_days is None:
        freshness_days = DEFAULT_FRESHNESS_DAYS
    stale = days_since is not None and days_since > freshness_days
    if stale and STATUS_PRIORITY[value_status] < STATUS_PRIORITY[WaterStatus.WARN]:
        return _result(WaterStatus.WARN, "stale")

    if value_status == WaterStatus.WARN:
        return _result(WaterStatus.WARN, "value")

    return _result(WaterStatus.SAFE, "value")


def apply_status(
    series: WaterSeries,
    threshold: Optional[ThresholdMetadata] = None,
    now: Optional[Union[date, datetime]] = None,
) -> WaterSeries:
    """Return a copy of ``series`` with its computed status, per-point statuses and threshold."""
    threshold = threshold or threshold_for(series.contaminant)
    evaluation = evaluate_status(series, threshold=threshold, now=now)
    points = tuple(
        replace(point, status=point_status(point.value, threshold)) for point in series.points
    )
    return replace(series, status=evaluation.status, points=points, threshold=threshold)
