from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


class Contaminant(Enum):
    NITRATE = "nitrate"
    NITRITE = "nitrite"
    ECOLI = "ecoli"
    PFAS = "pfas"
    ARSENIC = "arsenic"
    DBP = "dbp"
    FLUORIDE = "fluoride"


class WaterStatus(Enum):
    UNKNOWN = "unknown"
    SAFE = "safe"
    WARN = "warn"
    ALERT = "alert"


class AdvisoryType(Enum):
    BOIL = "boil"
    SWIM = "swim"
    PFAS = "pfas"


class RegionType(Enum):
    STATE = "state"
    COUNTY = "county"
    SYSTEM = "system"
    WATERSHED = "watershed"
    SITE = "site"
    CUSTOM = "custom"


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ThresholdMetadata:
    contaminant: Contaminant
    label: str
    unit: str
    freshness_days: Optional[int]
    safe_copy: str
    warn_copy: str
    alert_copy: str
    mcl: Optional[float] = None
    health_advisory: Optional[float] = None
    warn_level: Optional[float] = None
    alert_level: Optional[float] = None
    notes: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "contaminant": self.contaminant.value,
            "label": self.label,
            "unit": self.unit,
            "mcl": self.mcl,
            "healthAdvisory": self.health_advisory,
            "warnLevel": self.warn_level,
            "alertLevel": self.alert_level,
            "freshnessDays": self.freshness_days,
            "notes": self.notes,
            "safeCopy": self.safe_copy,
            "warnCopy": self.warn_copy,
            "alertCopy": self.alert_copy,
        }


@dataclass(frozen=True)
class SamplePoint:
    date: date
    value: Optional[float]
    status: Optional[WaterStatus] = None
    qualifier: Optional[str] = None
    sample_id: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        row: dict[str, object] = {"date": self.date.isoformat(), "value": self.value}
        if self.status is not None:
            row["status"] = self.status.value
        if self.qualifier is not None:
            row["qualifier"] = self.qualifier
        if self.sample_id is not None:
            row["sampleId"] = self.sample_id
        return row


@dataclass(frozen=True)
class Advisory:
    id: str
    type: AdvisoryType
    title: str
    summary: str
    issued_at: datetime
    source: str
    contaminant: Optional[Contaminant] = None
    status: WaterStatus = WaterStatus.ALERT
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    source_url: Optional[str] = None
    affected_systems: tuple[str, ...] = ()

    @property
    def severity(self) -> WaterStatus:
        return self.status

    def to_dict(self) -> dict[str, object]:
        row: dict[str, object] = {
            "id": self.id,
            "type": self.type.value,
            "contaminant": self.contaminant.value if self.contaminant else None,
            "title": self.title,
            "summary": self.summary,
            "issuedAt": format_timestamp(self.issued_at),
            "updatedAt": format_timestamp(self.updated_at),
            "expiresAt": format_timestamp(self.expires_at),
            "source": self.source,
            "sourceUrl": self.source_url,
            "status": self.status.value,
        }
        if self.affected_systems:
            row["affectedSystems"] = list(self.affected_systems)
        return row


@dataclass(frozen=True)
class WaterSeries:
    contaminant: Contaminant
    metric: str
    unit: str
    source: str
    updated_at: datetime
    region: str
    points: tuple[SamplePoint, ...]
    status: WaterStatus = WaterStatus.UNKNOWN
    region_type: RegionType = RegionType.SYSTEM
    system_id: Optional[str] = None
    source_url: Optional[str] = None
    threshold: Optional[ThresholdMetadata] = None
    advisories: tuple[Advisory, ...] = ()
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "contaminant": self.contaminant.value,
            "metric": self.metric,
            "unit": self.unit,
            "source": self.source,
            "sourceUrl": self.source_url,
            "updatedAt": format_timestamp(self.updated_at),
            "region": self.region,
            "regionType": self.region_type.value,
            "systemId": self.system_id,
            "points": [point.to_dict() for point in self.points],
            "status": self.status.value,
            "threshold": self.threshold.to_dict() if self.threshold else None,
            "advisories": [advisory.to_dict() for advisory in self.advisories],
            "notes": self.notes,
        }


@dataclass(frozen=True)
class SeriesQuery:
    """Filters accepted by series resolution.

    Only ``system_id`` and ``site`` narrow results today; ``zip``, ``county`` and
    ``kind`` are carried through for sources that will honor them.
    """

    system_id: Optional[str] = None
    zip: Optional[str] = None
    county: Optional[str] = None
    site: Optional[str] = None
    kind: Optional[str] = None


@dataclass(frozen=True)
class SeriesCollection:
    data: tuple[WaterSeries, ...]
    generated_at: datetime
    missing: tuple[Contaminant, ...] = field(default=())

    def to_dict(self) -> dict[str, object]:
        return {
            "data": [series.to_dict() for series in self.data],
            "generatedAt": format_timestamp(self.generated_at),
        }
