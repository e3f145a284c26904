"""Regulatory compliance summaries (SDWIS / Iowa HHS).

The live regulatory feed is not integrated yet; every contaminant is served
from the structured records below. Advisories from this path are never
synthesized.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from ..models import Contaminant, RegionType, SamplePoint, SeriesQuery, WaterSeries, WaterStatus
from ..normalization import day_start, parse_date, to_float
from ..thresholds import threshold_for
from .beach import STUB_BEACH_RECORDS
from .pfas import STUB_PFAS_RECORDS


LOGGER = logging.getLogger(__name__)

SOURCE_URL = "https://data.epa.gov/efservice"
DEFAULT_REGION = "Iowa Public Water System"


@dataclass(frozen=True)
class ComplianceRecord:
    system_id: str
    system_name: str
    sample_date: date
    value: Optional[float]
    unit: str
    source: str
    metric: str


def _records(
    system_id: str,
    system_name: str,
    unit: str,
    source: str,
    metric: str,
    samples: tuple[tuple[str, Optional[float]], ...],
) -> tuple[ComplianceRecord, ...]:
    return tuple(
        ComplianceRecord(
            system_id=system_id,
            system_name=system_name,
            sample_date=date.fromisoformat(sample_date),
            value=value,
            unit=unit,
            source=source,
            metric=metric,
        )
        for sample_date, value in samples
    )


def _pfas_view() -> tuple[ComplianceRecord, ...]:
    return tuple(
        ComplianceRecord(
            system_id=str(record.get("system_id") or "IA5224026"),
            system_name=str(record.get("system_name") or "Quad Cities Davenport"),
            sample_date=parse_date(record["sample_date"]),
            value=to_float(record.get("sum_pfoa_pfos")),
            unit="ppt",
            source="Iowa DNR PFAS Survey (stub)",
            metric="PFAS (PFOA + PFOS)",
        )
        for record in STUB_PFAS_RECORDS
    )


def _ecoli_view() -> tuple[ComplianceRecord, ...]:
    return tuple(
        ComplianceRecord(
            system_id="IA-BEACH",
            system_name=str(record["site_name"]),
            sample_date=parse_date(record["sample_date"]),
            value=to_float(record.get("ecoli")),
            unit="MPN/100mL",
            source="Iowa DNR Beach Monitoring (stub)",
            metric="E. coli",
        )
        for record in STUB_BEACH_RECORDS
    )


COMPLIANCE_RECORDS: Mapping[Contaminant, tuple[ComplianceRecord, ...]] = {
    Contaminant.NITRATE: _records(
        "IA2580091",
        "Des Moines Water Works",
        "mg/L",
        "Iowa DNR Source Water (stub)",
        "Nitrate (as N)",
        (
            ("2023-12-01", 4.2),
            ("2024-01-01", 4.8),
            ("2024-02-01", 5.5),
            ("2024-03-01", 6.2),
            ("2024-04-01", 6.7),
            ("2024-05-01", 7.1),
        ),
    ),
    Contaminant.NITRITE: _records(
        "IA3114560",
        "Cedar Rapids Water",
        "mg/L",
        "Iowa DNR Compliance (stub)",
        "Nitrite (as N)",
        (
            ("2023-10-01", 0.12),
            ("2023-12-01", 0.16),
            ("2024-02-01", 0.24),
            ("2024-04-01", 0.32),
        ),
    ),
    Contaminant.ARSENIC: _records(
        "IA5970011",
        "City of Marshalltown",
        "µg/L",
        "EPA SDWIS (stub)",
        "Arsenic",
        (
            ("2023-05-01", 4.8),
            ("2023-08-01", 5.2),
            ("2023-11-01", 6.1),
            ("2024-02-01", 6.4),
        ),
    ),
    Contaminant.DBP: _records(
        "IA2570970",
        "West Des Moines Water Works",
        "µg/L",
        "Iowa HHS Compliance (stub)",
        "Disinfection Byproducts (TTHM)",
        (
            ("2023-03-31", 58.2),
            ("2023-06-30", 61.7),
            ("2023-09-30", 63.5),
            ("2023-12-31", 64.8),
        ),
    ),
    Contaminant.FLUORIDE: _records(
        "IA8300487",
        "Sioux City Water",
        "mg/L",
        "Iowa HHS Oral Health (stub)",
        "Fluoride",
        (
            ("2023-09-30", 0.76),
            ("2023-10-31", 0.74),
            ("2023-11-30", 0.71),
            ("2023-12-31", 0.69),
            ("2024-01-31", 0.72),
        ),
    ),
    Contaminant.PFAS: _pfas_view(),
    Contaminant.ECOLI: _ecoli_view(),
}


class ComplianceAdapter:
    source_name: str = "EPA SDWIS (stub)"

    def __init__(
        self,
        contaminant: Contaminant,
        records: Optional[Mapping[Contaminant, tuple[ComplianceRecord, ...]]] = None,
    ) -> None:
        self.contaminant = contaminant
        self.records = COMPLIANCE_RECORDS if records is None else records

    def resolve(self, query: Optional[SeriesQuery] = None) -> Optional[WaterSeries]:
        LOGGER.warning(
            "Live SDWIS integration for %s not configured; using stub data.",
            self.contaminant.value,
        )

        dataset = self.records.get(self.contaminant, ())
        if not dataset:
            return None

        target_system_id = (query.system_id if query else None) or dataset[0].system_id
        filtered = [record for record in dataset if record.system_id == target_system_id]
        if not filtered:
            return None

        ordered = sorted(filtered, key=lambda record: record.sample_date)
        points = tuple(SamplePoint(date=record.sample_date, value=record.value) for record in ordered)
        threshold = threshold_for(self.contaminant)
        first = filtered[0]

        return WaterSeries(
            contaminant=self.contaminant,
            metric=first.metric or threshold.label,
            unit=first.unit or threshold.unit,
            source=first.source or self.source_name,
            source_url=SOURCE_URL,
            updated_at=day_start(points[-1].date),
            region=first.system_name or DEFAULT_REGION,
            region_type=RegionType.SYSTEM,
            system_id=target_system_id,
            points=points,
            threshold=threshold,
            status=WaterStatus.UNKNOWN,
        )
