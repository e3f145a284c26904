import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from ..config import DEFAULT_PFAS_ENDPOINT
from ..errors import NetworkFailure, ValidationFailure
from ..models import (
    Advisory,
    AdvisoryType,
    Contaminant,
    RegionType,
    SamplePoint,
    SeriesQuery,
    WaterSeries,
    WaterStatus,
)
from ..normalization import advisory_id, day_start, first_present, lowercase_keys, parse_date, to_float
from ..status import point_status
from ..thresholds import threshold_for


LOGGER = logging.getLogger(__name__)

SOURCE_NAME = "Iowa DNR PFAS Survey"
SOURCE_URL = "https://www.iowadnr.gov/Environmental-Protection/Water-Quality/PFAS"
DEFAULT_SYSTEM_ID = "IA5224026"
DEFAULT_REGION = "Iowa Public Water System"


class ApiClient(Protocol):
    def request_json_list(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> list[object]: ...


@dataclass(frozen=True)
class PfasSample:
    system_id: Optional[str]
    system_name: Optional[str]
    sample_date: date
    value: float


STUB_PFAS_RECORDS: tuple[dict[str, object], ...] = (
    {"system_id": "IA5224026", "system_name": "Quad Cities Davenport", "sample_date": "2023-06-15", "sum_pfoa_pfos": 3.1},
    {"system_id": "IA5224026", "system_name": "Quad Cities Davenport", "sample_date": "2023-09-18", "sum_pfoa_pfos": 3.6},
    {"system_id": "IA5224026", "system_name": "Quad Cities Davenport", "sample_date": "2023-12-12", "sum_pfoa_pfos": 3.9},
    {"system_id": "IA5224026", "system_name": "Quad Cities Davenport", "sample_date": "2024-03-25", "sum_pfoa_pfos": 4.3},
)


def _optional_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def decode_pfas_record(raw: object) -> Optional[PfasSample]:
    if not isinstance(raw, Mapping):
        return None
    row = lowercase_keys(raw)
    sample_date = parse_date(row.get("sample_date"))
    value = to_float(first_present(row, "sum_pfoa_pfos", "result"))
    if sample_date is None or value is None:
        return None
    return PfasSample(
        system_id=_optional_text(row.get("system_id")),
        system_name=_optional_text(row.get("system_name")),
        sample_date=sample_date,
        value=value,
    )


def decode_pfas_records(payload: list[object]) -> list[PfasSample]:
    samples = []
    for raw in payload:
        sample = decode_pfas_record(raw)
        if sample is not None:
            samples.append(sample)
    return samples


def normalize_pfas_samples(
    samples: list[PfasSample], query: Optional[SeriesQuery] = None
) -> Optional[WaterSeries]:
    if not samples:
        return None

    system_id = (query.system_id if query else None) or samples[0].system_id or DEFAULT_SYSTEM_ID
    matching = [sample for sample in samples if sample.system_id == system_id]
    dataset = matching or samples

    ordered = sorted(dataset, key=lambda sample: sample.sample_date)
    points = tuple(SamplePoint(date=sample.sample_date, value=sample.value) for sample in ordered)

    threshold = threshold_for(Contaminant.PFAS)
    latest = points[-1]
    advisories: tuple[Advisory, ...] = ()
    alert_level = threshold.alert_level if threshold.alert_level is not None else 4
    if latest.value is not None and latest.value >= alert_level:
        advisories = (
            Advisory(
                id=advisory_id("pfas", system_id, latest.date.isoformat()),
                type=AdvisoryType.PFAS,
                contaminant=Contaminant.PFAS,
                title="PFAS exceedance notice",
                summary=(
                    f"Most recent PFAS sample measured {latest.value:g} ppt, "
                    f"above the {alert_level:g} ppt MCL."
                ),
                issued_at=day_start(latest.date),
                affected_systems=(system_id,),
                source=SOURCE_NAME,
                source_url=SOURCE_URL,
                status=point_status(latest.value, threshold),
            ),
        )

    return WaterSeries(
        contaminant=Contaminant.PFAS,
        metric="PFAS (PFOA + PFOS)",
        unit=threshold.unit,
        source=SOURCE_NAME,
        source_url=SOURCE_URL,
        updated_at=day_start(latest.date),
        region=dataset[0].system_name or DEFAULT_REGION,
        region_type=RegionType.SYSTEM,
        system_id=dataset[0].system_id or system_id,
        points=points,
        advisories=advisories,
        threshold=threshold,
        status=WaterStatus.UNKNOWN,
    )


class PfasSurveyAdapter:
    source_name: str = SOURCE_NAME
    contaminant: Contaminant = Contaminant.PFAS

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        endpoint: str = DEFAULT_PFAS_ENDPOINT,
        stub_records: tuple[dict[str, object], ...] = STUB_PFAS_RECORDS,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.stub_records = stub_records

    def fetch_samples(self) -> list[PfasSample]:
        if self.client is None:
            raise ValueError("client is required for fetch operations")
        payload = self.client.request_json_list(self.endpoint)
        return decode_pfas_records(payload)

    def resolve(self, query: Optional[SeriesQuery] = None) -> Optional[WaterSeries]:
        if self.client is not None:
            try:
                samples = self.fetch_samples()
            except (NetworkFailure, ValidationFailure) as error:
                LOGGER.warning("Falling back to stub PFAS data: %s", error)
            else:
                series = normalize_pfas_samples(samples, query)
                if series is not None:
                    LOGGER.info("Loaded PFAS dashboard data (rows=%d)", len(samples))
                    return series
                LOGGER.warning("Live PFAS feed returned no usable rows; using stub data")

        return normalize_pfas_samples(decode_pfas_records(list(self.stub_records)), query)
