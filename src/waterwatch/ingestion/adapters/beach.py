import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Protocol

from ..config import DEFAULT_BEACH_ENDPOINT
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
from ..thresholds import threshold_for


LOGGER = logging.getLogger(__name__)

DEFAULT_BEACH_SITE = "Big Creek Beach"
SOURCE_NAME = "Iowa DNR Beach Monitoring"
SOURCE_URL = "https://www.iowadnr.gov/Things-to-Do/Beach-Monitoring"

SITE_KEYS = ("site_name", "sitename", "beachname", "beach", "beach_description")
DATE_KEYS = ("sample_date", "sampledate", "sample_dt")
VALUE_KEYS = ("ecoli", "e_coli", "ecoli_mpn")


class ApiClient(Protocol):
    def request_json_list(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> list[object]: ...


@dataclass(frozen=True)
class BeachSample:
    site: str
    sample_date: date
    value: float
    advisory: bool


STUB_BEACH_RECORDS: tuple[dict[str, object], ...] = (
    {"site_name": "Big Creek Beach", "sample_date": "2024-04-20", "ecoli": 22, "advisory": False},
    {"site_name": "Big Creek Beach", "sample_date": "2024-04-27", "ecoli": 35, "advisory": False},
    {"site_name": "Big Creek Beach", "sample_date": "2024-05-04", "ecoli": 58, "advisory": False},
    {"site_name": "Big Creek Beach", "sample_date": "2024-05-11", "ecoli": 165, "advisory": True},
    {"site_name": "Big Creek Beach", "sample_date": "2024-05-18", "ecoli": 280, "advisory": True},
)


def _advisory_flag(raw: object) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower().startswith("y")
    return bool(raw)


def decode_beach_record(raw: object) -> Optional[BeachSample]:
    if not isinstance(raw, Mapping):
        return None
    row = lowercase_keys(raw)

    sample_date = parse_date(first_present(row, *DATE_KEYS))
    if sample_date is None:
        return None

    value = None
    for key in VALUE_KEYS:
        value = to_float(row.get(key))
        if value is not None:
            break
    if value is None:
        return None

    site = first_present(row, *SITE_KEYS)
    return BeachSample(
        site=str(site).strip() if site is not None else DEFAULT_BEACH_SITE,
        sample_date=sample_date,
        value=value,
        advisory=_advisory_flag(row.get("advisory")),
    )


def decode_beach_records(payload: list[object]) -> list[BeachSample]:
    samples = []
    for raw in payload:
        sample = decode_beach_record(raw)
        if sample is not None:
            samples.append(sample)
    return samples


def _swim_advisory(region: str, sample: BeachSample, endpoint: str) -> Advisory:
    day = sample.sample_date.isoformat()
    return Advisory(
        id=advisory_id("dnr", region, day),
        type=AdvisoryType.SWIM,
        contaminant=Contaminant.ECOLI,
        title="Swim advisory issued",
        summary=(
            f"E. coli levels exceeded recreational thresholds on {day}. "
            "Avoid swallowing water and follow DNR guidance."
        ),
        issued_at=day_start(sample.sample_date),
        source=SOURCE_NAME,
        source_url=endpoint,
        status=WaterStatus.ALERT,
    )


def normalize_beach_samples(
    samples: list[BeachSample],
    query: Optional[SeriesQuery] = None,
    endpoint: str = DEFAULT_BEACH_ENDPOINT,
) -> Optional[WaterSeries]:
    if not samples:
        return None

    target_site = (query.site or query.system_id) if query else None
    target_site = (target_site or DEFAULT_BEACH_SITE).lower()

    matching = [sample for sample in samples if target_site in sample.site.lower()]
    dataset = matching or samples
    region = Counter(sample.site for sample in dataset).most_common(1)[0][0]

    ordered = sorted(dataset, key=lambda sample: sample.sample_date)
    points = tuple(SamplePoint(date=sample.sample_date, value=sample.value) for sample in ordered)
    advisories = tuple(
        _swim_advisory(region, sample, endpoint) for sample in ordered if sample.advisory
    )

    threshold = threshold_for(Contaminant.ECOLI)
    return WaterSeries(
        contaminant=Contaminant.ECOLI,
        metric="E. coli",
        unit=threshold.unit,
        source=SOURCE_NAME,
        source_url=SOURCE_URL,
        updated_at=day_start(points[-1].date) if points else datetime.now(timezone.utc),
        region=region,
        region_type=RegionType.SITE,
        points=points,
        advisories=advisories,
        threshold=threshold,
        status=WaterStatus.UNKNOWN,
    )


class BeachMonitoringAdapter:
    source_name: str = SOURCE_NAME
    contaminant: Contaminant = Contaminant.ECOLI

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        endpoint: str = DEFAULT_BEACH_ENDPOINT,
        stub_records: tuple[dict[str, object], ...] = STUB_BEACH_RECORDS,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.stub_records = stub_records

    def fetch_samples(self) -> list[BeachSample]:
        if self.client is None:
            raise ValueError("client is required for fetch operations")
        payload = self.client.request_json_list(self.endpoint)
        return decode_beach_records(payload)

    def resolve(self, query: Optional[SeriesQuery] = None) -> Optional[WaterSeries]:
        if self.client is not None:
            try:
                samples = self.fetch_samples()
            except (NetworkFailure, ValidationFailure) as error:
                LOGGER.warning("Falling back to stub beach monitoring data: %s", error)
            else:
                series = normalize_beach_samples(samples, query, endpoint=self.endpoint)
                if series is not None:
                    LOGGER.info("Loaded live DNR beach monitoring data (rows=%d)", len(samples))
                    return series
                LOGGER.warning("Live beach monitoring feed returned no usable rows; using stub data")

        stub_samples = decode_beach_records(list(self.stub_records))
        return normalize_beach_samples(stub_samples, query, endpoint=self.endpoint)
