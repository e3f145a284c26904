import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Protocol

from ..config import DEFAULT_SENSOR_ENDPOINT
from ..errors import NetworkFailure, ValidationFailure
from ..models import Contaminant, WaterStatus, format_timestamp
from ..normalization import parse_datetime
from ..status import point_status
from ..thresholds import threshold_for


LOGGER = logging.getLogger(__name__)


class ApiClient(Protocol):
    def request_json_list(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> list[object]: ...


@dataclass(frozen=True)
class NitrateSensor:
    site_id: str
    name: str
    last_sample: datetime
    value: Optional[float]
    unit: str
    source: str
    source_url: str
    status: WaterStatus = WaterStatus.UNKNOWN

    def to_dict(self) -> dict[str, object]:
        return {
            "siteId": self.site_id,
            "name": self.name,
            "lastSample": format_timestamp(self.last_sample),
            "value": self.value,
            "unit": self.unit,
            "status": self.status.value,
            "source": self.source,
            "sourceUrl": self.source_url,
        }


def _sensor(
    site_id: str,
    name: str,
    last_sample: str,
    value: Optional[float],
    source: str,
    source_url: str,
) -> NitrateSensor:
    return NitrateSensor(
        site_id=site_id,
        name=name,
        last_sample=parse_datetime(last_sample),
        value=value,
        unit="mg/L",
        source=source,
        source_url=source_url,
    )


SENSOR_STUBS: tuple[NitrateSensor, ...] = (
    _sensor(
        "USGS-05485500",
        "Raccoon River at Des Moines",
        "2024-05-21T11:00:00Z",
        8.6,
        "USGS NWIS (stub)",
        "https://waterdata.usgs.gov/ia/nwis/uv/?site_no=05485500",
    ),
    _sensor(
        "USGS-05451700",
        "Cedar River at Cedar Rapids",
        "2024-05-21T10:30:00Z",
        6.1,
        "USGS NWIS (stub)",
        "https://waterdata.usgs.gov/ia/nwis/uv/?site_no=05451700",
    ),
    _sensor(
        "IWQIS-1234",
        "Des Moines River near Saylorville",
        "2024-05-21T10:45:00Z",
        5.2,
        "IWQIS (stub)",
        "https://iwqis.iowawis.org/",
    ),
)


def fetch_realtime_nitrate_sensors(
    client: Optional[ApiClient] = None,
    endpoint: str = DEFAULT_SENSOR_ENDPOINT,
) -> list[NitrateSensor]:
    # TODO: parse the IWQIS station payload once its field layout is documented; the
    # probe only reports reachability for now.
    if client is not None:
        try:
            payload = client.request_json_list(endpoint)
        except (NetworkFailure, ValidationFailure) as error:
            LOGGER.warning("Unable to reach IWQIS/USGS service; using stub sensors: %s", error)
        else:
            if payload:
                LOGGER.info("Live IWQIS nitrate sensors not yet parsed; using stub set.")

    threshold = threshold_for(Contaminant.NITRATE)
    return [replace(sensor, status=point_status(sensor.value, threshold)) for sensor in SENSOR_STUBS]
