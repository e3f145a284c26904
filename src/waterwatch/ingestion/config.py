import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_CACHE_DIR = Path(__file__).resolve().parents[1] / "data" / "water"
DEFAULT_BEACH_ENDPOINT = "https://programs.iowadnr.gov/beach/api/beachadvisories"
DEFAULT_PFAS_ENDPOINT = (
    "https://data.iowa.gov/resource/vwpp-6i3e.json"
    "?$select=system_id,system_name,sample_date,sum_pfoa_pfOS&$order=sample_date"
)
DEFAULT_SENSOR_ENDPOINT = (
    "https://iwqis.iowawis.org/iwqisws/api/stations?sensor=Nitrate&interval=hourly"
)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    remote_timeout_seconds: float = 20.0
    cache_dir: Path = field(default=DEFAULT_CACHE_DIR)
    beach_endpoint: str = DEFAULT_BEACH_ENDPOINT
    pfas_endpoint: str = DEFAULT_PFAS_ENDPOINT
    sensor_endpoint: str = DEFAULT_SENSOR_ENDPOINT
    snapshot_ttl_seconds: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        cache_dir = os.getenv("WATERWATCH_CACHE_DIR", "").strip()
        timeout = _env_float("WATERWATCH_REMOTE_TIMEOUT_SECONDS", cls.remote_timeout_seconds)
        return cls(
            remote_timeout_seconds=timeout if timeout and timeout > 0 else cls.remote_timeout_seconds,
            cache_dir=Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR,
            beach_endpoint=os.getenv("WATERWATCH_BEACH_ENDPOINT", DEFAULT_BEACH_ENDPOINT),
            pfas_endpoint=os.getenv("WATERWATCH_PFAS_ENDPOINT", DEFAULT_PFAS_ENDPOINT),
            sensor_endpoint=os.getenv("WATERWATCH_SENSOR_ENDPOINT", DEFAULT_SENSOR_ENDPOINT),
            snapshot_ttl_seconds=_env_float("WATERWATCH_SNAPSHOT_TTL_SECONDS", None),
        )
