import json
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

from .errors import NotFoundError, ValidationFailure
from .models import Contaminant, WaterSeries
from .normalization import decode_series


LOGGER = logging.getLogger(__name__)

SNAPSHOT_FILES: Mapping[Contaminant, str] = {
    Contaminant.NITRATE: "nitrate.json",
    Contaminant.NITRITE: "nitrite.json",
    Contaminant.ECOLI: "bacteria.json",
    Contaminant.PFAS: "pfas.json",
    Contaminant.ARSENIC: "arsenic.json",
    Contaminant.DBP: "dbp.json",
    Contaminant.FLUORIDE: "fluoride.json",
}


class SnapshotCache:
    """Read-through cache over the pre-generated per-contaminant snapshot files.

    Each file is read at most once per cache instance. With ``ttl_seconds`` set,
    an entry older than the TTL is read again; without it entries live as long as
    the instance. Failed reads are not remembered.
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Contaminant, tuple[float, WaterSeries]] = {}
        self._lock = threading.Lock()
        self.reads = 0

    def path_for(self, contaminant: Contaminant) -> Path:
        return self.cache_dir / SNAPSHOT_FILES[contaminant]

    def _is_fresh(self, loaded_at: float) -> bool:
        if self._ttl_seconds is None:
            return True
        return self._clock() - loaded_at < self._ttl_seconds

    def _load(self, contaminant: Contaminant) -> WaterSeries:
        path = self.path_for(contaminant)
        self.reads += 1
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise NotFoundError(f"no cached snapshot for {contaminant.value} at {path}") from error
        except UnicodeDecodeError as error:
            raise ValidationFailure(f"cached snapshot {path} is not valid UTF-8: {error}") from error
        except OSError as error:
            raise ValidationFailure(f"cached snapshot {path} could not be read: {error}") from error
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as error:
            raise ValidationFailure(f"cached snapshot {path} is not valid JSON: {error}") from error

        series = decode_series(payload)
        if series.contaminant != contaminant:
            raise ValidationFailure(
                f"cached snapshot {path} holds {series.contaminant.value}, expected {contaminant.value}"
            )
        return series

    def read(self, contaminant: Contaminant) -> WaterSeries:
        with self._lock:
            entry = self._entries.get(contaminant)
            if entry is not None and self._is_fresh(entry[0]):
                return entry[1]

            series = self._load(contaminant)
            self._entries[contaminant] = (self._clock(), series)
            LOGGER.debug("Loaded cached snapshot for %s", contaminant.value)
            return series

    def invalidate(self, contaminant: Optional[Contaminant] = None) -> None:
        with self._lock:
            if contaminant is None:
                self._entries.clear()
            else:
                self._entries.pop(contaminant, None)
