import logging
import queue
import threading
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Literal, Optional

from .config import Settings
from .errors import NotFoundError, WaterDataError
from .models import Contaminant, SeriesCollection, SeriesQuery, WaterSeries
from .snapshot_cache import SnapshotCache
from .source_registry import SourceAdapter, build_adapter_registry
from .status import apply_status


LOGGER = logging.getLogger(__name__)

SeriesOrigin = Literal["live", "cache"]


@dataclass(frozen=True)
class SeriesResult:
    ok: bool
    series: Optional[WaterSeries]
    origin: Optional[SeriesOrigin]
    reason: str

    @classmethod
    def success(cls, series: WaterSeries, origin: SeriesOrigin) -> "SeriesResult":
        return cls(ok=True, series=series, origin=origin, reason="ok")

    @classmethod
    def failure(cls, reason: str, origin: Optional[SeriesOrigin] = None) -> "SeriesResult":
        return cls(ok=False, series=None, origin=origin, reason=reason)

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "origin": self.origin,
            "reason": self.reason,
            "series": self.series.to_dict() if self.series else None,
        }


def series_matches_query(series: WaterSeries, query: Optional[SeriesQuery]) -> bool:
    if query is None:
        return True
    if query.system_id and series.system_id and query.system_id != series.system_id:
        return False
    if query.site and series.region and query.site.lower() not in series.region.lower():
        return False
    # zip and county: no series carries them, so they never reject.
    return True


class WaterSeriesResolver:
    """Resolves contaminant series live first, then from cached snapshots."""

    def __init__(
        self,
        adapters: Optional[Mapping[Contaminant, SourceAdapter]] = None,
        snapshots: Optional[SnapshotCache] = None,
        settings: Optional[Settings] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.settings = settings or Settings()
        self.adapters = build_adapter_registry(settings=self.settings) if adapters is None else adapters
        self.snapshots = snapshots or SnapshotCache(
            self.settings.cache_dir, ttl_seconds=self.settings.snapshot_ttl_seconds
        )
        self._now = now

    def _call_adapter(
        self, adapter: SourceAdapter, query: Optional[SeriesQuery]
    ) -> Optional[WaterSeries]:
        outcome: "queue.Queue[tuple[bool, object]]" = queue.Queue(maxsize=1)

        def _run() -> None:
            try:
                outcome.put((True, adapter.resolve(query)))
            except Exception as error:
                outcome.put((False, error))

        # Daemon so a call that outlives its timeout never holds up interpreter exit.
        worker = threading.Thread(target=_run, name="waterwatch-live", daemon=True)
        worker.start()
        ok, value = outcome.get(timeout=self.settings.remote_timeout_seconds)
        if not ok:
            raise value
        return value

    def try_live(self, contaminant: Contaminant, query: Optional[SeriesQuery] = None) -> SeriesResult:
        adapter = self.adapters.get(contaminant)
        if adapter is None:
            return SeriesResult.failure("no_live_source")

        try:
            series = self._call_adapter(adapter, query)
        except queue.Empty:
            return SeriesResult.failure(
                f"timeout after {self.settings.remote_timeout_seconds}s", origin="live"
            )
        except Exception as error:
            return SeriesResult.failure(f"live_error: {error}", origin="live")

        if series is None:
            return SeriesResult.failure("live_empty", origin="live")

        evaluated = apply_status(series, now=self._now())
        if not series_matches_query(evaluated, query):
            return SeriesResult.failure("live_query_mismatch", origin="live")
        return SeriesResult.success(evaluated, origin="live")

    def try_cache(self, contaminant: Contaminant, query: Optional[SeriesQuery] = None) -> SeriesResult:
        try:
            cached = self.snapshots.read(contaminant)
        except WaterDataError as error:
            return SeriesResult.failure(f"cache_error: {error}", origin="cache")
        except Exception as error:
            LOGGER.error("Unexpected error reading cached snapshot for %s: %r", contaminant.value, error)
            return SeriesResult.failure(f"cache_error: {error!r}", origin="cache")

        evaluated = apply_status(cached, now=self._now())
        if not series_matches_query(evaluated, query):
            return SeriesResult.failure("cache_query_mismatch", origin="cache")
        return SeriesResult.success(evaluated, origin="cache")

    def resolve_result(
        self, contaminant: Contaminant, query: Optional[SeriesQuery] = None
    ) -> SeriesResult:
        live = self.try_live(contaminant, query)
        if live.ok:
            return live
        if live.origin == "live":
            LOGGER.warning(
                "Live source for %s failed (%s); falling back to cached snapshot.",
                contaminant.value,
                live.reason,
            )
        return self.try_cache(contaminant, query)

    def resolve_one(
        self, contaminant: Contaminant, query: Optional[SeriesQuery] = None
    ) -> Optional[WaterSeries]:
        return self.resolve_result(contaminant, query).series

    def resolve_strict(
        self, contaminant: Contaminant, query: Optional[SeriesQuery] = None
    ) -> WaterSeries:
        result = self.resolve_result(contaminant, query)
        if result.series is None:
            raise NotFoundError(f"No water series found for {contaminant.value} ({result.reason})")
        return result.series

    def resolve_collection(
        self, contaminants: Optional[Sequence[Contaminant]] = None
    ) -> SeriesCollection:
        targets = list(contaminants) if contaminants is not None else list(Contaminant)
        if not targets:
            return SeriesCollection(data=(), generated_at=self._now())

        def _settle(contaminant: Contaminant) -> Optional[WaterSeries]:
            try:
                return self.resolve_strict(contaminant)
            except WaterDataError as error:
                LOGGER.error("Failed to load water series for %s: %s", contaminant.value, error)
                return None
            except Exception:
                LOGGER.exception("Unexpected error loading water series for %s", contaminant.value)
                return None

        with ThreadPoolExecutor(max_workers=len(targets), thread_name_prefix="waterwatch") as pool:
            settled = list(pool.map(_settle, targets))

        data = tuple(series for series in settled if series is not None)
        missing = tuple(
            contaminant for contaminant, series in zip(targets, settled) if series is None
        )
        return SeriesCollection(data=data, generated_at=self._now(), missing=missing)
