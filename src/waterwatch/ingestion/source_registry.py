from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional, Protocol

from .adapters.beach import BeachMonitoringAdapter
from .adapters.compliance import ComplianceAdapter
from .adapters.pfas import PfasSurveyAdapter
from .config import Settings
from .http_client import SimpleHttpClient
from .models import Contaminant, SeriesQuery, WaterSeries


class SourceAdapter(Protocol):
    source_name: str
    contaminant: Contaminant

    def resolve(self, query: Optional[SeriesQuery] = None) -> Optional[WaterSeries]: ...


def build_adapter_registry(
    client: Optional[SimpleHttpClient] = None,
    settings: Optional[Settings] = None,
) -> Mapping[Contaminant, SourceAdapter]:
    """Map every contaminant to the live source that serves it.

    Without a client the beach and PFAS adapters serve their bundled records.
    """
    settings = settings or Settings()
    registry: dict[Contaminant, SourceAdapter] = {
        Contaminant.ECOLI: BeachMonitoringAdapter(client=client, endpoint=settings.beach_endpoint),
        Contaminant.PFAS: PfasSurveyAdapter(client=client, endpoint=settings.pfas_endpoint),
    }
    for contaminant in (
        Contaminant.NITRATE,
        Contaminant.NITRITE,
        Contaminant.ARSENIC,
        Contaminant.DBP,
        Contaminant.FLUORIDE,
    ):
        registry[contaminant] = ComplianceAdapter(contaminant)
    return MappingProxyType(registry)
