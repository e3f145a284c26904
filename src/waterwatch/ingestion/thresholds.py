from types import MappingProxyType
from typing import Mapping, Optional, Union

from .errors import ConfigurationError
from .models import Contaminant, ThresholdMetadata


DEFAULT_FRESHNESS_DAYS = 30


_THRESHOLDS: dict[Contaminant, ThresholdMetadata] = {
    Contaminant.NITRATE: ThresholdMetadata(
        contaminant=Contaminant.NITRATE,
        label="Nitrate (as N)",
        unit="mg/L",
        mcl=10,
        warn_level=5,
        alert_level=10,
        freshness_days=7,
        notes=(
            "EPA Maximum Contaminant Level (MCL) for nitrate in finished drinking water "
            "is 10 mg/L as nitrogen."
        ),
        safe_copy=(
            "Levels are well below the 10 mg/L EPA limit. Typical tap water is expected "
            "to be safe for all ages."
        ),
        warn_copy=(
            "Levels are trending upward or above 50% of the EPA limit. Households mixing "
            "infant formula should monitor results closely."
        ),
        alert_copy=(
            "Recent samples meet or exceed the 10 mg/L EPA limit. Use alternate water for "
            "infants and contact the utility for updates."
        ),
    ),
    Contaminant.NITRITE: ThresholdMetadata(
        contaminant=Contaminant.NITRITE,
        label="Nitrite (as N)",
        unit="mg/L",
        mcl=1,
        warn_level=0.5,
        alert_level=1,
        freshness_days=7,
        notes=(
            "EPA MCL for nitrite is 1 mg/L as nitrogen. Infants are highly sensitive to "
            "elevated nitrite."
        ),
        safe_copy="Nitrite is below half of the EPA 1 mg/L limit.",
        warn_copy=(
            "Nitrite is at or above 50% of the EPA limit. Sensitive groups should consider "
            "using bottled or filtered water."
        ),
        alert_copy=(
            "Nitrite is at or above the 1 mg/L limit or an advisory is in effect. Follow "
            "local health guidance immediately."
        ),
    ),
    Contaminant.ECOLI: ThresholdMetadata(
        contaminant=Contaminant.ECOLI,
        label="E. coli",
        unit="MPN/100mL",
        warn_level=126,
        alert_level=235,
        freshness_days=3,
        notes=(
            "For recreational waters the EPA single-sample maximum is 235 MPN/100mL. Any "
            "detection in treated drinking water triggers a violation."
        ),
        safe_copy="No recent detections above advisory thresholds.",
        warn_copy=(
            "Elevated results or recent rain events warrant caution. Public water systems "
            "may issue boil advisories if detections persist."
        ),
        alert_copy=(
            "Advisory level reached or exceeded. Avoid ingestion and follow boil water "
            "orders until cleared by officials."
        ),
    ),
    Contaminant.PFAS: ThresholdMetadata(
        contaminant=Contaminant.PFAS,
        label="PFAS (PFOA+PFOS)",
        unit="ppt",
        health_advisory=4,
        warn_level=2,
        alert_level=4,
        freshness_days=30,
        notes=(
            "EPA final rule sets a 4 ppt MCL for PFOA and PFOS with a hazard index of 1 "
            "for mixtures. Iowa DNR monitoring continues to expand."
        ),
        safe_copy="Results are below the EPA 4 ppt MCL for PFAS.",
        warn_copy=(
            "Results approaching the 4 ppt federal limit. Consider point-of-use filtration "
            "if available and monitor upcoming samples."
        ),
        alert_copy=(
            "Results at or above the 4 ppt MCL or PFAS advisory issued. Use certified "
            "filtration or alternative water where possible."
        ),
    ),
    Contaminant.ARSENIC: ThresholdMetadata(
        contaminant=Contaminant.ARSENIC,
        label="Arsenic",
        unit="µg/L",
        mcl=10,
        warn_level=5,
        alert_level=10,
        freshness_days=90,
        notes=(
            "EPA MCL for arsenic is 10 µg/L. Chronic exposure above 5 µg/L has been "
            "linked to cancer and cardiovascular risks."
        ),
        safe_copy="Arsenic remains below half of the 10 µg/L MCL.",
        warn_copy=(
            "Arsenic exceeds 50% of the EPA limit. Pregnant people and infants should "
            "consider alternative water sources."
        ),
        alert_copy=(
            "Arsenic meets or exceeds the 10 µg/L limit. Follow utility guidance and "
            "consider certified treatment options."
        ),
    ),
    Contaminant.DBP: ThresholdMetadata(
        contaminant=Contaminant.DBP,
        label="Disinfection Byproducts",
        unit="µg/L",
        mcl=80,
        warn_level=56,
        alert_level=80,
        freshness_days=90,
        notes=(
            "EPA Stage 2 DBPR sets MCLs at 80 µg/L for total trihalomethanes (TTHM) and "
            "60 µg/L for haloacetic acids (HAA5). Utilities report locational running "
            "annual averages."
        ),
        safe_copy="Recent DBP results are well below EPA running annual limits.",
        warn_copy=(
            "DBP levels are above 70% of allowable limits. Utilities may adjust treatment "
            "to manage precursors."
        ),
        alert_copy=(
            "DBP levels exceed EPA limits or an exceedance notice has been issued. "
            "Sensitive populations should consult healthcare providers."
        ),
    ),
    Contaminant.FLUORIDE: ThresholdMetadata(
        contaminant=Contaminant.FLUORIDE,
        label="Fluoride",
        unit="mg/L",
        mcl=4,
        warn_level=2,
        alert_level=4,
        freshness_days=180,
        notes=(
            "EPA primary MCL is 4 mg/L with a secondary standard of 2 mg/L to prevent "
            "dental fluorosis. Many systems target 0.7 mg/L for cavity prevention."
        ),
        safe_copy="Fluoride levels support cavity prevention and remain under 2 mg/L.",
        warn_copy=(
            "Fluoride exceeds the secondary standard of 2 mg/L. Families with young "
            "children should monitor for mottled teeth."
        ),
        alert_copy=(
            "Fluoride meets or exceeds the 4 mg/L MCL. Seek alternative water and report "
            "any health concerns to your provider."
        ),
    ),
}

THRESHOLDS: Mapping[Contaminant, ThresholdMetadata] = MappingProxyType(_THRESHOLDS)


def threshold_for(contaminant: Union[Contaminant, str]) -> ThresholdMetadata:
    if not isinstance(contaminant, Contaminant):
        try:
            contaminant = Contaminant(str(contaminant).strip().lower())
        except ValueError as error:
            raise ConfigurationError(f"unsupported contaminant: {contaminant}") from error

    threshold = THRESHOLDS.get(contaminant)
    if threshold is None:
        raise ConfigurationError(f"no threshold configured for {contaminant.value}")
    return threshold


def warn_ratio(threshold: ThresholdMetadata, value: Optional[float]) -> Optional[float]:
    if value is None or not threshold.alert_level:
        return None
    return value / threshold.alert_level
