import importlib

import pytest


models = importlib.import_module("waterwatch.ingestion.models")
thresholds = importlib.import_module("waterwatch.ingestion.thresholds")
errors = importlib.import_module("waterwatch.ingestion.errors")

Contaminant = models.Contaminant


def test_every_contaminant_has_a_threshold():
    assert set(thresholds.THRESHOLDS) == set(Contaminant)


def test_warn_level_never_exceeds_alert_level():
    for threshold in thresholds.THRESHOLDS.values():
        if threshold.warn_level is not None and threshold.alert_level is not None:
            assert threshold.warn_level <= threshold.alert_level


def test_threshold_lookup_accepts_identifier_strings():
    nitrate = thresholds.threshold_for("Nitrate")

    assert nitrate.contaminant == Contaminant.NITRATE
    assert nitrate.warn_level == 5
    assert nitrate.alert_level == 10
    assert nitrate.freshness_days == 7


def test_unknown_contaminant_is_a_configuration_error():
    with pytest.raises(errors.ConfigurationError):
        thresholds.threshold_for("lead")


def test_threshold_registry_is_read_only():
    with pytest.raises(TypeError):
        thresholds.THRESHOLDS[Contaminant.NITRATE] = None


def test_warn_ratio_is_relative_to_alert_level():
    ecoli = thresholds.threshold_for(Contaminant.ECOLI)

    assert thresholds.warn_ratio(ecoli, 117.5) == pytest.approx(0.5)
    assert thresholds.warn_ratio(ecoli, None) is None


def test_threshold_to_dict_uses_camel_case_keys():
    payload = thresholds.threshold_for(Contaminant.PFAS).to_dict()

    assert payload["healthAdvisory"] == 4
    assert payload["alertLevel"] == 4
    assert payload["freshnessDays"] == 30
    assert payload["label"] == "PFAS (PFOA+PFOS)"
