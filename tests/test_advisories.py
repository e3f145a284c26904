from datetime import date, datetime, timezone
import importlib

import pytest


advisories = importlib.import_module("waterwatch.ingestion.advisories")
resolver_mod = importlib.import_module("waterwatch.ingestion.resolver")
models = importlib.import_module("waterwatch.ingestion.models")
errors = importlib.import_module("waterwatch.ingestion.errors")

Advisory = models.Advisory
AdvisoryType = models.AdvisoryType
Contaminant = models.Contaminant
SeriesCollection = models.SeriesCollection
WaterSeries = models.WaterSeries

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def make_advisory(advisory_id, advisory_type, issued_day, title="Advisory"):
    return Advisory(
        id=advisory_id,
        type=advisory_type,
        title=title,
        summary="summary",
        issued_at=datetime.combine(issued_day, datetime.min.time(), tzinfo=timezone.utc),
        source="test",
    )


def make_series(contaminant, items):
    return WaterSeries(
        contaminant=contaminant,
        metric="metric",
        unit="unit",
        source="test",
        updated_at=NOW,
        region="Region",
        points=(),
        advisories=tuple(items),
    )


def make_collection():
    return SeriesCollection(
        data=(
            make_series(
                Contaminant.ECOLI,
                [
                    make_advisory("swim-1", AdvisoryType.SWIM, date(2024, 5, 11)),
                    make_advisory("shared", AdvisoryType.BOIL, date(2024, 5, 1), title="first"),
                ],
            ),
            make_series(
                Contaminant.PFAS,
                [
                    make_advisory("pfas-1", AdvisoryType.PFAS, date(2024, 5, 20)),
                    make_advisory("shared", AdvisoryType.BOIL, date(2024, 5, 1), title="second"),
                ],
            ),
        ),
        generated_at=NOW,
    )


def test_advisories_are_deduplicated_and_sorted_newest_first():
    results = advisories.reduce_advisories(make_collection())

    assert [advisory.id for advisory in results] == ["pfas-1", "swim-1", "shared"]
    assert results[-1].title == "second"


def test_advisories_can_be_filtered_by_type():
    results = advisories.reduce_advisories(make_collection(), "swim")

    assert [advisory.id for advisory in results] == ["swim-1"]


def test_invalid_advisory_type_is_rejected():
    with pytest.raises(errors.ValidationFailure):
        advisories.reduce_advisories(make_collection(), "flood")


def test_collect_advisories_from_bundled_sources():
    resolver = resolver_mod.WaterSeriesResolver(now=lambda: NOW)

    results = advisories.collect_advisories(resolver, AdvisoryType.PFAS)

    assert len(results) == 1
    assert results[0].affected_systems == ("IA5224026",)


def test_datasources_overview_lists_each_series():
    resolver = resolver_mod.WaterSeriesResolver(now=lambda: NOW)

    overview = advisories.datasources_overview(resolver)

    assert overview["generatedAt"] == "2024-06-01T00:00:00Z"
    by_contaminant = {row["contaminant"]: row for row in overview["contaminants"]}
    assert set(by_contaminant) == {contaminant.value for contaminant in Contaminant}
    assert by_contaminant["pfas"]["status"] == "alert"
