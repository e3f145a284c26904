from datetime import date, datetime, timezone
import importlib


export = importlib.import_module("waterwatch.ingestion.export")
models = importlib.import_module("waterwatch.ingestion.models")


def test_series_to_csv_writes_one_row_per_point():
    series = models.WaterSeries(
        contaminant=models.Contaminant.NITRATE,
        metric="Nitrate (as N)",
        unit="mg/L",
        source="test",
        updated_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
        region="Des Moines, IA",
        points=(
            models.SamplePoint(date=date(2024, 4, 1), value=6.7, status=models.WaterStatus.WARN),
            models.SamplePoint(date=date(2024, 5, 1), value=None),
        ),
    )

    assert export.series_to_csv(series) == (
        "date,value,status,unit,region\n"
        '2024-04-01,6.7,warn,mg/L,"Des Moines, IA"\n'
        "2024-05-01,,,mg/L,\"Des Moines, IA\"\n"
    )


def test_advisories_to_csv_renders_missing_fields_as_blank():
    advisory = models.Advisory(
        id="dnr-big-creek-beach-2024-05-18",
        type=models.AdvisoryType.SWIM,
        contaminant=models.Contaminant.ECOLI,
        title="Swim advisory issued",
        summary="summary",
        issued_at=datetime(2024, 5, 18, tzinfo=timezone.utc),
        source="Iowa DNR",
    )

    lines = export.advisories_to_csv([advisory]).splitlines()

    assert lines[0] == "id,type,contaminant,title,issued_at,expires_at,status,source"
    assert lines[1] == (
        "dnr-big-creek-beach-2024-05-18,swim,ecoli,Swim advisory issued,"
        "2024-05-18T00:00:00Z,,alert,Iowa DNR"
    )
