import importlib
import json

import pytest


snapshot_cache = importlib.import_module("waterwatch.ingestion.snapshot_cache")
config = importlib.import_module("waterwatch.ingestion.config")
models = importlib.import_module("waterwatch.ingestion.models")
errors = importlib.import_module("waterwatch.ingestion.errors")

Contaminant = models.Contaminant
SnapshotCache = snapshot_cache.SnapshotCache


def write_snapshot(directory, contaminant="nitrate", value=7.1, filename="nitrate.json"):
    payload = {
        "contaminant": contaminant,
        "metric": "Nitrate (as N)",
        "unit": "mg/L",
        "source": "fixture",
        "updatedAt": "2024-05-20T12:00:00Z",
        "region": "Des Moines Water Works",
        "systemId": "IA2580091",
        "points": [{"date": "2024-05-01", "value": value}],
        "status": "safe",
    }
    (directory / filename).write_text(json.dumps(payload), encoding="utf-8")


def test_bundled_snapshots_decode_for_every_contaminant():
    cache = SnapshotCache(config.DEFAULT_CACHE_DIR)

    for contaminant in Contaminant:
        series = cache.read(contaminant)
        assert series.contaminant == contaminant
        assert series.points


def test_read_is_memoized_per_instance(tmp_path):
    write_snapshot(tmp_path, value=7.1)
    cache = SnapshotCache(tmp_path)

    first = cache.read(Contaminant.NITRATE)
    write_snapshot(tmp_path, value=9.9)
    second = cache.read(Contaminant.NITRATE)

    assert cache.reads == 1
    assert second is first
    assert second.points[0].value == 7.1


def test_invalidate_forces_a_reread(tmp_path):
    write_snapshot(tmp_path, value=7.1)
    cache = SnapshotCache(tmp_path)
    cache.read(Contaminant.NITRATE)

    write_snapshot(tmp_path, value=9.9)
    cache.invalidate(Contaminant.NITRATE)

    assert cache.read(Contaminant.NITRATE).points[0].value == 9.9
    assert cache.reads == 2


def test_ttl_expires_entries(tmp_path):
    write_snapshot(tmp_path)
    clock_values = [0.0]
    cache = SnapshotCache(tmp_path, ttl_seconds=60, clock=lambda: clock_values[0])

    cache.read(Contaminant.NITRATE)
    clock_values[0] = 30.0
    cache.read(Contaminant.NITRATE)
    assert cache.reads == 1

    clock_values[0] = 61.0
    cache.read(Contaminant.NITRATE)
    assert cache.reads == 2


def test_missing_snapshot_raises_not_found_and_is_not_remembered(tmp_path):
    cache = SnapshotCache(tmp_path)

    with pytest.raises(errors.NotFoundError):
        cache.read(Contaminant.NITRATE)

    write_snapshot(tmp_path)
    assert cache.read(Contaminant.NITRATE).region == "Des Moines Water Works"


def test_corrupt_snapshot_raises_validation_failure(tmp_path):
    (tmp_path / "nitrate.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(errors.ValidationFailure):
        SnapshotCache(tmp_path).read(Contaminant.NITRATE)


def test_snapshot_for_wrong_contaminant_is_rejected(tmp_path):
    write_snapshot(tmp_path, contaminant="nitrite")

    with pytest.raises(errors.ValidationFailure):
        SnapshotCache(tmp_path).read(Contaminant.NITRATE)


def test_ecoli_snapshot_file_is_named_bacteria():
    cache = SnapshotCache("/tmp/snapshots")

    assert cache.path_for(Contaminant.ECOLI).name == "bacteria.json"


def test_snapshot_with_invalid_utf8_raises_validation_failure(tmp_path):
    (tmp_path / "nitrate.json").write_bytes(b"\xff\xfe{}")

    with pytest.raises(errors.ValidationFailure):
        SnapshotCache(tmp_path).read(Contaminant.NITRATE)


def test_unreadable_snapshot_path_raises_validation_failure(tmp_path):
    (tmp_path / "nitrate.json").mkdir()

    with pytest.raises(errors.ValidationFailure):
        SnapshotCache(tmp_path).read(Contaminant.NITRATE)


def test_deeply_nested_snapshot_raises_validation_failure(tmp_path):
    (tmp_path / "nitrate.json").write_text("[" * 200000 + "]" * 200000, encoding="utf-8")

    with pytest.raises(errors.ValidationFailure):
        SnapshotCache(tmp_path).read(Contaminant.NITRATE)
