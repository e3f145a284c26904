import importlib
import json


cli = importlib.import_module("waterwatch.ingestion.cli")
config = importlib.import_module("waterwatch.ingestion.config")


def test_cli_series_command_defaults():
    parser = cli.build_parser()
    args = parser.parse_args(["series", "nitrate"])

    assert args.command == "series"
    assert args.contaminant == "nitrate"
    assert args.format == "json"
    assert args.offline is False
    assert args.log_level == "WARNING"


def test_cli_collection_accepts_repeated_contaminants():
    parser = cli.build_parser()
    args = parser.parse_args(["collection", "--contaminant", "pfas", "--contaminant", "ecoli"])

    assert args.contaminants == ["pfas", "ecoli"]


def test_settings_from_args_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("WATERWATCH_REMOTE_TIMEOUT_SECONDS", "5")
    args = cli.build_parser().parse_args(
        ["overview", "--cache-dir", str(tmp_path), "--timeout-seconds", "2.5"]
    )

    settings = cli._settings_from_args(args)

    assert settings.cache_dir == tmp_path
    assert settings.remote_timeout_seconds == 2.5


def test_cli_offline_series_prints_json(capsys):
    exit_code = cli.main(["series", "pfas", "--offline"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["contaminant"] == "pfas"
    assert payload["systemId"] == "IA5224026"
    assert payload["advisories"][0]["type"] == "pfas"


def test_cli_series_csv_format(capsys):
    exit_code = cli.main(
        ["series", "nitrate", "--offline", "--format", "csv", "--cache-dir", str(config.DEFAULT_CACHE_DIR)]
    )

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "date,value,status,unit,region"
    assert len(lines) == 7


def test_cli_series_unknown_system_exits_with_error(capsys, tmp_path):
    exit_code = cli.main(
        ["series", "arsenic", "--offline", "--system-id", "IA0000000", "--cache-dir", str(tmp_path)]
    )

    assert exit_code == 2
    assert "No water series found for arsenic" in json.loads(capsys.readouterr().out)["error"]


def test_cli_offline_collection_lists_all_contaminants(capsys):
    exit_code = cli.main(["collection", "--offline"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["data"]) == 7
    assert "generatedAt" in payload


def test_cli_advisories_filtered_by_type(capsys):
    exit_code = cli.main(["advisories", "--offline", "--type", "swim"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload
    assert {row["type"] for row in payload} == {"swim"}


def test_cli_sensors_command(capsys):
    exit_code = cli.main(["sensors", "--offline"])

    assert exit_code == 0
    assert len(json.loads(capsys.readouterr().out)) == 3
