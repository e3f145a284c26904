import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .adapters.sensors import fetch_realtime_nitrate_sensors
from .advisories import collect_advisories, datasources_overview
from .config import Settings
from .errors import NotFoundError, ValidationFailure
from .export import advisories_to_csv, series_to_csv
from .http_client import SimpleHttpClient
from .models import AdvisoryType, Contaminant, SeriesQuery
from .resolver import WaterSeriesResolver
from .source_registry import build_adapter_registry


CONTAMINANT_CHOICES = [contaminant.value for contaminant in Contaminant]
ADVISORY_TYPE_CHOICES = [advisory_type.value for advisory_type in AdvisoryType]


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    _ = parser.add_argument("--cache-dir")
    _ = parser.add_argument("--timeout-seconds", type=float)
    _ = parser.add_argument("--offline", action="store_true")
    _ = parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="waterwatch")
    subparsers = parser.add_subparsers(dest="command", required=True)

    series = subparsers.add_parser("series")
    _ = series.add_argument("contaminant", choices=CONTAMINANT_CHOICES)
    _ = series.add_argument("--system-id")
    _ = series.add_argument("--zip")
    _ = series.add_argument("--county")
    _ = series.add_argument("--site")
    _ = series.add_argument("--kind")
    _ = series.add_argument("--format", choices=["json", "csv"], default="json")
    _add_common_arguments(series)

    collection = subparsers.add_parser("collection")
    _ = collection.add_argument(
        "--contaminant", action="append", choices=CONTAMINANT_CHOICES, dest="contaminants"
    )
    _add_common_arguments(collection)

    advisories = subparsers.add_parser("advisories")
    _ = advisories.add_argument("--type", choices=ADVISORY_TYPE_CHOICES)
    _ = advisories.add_argument("--format", choices=["json", "csv"], default="json")
    _add_common_arguments(advisories)

    overview = subparsers.add_parser("overview")
    _add_common_arguments(overview)

    sensors = subparsers.add_parser("sensors")
    _add_common_arguments(sensors)

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.cache_dir:
        settings = replace(settings, cache_dir=Path(args.cache_dir))
    if args.timeout_seconds and args.timeout_seconds > 0:
        settings = replace(settings, remote_timeout_seconds=args.timeout_seconds)
    return settings


def _client_from_args(args: argparse.Namespace, settings: Settings) -> Optional[SimpleHttpClient]:
    if args.offline:
        return None
    return SimpleHttpClient(timeout_seconds=settings.remote_timeout_seconds)


def build_resolver(args: argparse.Namespace) -> WaterSeriesResolver:
    settings = _settings_from_args(args)
    adapters = build_adapter_registry(client=_client_from_args(args, settings), settings=settings)
    return WaterSeriesResolver(adapters=adapters, settings=settings)


def run_series_command(args: argparse.Namespace) -> tuple[int, str]:
    resolver = build_resolver(args)
    query = SeriesQuery(
        system_id=args.system_id,
        zip=args.zip,
        county=args.county,
        site=args.site,
        kind=args.kind,
    )
    try:
        series = resolver.resolve_strict(Contaminant(args.contaminant), query)
    except NotFoundError as error:
        return 2, json.dumps({"error": str(error)})

    if args.format == "csv":
        return 0, series_to_csv(series)
    return 0, json.dumps(series.to_dict(), ensure_ascii=False)


def run_collection_command(args: argparse.Namespace) -> tuple[int, str]:
    resolver = build_resolver(args)
    contaminants = [Contaminant(value) for value in args.contaminants] if args.contaminants else None
    collection = resolver.resolve_collection(contaminants)
    return 0, json.dumps(collection.to_dict(), ensure_ascii=False)


def run_advisories_command(args: argparse.Namespace) -> tuple[int, str]:
    resolver = build_resolver(args)
    try:
        advisories = collect_advisories(resolver, args.type)
    except ValidationFailure as error:
        return 2, json.dumps({"error": str(error)})

    if args.format == "csv":
        return 0, advisories_to_csv(advisories)
    return 0, json.dumps([advisory.to_dict() for advisory in advisories], ensure_ascii=False)


def run_overview_command(args: argparse.Namespace) -> tuple[int, str]:
    return 0, json.dumps(datasources_overview(build_resolver(args)), ensure_ascii=False)


def run_sensors_command(args: argparse.Namespace) -> tuple[int, str]:
    settings = _settings_from_args(args)
    sensors = fetch_realtime_nitrate_sensors(
        client=_client_from_args(args, settings),
        endpoint=settings.sensor_endpoint,
    )
    return 0, json.dumps([sensor.to_dict() for sensor in sensors], ensure_ascii=False)


COMMANDS = {
    "series": run_series_command,
    "collection": run_collection_command,
    "advisories": run_advisories_command,
    "overview": run_overview_command,
    "sensors": run_sensors_command,
}


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    exit_code, output = command(args)
    print(output.rstrip("\n"))
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
