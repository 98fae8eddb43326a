"""CLI entrypoint for geojson2svg."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .classification import ClassificationMethod, classify, class_count_histogram, default_class_count
from .config import AppConfig, load_config
from .errors import Geojson2SvgError
from .io_geojson import extract_sample, load_feature_collection
from .render import format_render_lines, run_render
from .util import setup_logging, write_json
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("geojson2svg.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geojson2svg",
        description="Render GeoJSON layers into an SVG map.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="map.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    render_p = subparsers.add_parser("render", help="Render the configured map to SVG.")
    add_common(render_p)
    render_p.add_argument(
        "--output",
        default=None,
        help="Override the output SVG path from the config.",
    )

    validate_p = subparsers.add_parser("validate", help="Validate config and input files.")
    add_common(validate_p)

    classify_p = subparsers.add_parser(
        "classify",
        help="Print class bounds of a numeric GeoJSON property.",
    )
    classify_p.add_argument("input", help="GeoJSON file.")
    classify_p.add_argument("--field", required=True, help="Numeric property to classify.")
    classify_p.add_argument(
        "--method",
        default="jenks",
        help="jenks, quantiles, equal_interval or headtail.",
    )
    classify_p.add_argument(
        "--nb-class",
        type=int,
        default=None,
        help="Number of classes (Sturges' rule when omitted).",
    )
    classify_p.add_argument("--json", default=None, help="Also write bounds and counts to this JSON file.")
    classify_p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    setup_logging(cfg.logging.file, verbose=args.verbose)
    return cfg


def _run_render(cfg: AppConfig, *, output: str | None) -> int:
    report = run_render(cfg, output_path=Path(output) if output else None)
    for line in format_render_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_classify(
    *,
    input_path: Path,
    field_name: str,
    method_name: str,
    nb_class: int | None,
    json_path: str | None,
) -> int:
    try:
        method = ClassificationMethod.parse(method_name)
        sample = extract_sample(load_feature_collection(input_path), field_name)
        effective = nb_class if nb_class is not None else default_class_count(len(sample))
        bounds = classify(sample, effective, method)
        counts = class_count_histogram(bounds, sample)
    except (Geojson2SvgError, ValueError, OSError) as exc:
        LOGGER.error("Classification failed: %s", exc)
        return 1

    LOGGER.info("Classified %d values of '%s' with %s", len(sample), field_name, method.value)
    for idx, count in enumerate(counts):
        LOGGER.info("  class %d: %.6g .. %.6g (%d features)", idx, bounds[idx], bounds[idx + 1], count)
    if json_path:
        write_json(
            Path(json_path),
            {
                "field": field_name,
                "method": method.value,
                "bounds": bounds,
                "counts": counts,
            },
        )
        LOGGER.info("Classification written to %s", json_path)
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    command = str(args.command)
    if command == "classify":
        setup_logging(verbose=args.verbose)
        return _run_classify(
            input_path=Path(args.input),
            field_name=str(args.field),
            method_name=str(args.method),
            nb_class=args.nb_class,
            json_path=args.json,
        )
    try:
        cfg = _load_and_setup(args)
    except (FileNotFoundError, ValueError) as exc:
        setup_logging(verbose=args.verbose)
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    if command == "render":
        return _run_render(cfg, output=args.output)
    if command == "validate":
        return _run_validate(cfg)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
