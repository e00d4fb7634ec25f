"""Command line entry point: ``idcard-batch place`` and ``idcard-batch resize``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List

from . import config
from .errors import ConfigError, MissingInputDirectory
from .orchestrator import BatchOrchestrator
from .report import write_report

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_INPUT = 2
EXIT_NO_INPUTS = 3


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
        force=True,
    )


def _make_host():
    from .pillow_host import PillowHost

    return PillowHost()


def _run(job, args, host) -> int:
    orchestrator = BatchOrchestrator(host if host is not None else _make_host(), job)
    try:
        result = orchestrator.run()
    except MissingInputDirectory as exc:
        log.error("Error: %s", exc)
        return EXIT_BAD_INPUT

    if args.report:
        path = write_report(result, args.report)
        log.info("ℹ️ Report written to: %s", path)
    return EXIT_NO_INPUTS if result.no_inputs else EXIT_OK


def cmd_place(args: argparse.Namespace, host=None) -> int:
    settings = config.Settings(
        cli={
            "templates": args.templates,
            "assets": args.assets,
            "output": args.output,
            "export": args.export,
            "x": args.x,
            "y": args.y,
            "anchor": args.anchor,
            "photo_size": args.photo_size,
            "resample": args.resample,
        },
        config_path=args.config,
    )
    return _run(config.composite_job(settings), args, host)


def cmd_resize(args: argparse.Namespace, host=None) -> int:
    settings = config.Settings(
        cli={
            "input": args.input,
            "output": args.output,
            "size": args.size,
            "mode": args.mode,
            "resample": args.resample,
        },
        config_path=args.config,
    )
    return _run(config.resize_job(settings), args, host)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", help="Folder for finished files (created if missing)")
    parser.add_argument("--config", help="TOML file with [paths], [place] and [resize] tables")
    parser.add_argument(
        "--resample",
        choices=["bicubic", "bicubic-sharper", "bicubic-smoother", "bilinear"],
        default=None,
        help="Resampling filter (default: bicubic-sharper)",
    )
    parser.add_argument("--report", help="Also write the run summary as JSON to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idcard-batch",
        description="Batch ID-card compositing and image resizing",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    place = sub.add_parser("place", help="Place each roll number's photo into its template")
    place.add_argument("--templates", help="Folder of template documents (*.psd)")
    place.add_argument("--assets", help="Folder of photos named <roll number>.<ext>")
    place.add_argument("--export", choices=["psd", "jpg"], default=None,
                       help="psd keeps layers, jpg flattens (default: psd)")
    place.add_argument("--x", type=float, default=None, help="Target X in pixels")
    place.add_argument("--y", type=float, default=None, help="Target Y in pixels")
    place.add_argument("--anchor", choices=["top-left", "center"], default=None,
                       help="Point of the photo that lands on (x, y)")
    place.add_argument("--photo-size", default=None,
                       help="Fit the placed photo into WIDTHxHEIGHT before positioning")
    _add_common(place)
    place.set_defaults(func=cmd_place)

    resize = sub.add_parser("resize", help="Resize every image in a folder to one size")
    resize.add_argument("--input", help="Folder of images to resize")
    resize.add_argument("--size", default=None, help="Target WIDTHxHEIGHT (default: 195x247)")
    resize.add_argument("--mode", choices=["stretch", "fit"], default=None,
                        help="stretch distorts, fit pads to keep the aspect ratio (default: fit)")
    _add_common(resize)
    resize.set_defaults(func=cmd_resize)

    return parser


def main(argv: List[str] | None = None, host=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args, host=host)
    except ConfigError as exc:
        log.error("Error: %s", exc)
        return EXIT_BAD_INPUT


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
