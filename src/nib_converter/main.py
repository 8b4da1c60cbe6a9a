"""
Command line front ends for the Apple II NIB converter.

Provides the dsk2nib and nib2dsk commands plus a combined main() used by
``python -m nib_converter <command> ...``.
"""

import argparse
import sys
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nib_converter import __version__
from nib_converter.codec import NibError
from nib_converter.core.settings import ConverterSettings, load_settings
from nib_converter.imaging import (
    DecodeReport,
    ImageError,
    ImageFormat,
    ImageFormatError,
    decode_image,
    detect_format,
    encode,
    is_nibble_format,
    read_disk_image,
    read_nib_image,
    write_image,
)
from nib_converter.utils import handle_conversion_error, log_error, setup_logging

console = Console(highlight=False, soft_wrap=True)


# =============================================================================
# Argument Parsing
# =============================================================================

class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _volume(text: str) -> int:
    try:
        value = int(text.strip(), 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid volume: {text!r}") from None
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError("volume must be from 0 to 255")
    return value


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--workers", type=int, default=None,
                        help="Number of tracks converted in parallel (1-35)")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="Fail on checksum errors and missing sectors")
    parser.add_argument("--config", default=None,
                        help="JSON settings file")
    parser.add_argument("--log-file", default=None,
                        help="Write a debug log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="Show per-sector debug output")


def build_dsk2nib_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="dsk2nib",
                             description="Convert a DSK image to a NIB image.")
    parser.add_argument("dskfile", help="Input DSK file name")
    parser.add_argument("nibfile", help="Output NIB file name")
    parser.add_argument("volume", nargs="?", type=_volume, default=None,
                        help="Optional volume number from 0 to 255")
    _add_common_options(parser)
    return parser


def build_nib2dsk_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="nib2dsk",
                             description="Convert a NIB image to a DSK image.")
    parser.add_argument("nibfile", help="Input NIB file name")
    parser.add_argument("dskfile", help="Output DSK file name")
    _add_common_options(parser)
    return parser


def _build_settings(args: argparse.Namespace) -> ConverterSettings:
    """Load the config file if one was given and apply command line overrides."""
    settings = load_settings(args.config) if args.config else ConverterSettings()

    overrides = {
        "volume": getattr(args, "volume", None),
        "workers": args.workers,
        "strict": args.strict,
        "log_file": args.log_file,
        "verbose": args.verbose,
    }
    values = settings.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ConverterSettings(**values)


def _check_input_format(path: str, want_nibble: bool) -> None:
    """
    Reject an input file that is clearly the other kind of image.

    Raises:
        ImageFormatError: If a DSK was given where a NIB is expected, or
            the reverse
        ImageReadError: If the file does not exist
    """
    detected = detect_format(path)
    if detected is ImageFormat.UNKNOWN or is_nibble_format(detected) == want_nibble:
        return
    expected = "NIB" if want_nibble else "DSK"
    raise ImageFormatError(f"Input is not a {expected} image", path,
                           detected_format=detected.name)


# =============================================================================
# Output
# =============================================================================

def _print_banner(title: str) -> None:
    console.print(f"Apple II {title} Image Converter Version {__version__}\n")


def _print_fatal(operation: str, error: BaseException) -> None:
    log_error(operation, error)
    console.print(f"\n[bold red]Fatal:[/bold red] "
                  f"{escape(handle_conversion_error(error, operation))}")


def print_report(report: DecodeReport) -> None:
    """Print a summary table of a decode report."""
    table = Table(title="Decode Summary")
    table.add_column("Track", justify="right")
    table.add_column("Good", justify="right", style="green")
    table.add_column("Checksum Errors", justify="right", style="yellow")
    table.add_column("Missing", justify="right", style="red")
    table.add_column("Warnings", justify="right")

    for result in report.tracks:
        if result.is_complete and not result.warnings:
            continue
        good = sum(1 for s in result.sectors.values() if s.is_good)
        table.add_row(
            f"{result.track:02d}",
            str(good),
            str(len(result.checksum_errors)),
            str(len(result.missing_sectors)),
            str(len(result.warnings)),
        )

    table.add_row(
        "All",
        str(report.good_sectors),
        str(len(report.checksum_errors)),
        str(len(report.missing_sectors)),
        str(len(report.warnings)),
        style="bold",
    )

    console.print()
    console.print(table)
    if report.volume is not None:
        console.print(f"Volume: {report.volume:03d}")


# =============================================================================
# Commands
# =============================================================================

def dsk2nib(argv: Optional[Sequence[str]] = None) -> int:
    """
    Convert a DSK image into a NIB image.

    Usage: dsk2nib <dskfile> <nibfile> [<volume>]

    Returns:
        Process exit status
    """
    _print_banner("DSK to NIB")
    args = build_dsk2nib_parser().parse_args(argv)

    try:
        settings = _build_settings(args)
    except (OSError, ValidationError) as e:
        _print_fatal("dsk2nib", e)
        return 1

    setup_logging(settings.log_file, verbose=settings.verbose)
    console.print(escape(f"Converting {args.dskfile} => {args.nibfile} "
                         f"[Volume:{settings.volume:03d}]"))

    try:
        _check_input_format(args.dskfile, want_nibble=False)
        disk_image = read_disk_image(args.dskfile)
        nib_image = encode(disk_image, settings=settings)
        write_image(nib_image, args.nibfile)
    except (NibError, ImageError, ValueError) as e:
        _print_fatal("dsk2nib", e)
        return 1

    return 0


def nib2dsk(argv: Optional[Sequence[str]] = None) -> int:
    """
    Convert a NIB image into a DSK image.

    Usage: nib2dsk <nibfile> <dskfile>

    Returns:
        Process exit status
    """
    _print_banner("NIB to DSK")
    args = build_nib2dsk_parser().parse_args(argv)

    try:
        settings = _build_settings(args)
    except (OSError, ValidationError) as e:
        _print_fatal("nib2dsk", e)
        return 1

    setup_logging(settings.log_file, verbose=settings.verbose)
    console.print(escape(f"Converting {args.nibfile} => {args.dskfile}"))

    try:
        _check_input_format(args.nibfile, want_nibble=True)
        nib_image = read_nib_image(args.nibfile)
        result = decode_image(nib_image, settings=settings)
        write_image(result.image, args.dskfile)
    except (NibError, ImageError, ValueError) as e:
        _print_fatal("nib2dsk", e)
        return 1

    print_report(result.report)
    return 0


COMMANDS: Dict[str, Callable[[Optional[Sequence[str]]], int]] = {
    "dsk2nib": dsk2nib,
    "nib2dsk": nib2dsk,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Dispatch to a converter command.

    Usage: python -m nib_converter {dsk2nib,nib2dsk} ...
    """
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in COMMANDS:
        console.print(f"Usage: python -m nib_converter "
                      f"{{{','.join(COMMANDS)}}} ...")
        return 1
    return COMMANDS[args[0]](args[1:])


def dsk2nib_main() -> None:
    """Console script entry point for dsk2nib."""
    sys.exit(dsk2nib())


def nib2dsk_main() -> None:
    """Console script entry point for nib2dsk."""
    sys.exit(nib2dsk())


if __name__ == "__main__":
    sys.exit(main())
