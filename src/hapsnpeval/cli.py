from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .alignment import load_alignment
from .classifier import evaluate
from .errors import HapEvalError, OutputWriteError
from .models import ColumnEvent, EvaluationResult
from .plotting import plot_event_positions
from .report import (
    format_event,
    render_report,
    result_to_dict,
    summary_lines,
    write_events_tsv,
)
from .utils import ensure_outdir, write_json

EXIT_OK = 0
EXIT_HELP = 1
EXIT_MISSING_PREFIX = 3
EXIT_INVALID_OPTION = 4
EXIT_MISSING_INPUT = 6


class _ArgumentError(Exception):
    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports errors to the caller instead of exiting with 2."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise _ArgumentError(message, EXIT_INVALID_OPTION)


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _handle_error(err: Exception) -> int:
    sys.stderr.write(f"{err.__class__.__name__}: {err}\n")
    if isinstance(err, HapEvalError):
        return err.exit_code
    return 2


def _usage_error(parser: argparse.ArgumentParser, message: str, exit_code: int) -> int:
    parser.print_usage(sys.stderr)
    sys.stderr.write(f"{parser.prog}: error: {message}\n")
    return exit_code


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(
        prog="hapsnpeval",
        add_help=False,
        description=(
            "HapSNPeval: evaluate two reconstructed haplotypes against the two true haplotypes "
            "of a FASTA multiple sequence alignment (phase switches, false SNPs, false indels, "
            "bad base calls)."
        ),
    )
    p.add_argument("-h", "--help", action="store_true", help="Show this help message and exit.")
    p.add_argument("--version", action="version", version=f"hapsnpeval {__version__}")
    p.add_argument(
        "-p",
        "--true-prefix",
        dest="true_prefix",
        default=None,
        help="Substring of the FASTA header of each true haplotype.",
    )
    p.add_argument(
        "-o",
        "--position-output",
        dest="position_output",
        action="store_true",
        help="Print one line per column event (1-based position) before the summary.",
    )
    p.add_argument(
        "--outdir",
        default=None,
        help="Also write summary.json, events.tsv.gz, an event plot and report.html here.",
    )
    p.add_argument("--progress", action="store_true", help="Show a progress bar on stderr.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")
    p.add_argument("--log-file", default=None, help="Also write log messages to this file.")
    p.add_argument(
        "alignment",
        nargs="?",
        default=None,
        help="Multiple sequence alignment of the two true and two test haplotypes (FASTA, optionally .gz).",
    )
    return p


def _write_outdir(
    outdir: str,
    *,
    result: EvaluationResult,
    events: List[ColumnEvent],
    alignment_path: str,
    true_prefix: str,
) -> Path:
    logger = logging.getLogger("hapsnpeval")
    try:
        out = ensure_outdir(outdir)
        summary = result_to_dict(result, alignment_path=alignment_path, true_prefix=true_prefix)
        write_json(out / "summary.json", summary)

        events_tsv = out / "events.tsv.gz"
        n = write_events_tsv(events_tsv, events)
        logger.info("Wrote %d events to %s", n, events_tsv)

        plot_png = out / "plots" / "event_positions.png"
        plot_event_positions(events=events, length=result.length, out_png=plot_png)

        return render_report(
            outdir=out,
            version=__version__,
            summary=summary,
            events_tsv=events_tsv.name,
            plots={"event_positions": str(Path("plots") / plot_png.name)},
        )
    except OSError as e:
        raise OutputWriteError(f"Unable to write outputs to {outdir}: {e}", path=outdir) from e


def cmd_evaluate(args: argparse.Namespace) -> int:
    logger = logging.getLogger("hapsnpeval")
    logger.info("hapsnpeval %s", __version__)

    try:
        haplotypes = load_alignment(args.alignment, args.true_prefix)

        # Events are buffered so nothing reaches stdout if writing --outdir fails.
        events: List[ColumnEvent] = []
        want_events = bool(args.position_output or args.outdir is not None)
        result = evaluate(
            haplotypes,
            on_event=events.append if want_events else None,
            progress=bool(args.progress),
        )

        if args.outdir is not None:
            report_path = _write_outdir(
                args.outdir,
                result=result,
                events=events,
                alignment_path=str(args.alignment),
                true_prefix=args.true_prefix,
            )
            logger.info("Report written: %s", report_path)

        if args.position_output:
            for ev in events:
                print(format_event(ev))
        print("\n".join(summary_lines(result)))
        return EXIT_OK
    except Exception as e:
        return _handle_error(e)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except _ArgumentError as e:
        return _usage_error(parser, str(e), e.exit_code)

    if args.help:
        parser.print_help(sys.stdout)
        return EXIT_HELP
    if not args.true_prefix:
        return _usage_error(parser, "missing true haplotype prefix (-p)", EXIT_MISSING_PREFIX)
    if args.alignment is None:
        return _usage_error(parser, "missing input alignment file path", EXIT_MISSING_INPUT)

    _setup_logging(int(args.verbose), logfile=Path(args.log_file) if args.log_file else None)
    return cmd_evaluate(args)


if __name__ == "__main__":
    raise SystemExit(main())
