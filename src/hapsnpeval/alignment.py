"""Alignment loading.

The input is one FASTA multiple sequence alignment holding two true haplotypes
and two reconstructed (test) haplotypes. Records are told apart by header: a
header containing the true-haplotype prefix marks a true haplotype, anything
else is a test haplotype. Within each class, file order decides which is
haplotype 1 and which is haplotype 2.
"""

from __future__ import annotations

import gzip
import logging
import os
from pathlib import Path
from typing import Iterator, List, Tuple

import pysam

from .errors import AlignmentOpenError, AlignmentReadError
from .models import AlignedHaplotypes, FastaRecord
from .validation import check_equal_lengths, check_record_counts, warn_unexpected_symbols

logger = logging.getLogger(__name__)


def _record_header(entry: pysam.FastxRecord) -> str:
    # pysam splits the header line at the first whitespace; rejoin it.
    if entry.comment:
        return f"{entry.name} {entry.comment}"
    return str(entry.name)


def _is_gzip(path: Path) -> bool:
    with open(path, "rb") as fh:
        return fh.read(2) == b"\x1f\x8b"


def read_raw_headers(path: str | Path) -> List[str]:
    """Header lines (text after '>') exactly as written, in file order.

    pysam collapses the whitespace between name and comment, so prefix
    matching uses these instead.
    """
    p = Path(path)
    headers: List[str] = []
    try:
        fh = gzip.open(p, "rt") if _is_gzip(p) else open(p, "rt")
        with fh:
            for line in fh:
                if line.startswith(">"):
                    headers.append(line[1:].rstrip("\r\n"))
    except (OSError, EOFError, ValueError) as e:
        raise AlignmentReadError(
            f"An error occurred while reading the input alignment file {p}: {e}", path=p
        ) from e
    return headers


def iter_fasta_records(path: str | Path) -> Iterator[FastaRecord]:
    """Yield records of a (possibly wrapped, possibly gzipped) FASTA file in file order.

    Raises
    ------
    AlignmentOpenError
        If the file does not exist or cannot be opened.
    AlignmentReadError
        If reading fails before the end of the file.
    """
    p = Path(path)
    if not p.is_file() or not os.access(p, os.R_OK):
        raise AlignmentOpenError(f"Unable to open input alignment file: {p}", path=p)

    raw_headers = read_raw_headers(p)

    try:
        fh = pysam.FastxFile(str(p))
    except OSError as e:
        raise AlignmentOpenError(f"Unable to open input alignment file: {p} ({e})", path=p) from e

    with fh:
        try:
            for i, entry in enumerate(fh):
                header = raw_headers[i] if i < len(raw_headers) else _record_header(entry)
                yield FastaRecord(header=header, sequence=entry.sequence or "")
        except (OSError, ValueError) as e:
            raise AlignmentReadError(
                f"An error occurred while reading the input alignment file {p}: {e}", path=p
            ) from e


def partition_records(
    records: Iterator[FastaRecord] | List[FastaRecord],
    true_prefix: str,
) -> Tuple[List[FastaRecord], List[FastaRecord]]:
    """Split records into (true, test) lists by header substring, preserving file order."""
    true_records: List[FastaRecord] = []
    test_records: List[FastaRecord] = []
    for rec in records:
        if true_prefix in rec.header:
            true_records.append(rec)
        else:
            test_records.append(rec)
    return true_records, test_records


def load_alignment(path: str | Path, true_prefix: str) -> AlignedHaplotypes:
    """Load and validate the four haplotypes of an alignment.

    Parameters
    ----------
    path:
        FASTA alignment (.fa/.fasta, optionally .gz).
    true_prefix:
        Substring identifying true-haplotype headers.

    Only the first two records of each class are used; extra records are
    ignored with a warning.
    """
    true_records, test_records = partition_records(iter_fasta_records(path), true_prefix)
    logger.info(
        "Read %d true and %d test haplotype records from %s",
        len(true_records),
        len(test_records),
        path,
    )

    check_record_counts(true_records, test_records, true_prefix=true_prefix, path=path)

    if len(true_records) > 2:
        logger.warning(
            "Ignoring %d extra true haplotype record(s) after %r",
            len(true_records) - 2,
            true_records[1].header,
        )
    if len(test_records) > 2:
        logger.warning(
            "Ignoring %d extra test haplotype record(s) after %r",
            len(test_records) - 2,
            test_records[1].header,
        )

    selected = [true_records[0], true_records[1], test_records[0], test_records[1]]
    length = check_equal_lengths(selected, path=path)
    warn_unexpected_symbols(selected)

    logger.info(
        "True haplotypes: %r, %r; test haplotypes: %r, %r; %d aligned columns",
        selected[0].header,
        selected[1].header,
        selected[2].header,
        selected[3].header,
        length,
    )
    return AlignedHaplotypes(
        true1=selected[0],
        true2=selected[1],
        test1=selected[2],
        test2=selected[3],
    )
