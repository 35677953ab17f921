from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .errors import InsufficientRecordsError, MisalignedInputError
from .models import FastaRecord

logger = logging.getLogger(__name__)


GAP = "-"

# IUPAC nucleotide codes (both cases) plus the usual gap/padding symbols.
_ALIGNMENT_ALPHABET = frozenset("ACGTUNRYSWKMBDHVacgtunryswkmbdhv-.*")


def check_record_counts(
    true_records: Sequence[FastaRecord],
    test_records: Sequence[FastaRecord],
    *,
    true_prefix: str,
    path: Optional[str | Path] = None,
) -> None:
    """Require at least two true and two test records; raise with a fix hint otherwise."""
    n_true = len(true_records)
    n_test = len(test_records)
    if n_true >= 2 and n_test >= 2:
        return
    raise InsufficientRecordsError(
        f"Expected 2 true haplotype records (header containing {true_prefix!r}) "
        f"and 2 test haplotype records, found {n_true} true and {n_test} test. "
        "Check the -p prefix against the FASTA headers.",
        n_true=n_true,
        n_test=n_test,
        path=path,
    )


def check_equal_lengths(records: Sequence[FastaRecord], *, path: Optional[str | Path] = None) -> int:
    """Ensure all records share one alignment length; return that length."""
    lengths = [len(r.sequence) for r in records]
    if len(set(lengths)) > 1:
        detail = ", ".join(f"{r.header!r}={len(r.sequence)}" for r in records)
        raise MisalignedInputError(
            "Sequences are not aligned to a common length (" + detail + "). "
            "Provide a multiple sequence alignment, not raw sequences.",
            path=path,
        )
    return lengths[0] if lengths else 0


def unexpected_symbols(sequence: str) -> List[str]:
    """Return the sorted distinct characters not in the nucleotide alignment alphabet."""
    return sorted(set(sequence) - _ALIGNMENT_ALPHABET)


def warn_unexpected_symbols(records: Iterable[FastaRecord]) -> None:
    """Log (but tolerate) non-nucleotide characters; comparison is purely positional."""
    for r in records:
        odd = unexpected_symbols(r.sequence)
        if odd:
            logger.warning(
                "Record %r contains non-nucleotide symbols %s; they are compared as-is.",
                r.header,
                "".join(odd),
            )
