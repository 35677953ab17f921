"""Errors raised while loading and validating an alignment.

Each error carries the process exit code the CLI reports for it, so that
benchmarking pipelines can tell failure kinds apart without parsing stderr.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class HapEvalError(RuntimeError):
    """Base class for all expected, user-facing failures."""

    exit_code = 2

    def __init__(self, message: str, *, path: Optional[str | Path] = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class AlignmentOpenError(HapEvalError):
    """The alignment file does not exist or cannot be opened."""

    exit_code = 5


class AlignmentReadError(HapEvalError):
    """Reading the alignment failed before the end of the file."""

    exit_code = 7


class InsufficientRecordsError(HapEvalError):
    """Fewer than two true or two test haplotype records were found."""

    exit_code = 8

    def __init__(self, message: str, *, n_true: int, n_test: int, path: Optional[str | Path] = None) -> None:
        super().__init__(message, path=path)
        self.n_true = int(n_true)
        self.n_test = int(n_test)


class MisalignedInputError(HapEvalError):
    """The four selected sequences do not share one alignment length."""

    exit_code = 9


class OutputWriteError(HapEvalError):
    """Writing the optional output-directory artifacts failed."""

    exit_code = 10
