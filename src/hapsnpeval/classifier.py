"""Per-column classification of an aligned diploid haplotype pair.

The classifier walks the alignment once. At every column it decides whether
the true haplotypes are homozygous, carry a heterozygous SNP, or carry an
indel, and updates the counters of both test haplotypes:

- homozygous columns can produce false indels (a gap in only one test
  haplotype) or false SNPs (the two test haplotypes disagree);
- heterozygous SNP columns assign each test haplotype to the true haplotype
  it matches and count a phase switch when that assignment flips; a base
  matching neither true base is a bad call;
- indel columns never touch phase; a test base matching neither true base is
  charged as a false SNP and also tallied as an indel-site mismatch.

A test haplotype's first informative SNP only sets its phase; it is never a
switch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from tqdm import tqdm

from .errors import MisalignedInputError
from .models import (
    AlignedHaplotypes,
    ColumnEvent,
    EvaluationResult,
    EventKind,
    HaplotypeCounters,
    PhaseIdentity,
)
from .validation import GAP

logger = logging.getLogger(__name__)

EventCallback = Callable[[ColumnEvent], None]


@dataclass
class ClassifierState:
    """Mutable state of one evaluation run."""

    test1: HaplotypeCounters = field(default_factory=HaplotypeCounters)
    test2: HaplotypeCounters = field(default_factory=HaplotypeCounters)
    homozygous_columns: int = 0
    het_snp_columns: int = 0
    indel_columns: int = 0
    events_total: int = 0
    on_event: Optional[EventCallback] = None

    def emit(self, position: int, kind: EventKind, haplotype: Optional[int] = None) -> None:
        self.events_total += 1
        if self.on_event is not None:
            self.on_event(ColumnEvent(position=position, kind=kind, haplotype=haplotype))


def _update_phase(
    state: ClassifierState,
    counters: HaplotypeCounters,
    haplotype: int,
    position: int,
    base: str,
    true1: str,
    true2: str,
) -> None:
    if base == true1:
        if counters.phase is PhaseIdentity.TRUE2:
            counters.switches += 1
            state.emit(position, EventKind.SWITCH, haplotype)
        counters.phase = PhaseIdentity.TRUE1
    elif base == true2:
        if counters.phase is PhaseIdentity.TRUE1:
            counters.switches += 1
            state.emit(position, EventKind.SWITCH, haplotype)
        counters.phase = PhaseIdentity.TRUE2
    else:
        # phase is left as it was
        counters.bad_calls += 1
        state.emit(position, EventKind.BAD_CALL, haplotype)


def classify_column(
    state: ClassifierState,
    index: int,
    true1: str,
    true2: str,
    test1: str,
    test2: str,
) -> None:
    """Classify the column at 0-based ``index`` and update ``state`` in place."""
    position = index + 1

    if true1 == true2:
        state.homozygous_columns += 1
        if test1 == GAP or test2 == GAP:
            # Only the non-gap side is charged; two gaps agree with each other.
            if test1 != GAP:
                state.test1.false_indels += 1
                state.emit(position, EventKind.FALSE_INDEL, 1)
            if test2 != GAP:
                state.test2.false_indels += 1
                state.emit(position, EventKind.FALSE_INDEL, 2)
        elif test1 != test2:
            if test1 != true1:
                state.test1.false_snps += 1
                state.emit(position, EventKind.FALSE_SNP, 1)
            else:
                state.test2.false_snps += 1
                state.emit(position, EventKind.FALSE_SNP, 2)
        return

    if true1 != GAP and true2 != GAP:
        state.het_snp_columns += 1
        _update_phase(state, state.test1, 1, position, test1, true1, true2)
        _update_phase(state, state.test2, 2, position, test2, true1, true2)
        return

    state.indel_columns += 1
    state.emit(position, EventKind.TRUE_INDEL)
    for haplotype, counters, base in ((1, state.test1, test1), (2, state.test2, test2)):
        if base != true1 and base != true2:
            counters.false_snps += 1
            counters.indel_site_mismatches += 1
            state.emit(position, EventKind.INDEL_SITE_MISMATCH, haplotype)


def evaluate(
    haplotypes: AlignedHaplotypes,
    *,
    on_event: Optional[EventCallback] = None,
    progress: bool = False,
) -> EvaluationResult:
    """Classify every alignment column and return the final counters.

    ``on_event`` is called once per event, in column order, as the scan
    proceeds. The result does not depend on whether a callback is given.
    """
    t1 = haplotypes.true1.sequence
    t2 = haplotypes.true2.sequence
    s1 = haplotypes.test1.sequence
    s2 = haplotypes.test2.sequence
    if not (len(t1) == len(t2) == len(s1) == len(s2)):
        raise MisalignedInputError(
            f"Haplotypes must have equal length, got {len(t1)}, {len(t2)}, {len(s1)}, {len(s2)}"
        )

    state = ClassifierState(on_event=on_event)

    columns: Iterable[tuple] = zip(t1, t2, s1, s2)
    if progress:
        columns = tqdm(columns, total=len(t1), unit="col", desc="Classifying columns")

    for i, (a, b, x, y) in enumerate(columns):
        classify_column(state, i, a, b, x, y)

    logger.debug(
        "Classified %d columns: %d homozygous, %d heterozygous SNP, %d indel",
        len(t1),
        state.homozygous_columns,
        state.het_snp_columns,
        state.indel_columns,
    )

    return EvaluationResult(
        test1=state.test1,
        test2=state.test2,
        length=len(t1),
        homozygous_columns=state.homozygous_columns,
        het_snp_columns=state.het_snp_columns,
        indel_columns=state.indel_columns,
        events_total=state.events_total,
        headers={
            "true1": haplotypes.true1.header,
            "true2": haplotypes.true2.header,
            "test1": haplotypes.test1.header,
            "test2": haplotypes.test2.header,
        },
    )
