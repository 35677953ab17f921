from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class FastaRecord:
    """One alignment record: the header text after '>' and the gapped sequence."""

    header: str
    sequence: str


@dataclass(frozen=True)
class AlignedHaplotypes:
    """The four aligned sequences of one evaluation run.

    Attributes
    ----------
    true1, true2:
        Ground-truth haplotypes, in file order.
    test1, test2:
        Reconstructed haplotypes under evaluation, in file order.

    All four sequences have the same length; the loader enforces this.
    """

    true1: FastaRecord
    true2: FastaRecord
    test1: FastaRecord
    test2: FastaRecord

    @property
    def length(self) -> int:
        return len(self.true1.sequence)


class PhaseIdentity(Enum):
    UNSET = 0
    TRUE1 = 1
    TRUE2 = 2


class EventKind(Enum):
    SWITCH = "switch"
    FALSE_SNP = "false_snp"
    FALSE_INDEL = "false_indel"
    BAD_CALL = "bad_call"
    TRUE_INDEL = "true_indel"
    INDEL_SITE_MISMATCH = "indel_site_mismatch"


@dataclass(frozen=True)
class ColumnEvent:
    """Something noteworthy found at one alignment column."""

    position: int  # 1-based column
    kind: EventKind
    haplotype: Optional[int] = None  # 1 or 2; None for column-level events


@dataclass
class HaplotypeCounters:
    """Running counters and phase identity for one test haplotype.

    ``indel_site_mismatches`` counts the subset of ``false_snps`` charged at
    columns where the true haplotypes carry an indel.
    """

    switches: int = 0
    false_snps: int = 0
    false_indels: int = 0
    bad_calls: int = 0
    indel_site_mismatches: int = 0
    phase: PhaseIdentity = PhaseIdentity.UNSET


@dataclass(frozen=True)
class EvaluationResult:
    """Final per-haplotype counters plus column tallies for one run."""

    test1: HaplotypeCounters
    test2: HaplotypeCounters
    length: int
    homozygous_columns: int = 0
    het_snp_columns: int = 0
    indel_columns: int = 0
    events_total: int = 0
    headers: dict = field(default_factory=dict)
