from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

from .utils import ensure_outdir, write_json

# Ten-column block exercising every column type. Columns (1-based within the block):
#   2  het SNP, sets phase (test1 -> true1, test2 -> true2)
#   4  true indel, both test haplotypes agree with a true haplotype
#   5  het SNP, both test haplotypes switch
#   6  homozygous, test1 gap -> false indel charged to test2
#   7  homozygous, test haplotypes disagree -> false SNP in test2
#   8  het SNP, test1 matches neither -> bad call
#   10 true indel, test1 matches neither -> false SNP (indel site) in test1
_BLOCK = {
    "true1": "ACTAACGTA-",
    "true2": "AGT-GCGCAG",
    "test1": "ACTAG-GAAT",
    "test2": "AGT-ACTTAG",
}

_FLANK = "ACGT" * 15

EXPECTED_COUNTS: Dict[str, Dict[str, int]] = {
    "test1": {"switches": 1, "false_snps": 1, "false_indels": 0, "bad_calls": 1, "indel_site_mismatches": 1},
    "test2": {"switches": 1, "false_snps": 1, "false_indels": 1, "bad_calls": 0, "indel_site_mismatches": 0},
}


def _wrap(seq: str, width: int) -> List[str]:
    return [seq[i : i + width] for i in range(0, len(seq), width)]


def toy_sequences() -> Dict[str, str]:
    return {name: _FLANK + block for name, block in _BLOCK.items()}


def _write_alignment(path: Path, records: List[Tuple[str, str]], width: int) -> None:
    lines: List[str] = []
    for header, seq in records:
        lines.append(f">{header}")
        lines.extend(_wrap(seq, width))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def make_toy_alignment(
    *,
    outdir: str | Path,
    true_prefix: str = "truth",
    wrap_width: int = 50,
) -> Dict[str, object]:
    """Create a small wrapped FASTA alignment with known accuracy counters.

    True and test records are interleaved in the file to exercise header-based
    assignment. The outputs include:
    - toy_alignment.fa
    - toy_expected.json (expected counters)

    Returns
    -------
    dict
        ``alignment``/``expected_json`` paths, ``true_prefix``, ``length`` and ``expected``.
    """
    outdir_p = ensure_outdir(outdir)
    seqs = toy_sequences()

    records = [
        (f"{true_prefix}_hap1 source=simulation", seqs["true1"]),
        ("assembly_hap1", seqs["test1"]),
        (f"{true_prefix}_hap2 source=simulation", seqs["true2"]),
        ("assembly_hap2", seqs["test2"]),
    ]
    fa = outdir_p / "toy_alignment.fa"
    _write_alignment(fa, records, wrap_width)

    expected_json = outdir_p / "toy_expected.json"
    write_json(expected_json, EXPECTED_COUNTS)

    return {
        "alignment": str(fa),
        "expected_json": str(expected_json),
        "true_prefix": true_prefix,
        "length": len(seqs["true1"]),
        "expected": EXPECTED_COUNTS,
    }
