import gzip
import json
import subprocess
import sys
from pathlib import Path

from hapsnpeval.cli import main
from hapsnpeval.toy_data import make_toy_alignment


def _run_cli(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "hapsnpeval"] + args,
        check=False,
        capture_output=True,
        text=True,
    )


EXPECTED_SUMMARY = [
    "Haplotype switches for test haplotype 1: 1",
    "Haplotype switches for test haplotype 2: 1",
    "False SNPs in haplotype 1: 1",
    "False SNPs in haplotype 2: 1",
    "False indels in haplotype 1: 0",
    "False indels in haplotype 2: 1",
    "Bad base calls in haplotype 1: 1",
    "Bad base calls in haplotype 2: 0",
]


def test_summary_on_toy_alignment(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path)
    cp = _run_cli(["-p", toy["true_prefix"], toy["alignment"]])
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout.splitlines() == EXPECTED_SUMMARY


def test_position_output_precedes_summary(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path)
    cp = _run_cli(["-p", toy["true_prefix"], "-o", toy["alignment"]])
    assert cp.returncode == 0, cp.stderr
    lines = cp.stdout.splitlines()
    assert lines[-8:] == EXPECTED_SUMMARY
    # 60 homozygous flank columns precede the ten-column block
    assert lines[:-8] == [
        "True indel at position 64",
        "Test haplotype 1 switches at position 65",
        "Test haplotype 2 switches at position 65",
        "False indel at position 66",
        "False SNP at position 67",
        "Test haplotype 1 doesn't match either true haplotype at position 68",
        "True indel at position 70",
        "False SNP due to test haplotype 1 at position 70",
    ]


def test_outdir_artifacts(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path / "toy")
    outdir = tmp_path / "out"
    cp = _run_cli(["-p", toy["true_prefix"], "--outdir", str(outdir), toy["alignment"]])
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout.splitlines() == EXPECTED_SUMMARY

    assert (outdir / "report.html").exists()
    assert (outdir / "plots" / "event_positions.png").exists()

    summary = json.loads((outdir / "summary.json").read_text(encoding="utf-8"))
    assert summary["columns"]["total"] == toy["length"]
    assert summary["test1"]["indel_site_mismatches"] == 1
    assert summary["test2"]["false_indels"] == 1
    assert summary["headers"]["test1"] == "assembly_hap1"

    with gzip.open(outdir / "events.tsv.gz", "rt") as fh:
        rows = fh.read().splitlines()
    assert rows[0] == "position\tkind\thaplotype"
    assert "70\tindel_site_mismatch\t1" in rows


def test_help_exit_code() -> None:
    cp = _run_cli(["-h"])
    assert cp.returncode == 1
    assert "usage:" in cp.stdout


def test_missing_prefix(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path)
    cp = _run_cli([toy["alignment"]])
    assert cp.returncode == 3
    assert "prefix" in cp.stderr
    assert cp.stdout == ""


def test_invalid_option() -> None:
    cp = _run_cli(["-p", "truth", "--bogus", "x.fa"])
    assert cp.returncode == 4
    assert "usage:" in cp.stderr


def test_unreadable_input(tmp_path: Path) -> None:
    cp = _run_cli(["-p", "truth", str(tmp_path / "missing.fa")])
    assert cp.returncode == 5
    assert "Unable to open input alignment file" in cp.stderr
    assert cp.stdout == ""


def test_missing_input_path() -> None:
    cp = _run_cli(["-p", "truth"])
    assert cp.returncode == 6
    assert "missing input alignment file path" in cp.stderr


def test_insufficient_records_exit_code(tmp_path: Path) -> None:
    fa = tmp_path / "aln.fa"
    fa.write_text(">truth1\nAC\n>truth2\nAC\n>asm1\nAC\n", encoding="utf-8")
    cp = _run_cli(["-p", "truth", str(fa)])
    assert cp.returncode == 8
    assert "InsufficientRecordsError" in cp.stderr
    assert cp.stdout == ""


def test_misaligned_exit_code(tmp_path: Path) -> None:
    fa = tmp_path / "aln.fa"
    fa.write_text(">truth1\nAC\n>truth2\nAC\n>asm1\nAC\n>asm2\nACG\n", encoding="utf-8")
    assert main(["-p", "truth", str(fa)]) == 9


def test_main_in_process(tmp_path: Path, capsys) -> None:
    toy = make_toy_alignment(outdir=tmp_path)
    assert main(["--true-prefix", toy["true_prefix"], "--position-output", toy["alignment"]]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[-8:] == EXPECTED_SUMMARY


def test_truncated_gzip_is_a_read_error(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path)
    text = Path(toy["alignment"]).read_text(encoding="utf-8")
    fa_gz = tmp_path / "aln.fa.gz"
    with gzip.open(fa_gz, "wt") as fh:
        fh.write(text * 20)
    data = fa_gz.read_bytes()
    fa_gz.write_bytes(data[: len(data) // 2])

    cp = _run_cli(["-p", toy["true_prefix"], "-o", str(fa_gz)])
    assert cp.returncode == 7
    assert "AlignmentReadError" in cp.stderr
    assert cp.stdout == ""


def test_outdir_write_failure_prints_nothing(tmp_path: Path) -> None:
    toy = make_toy_alignment(outdir=tmp_path / "toy")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory\n", encoding="utf-8")

    cp = _run_cli(
        ["-p", toy["true_prefix"], "-o", "--outdir", str(blocker / "sub"), toy["alignment"]]
    )
    assert cp.returncode == 10
    assert "OutputWriteError" in cp.stderr
    assert cp.stdout == ""
