import subprocess
import sys


def test_cli_help() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "hapsnpeval", "--help"],
        check=False,
        capture_output=True,
        text=True,
    )
    assert cp.returncode == 1
    assert "HapSNPeval" in cp.stdout
    assert "--true-prefix" in cp.stdout


def test_cli_version() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "hapsnpeval", "--version"],
        check=True,
        capture_output=True,
        text=True,
    )
    assert cp.stdout.startswith("hapsnpeval ")
