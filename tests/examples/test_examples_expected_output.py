"""Run every example script and compare its stdout with the inline ``# =>`` comments."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
EXAMPLE_PATHS = sorted((REPO_ROOT / "examples").glob("ex_*/01_*.py"))


def _expected_output(path: Path) -> list[str]:
    return [
        line.split("# =>", maxsplit=1)[1].strip()
        for line in path.read_text(encoding="utf-8").splitlines()
        if "# =>" in line
    ]


@pytest.mark.parametrize(
    "path",
    EXAMPLE_PATHS,
    ids=[str(path.relative_to(REPO_ROOT)) for path in EXAMPLE_PATHS],
)
def test_example_prints_expected_lines(path: Path) -> None:
    env = {**os.environ, "PYTHONPATH": str(REPO_ROOT / "src")}

    completed = subprocess.run(  # noqa: S603
        [sys.executable, str(path)],
        cwd=path.parent,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )

    assert completed.returncode == 0, completed.stderr
    assert completed.stderr == ""
    assert completed.stdout.splitlines() == _expected_output(path)


def test_examples_are_discovered() -> None:
    assert len(EXAMPLE_PATHS) == 3
