from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def run_llmctx(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC_DIR), os.environ.get("PYTHONPATH")]))}
    return subprocess.run(
        [sys.executable, "-m", "llmctx", *args],
        cwd=str(cwd),
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )


@pytest.mark.end2end
def test_end_to_end_prints_tree(tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (tmp_path / ".env").write_text("SECRET=1\n", encoding="utf-8")

    proc = run_llmctx(tmp_path, "src")

    assert proc.returncode == 0
    assert proc.stdout == "\n\nsrc/app.py:\n```\nprint('hi')\n```\n"


@pytest.mark.end2end
def test_end_to_end_reports_errors_on_stderr(tmp_path: Path) -> None:
    proc = run_llmctx(tmp_path, "missing-dir")

    assert proc.returncode == 1
    assert proc.stdout == ""
    assert "cannot read directory missing-dir" in proc.stderr


@pytest.mark.end2end
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_end_to_end_defaults_to_git_root(tmp_path: Path) -> None:
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)  # noqa: S607
    (tmp_path / ".gitignore").write_text("*.tmp\n", encoding="utf-8")
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "mod.py").write_text("X = 1\n", encoding="utf-8")
    (tmp_path / "pkg" / "scratch.tmp").write_text("junk\n", encoding="utf-8")

    proc = run_llmctx(tmp_path / "pkg")

    assert proc.returncode == 0
    assert "mod.py:\n```\nX = 1\n```" in proc.stdout
    assert "junk" not in proc.stdout
