from __future__ import annotations

from pathlib import Path

from .command import run_cmd


def git_clone(url: str, dest: str, *, dry_run: bool = False) -> None:
    if not dry_run:
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["git", "clone", url, dest], capture=False, dry_run=dry_run)
