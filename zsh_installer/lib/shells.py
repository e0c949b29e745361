from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd, sudo_argv

logger = logging.getLogger(__name__)

DEFAULT_SHELLS_FILE = "/etc/shells"


def is_registered_shell(shell_path: str, shells_file: str = DEFAULT_SHELLS_FILE) -> bool:
    p = Path(shells_file)
    if not p.exists():
        return False
    for line in p.read_text(encoding="utf-8").splitlines():
        if line.strip() == shell_path:
            return True
    return False


def register_shell(shell_path: str, shells_file: str = DEFAULT_SHELLS_FILE, *, dry_run: bool = False) -> None:
    """Append shell_path to the allowed login shells (needs root)."""

    # tee echoes its input; keep that out of the terminal.
    run_cmd(
        sudo_argv(["tee", "-a", shells_file]),
        input_text=shell_path + "\n",
        dry_run=dry_run,
    )
    logger.info("Registered %s in %s", shell_path, shells_file)


def change_login_shell(shell_path: str, *, dry_run: bool = False) -> None:
    run_cmd(["chsh", "-s", shell_path], capture=False, dry_run=dry_run)
