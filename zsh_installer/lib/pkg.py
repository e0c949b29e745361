from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .command import run_cmd, sudo_argv

logger = logging.getLogger(__name__)


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(sudo_argv(["apt-get", "update"]), capture=False, dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd(sudo_argv(["apt-get", "install", "-y", *packages]), capture=False, dry_run=dry_run)


def brew_install(brew: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd([brew, "install", *packages], capture=False, dry_run=dry_run)


def install_packages(
    manager: str,
    packages: Sequence[str],
    *,
    manager_path: str | None = None,
    dry_run: bool = False,
) -> None:
    if manager == "apt":
        apt_update(dry_run=dry_run)
        apt_install(packages, dry_run=dry_run)
    elif manager == "brew":
        brew_install(manager_path or "brew", packages, dry_run=dry_run)
    else:
        raise RuntimeError(f"Unsupported package manager: {manager}")


def run_remote_installer(
    url: str,
    *,
    shell: Sequence[str] = ("/bin/bash",),
    args: Sequence[str] = (),
    env: Mapping[str, str] | None = None,
    dry_run: bool = False,
) -> None:
    """Download an installer script and run it as `<shell> -c <script> [args]`."""

    script = run_cmd(["curl", "-fsSL", url], dry_run=dry_run).stdout
    if not dry_run and not script.strip():
        raise RuntimeError(f"Installer download returned an empty script: {url}")
    run_cmd([*shell, "-c", script, *args], env=env, capture=False, dry_run=dry_run)
