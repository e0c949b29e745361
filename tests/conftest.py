"""Shared fixtures: a fake PATH, a fake home and a recording command runner."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Dict, List

import pytest

from zsh_installer.lib import command
from zsh_installer.state_store import ensure_defaults

INSTALLER_SCRIPT = "#!/bin/sh\necho installing\n"


def _strip_sudo(argv: List[str]) -> List[str]:
    return argv[1:] if argv and argv[0] == "sudo" else argv


class FakeRunner:
    """Stands in for subprocess.run inside the command runner."""

    def __init__(self) -> None:
        self.calls: List[Dict] = []
        self.failures: Dict[str, int] = {}
        self.hooks: List[Callable[[List[str], Dict], None]] = []

    def fail_on(self, program: str, returncode: int = 1) -> None:
        self.failures[program] = returncode

    def on_call(self, hook: Callable[[List[str], Dict], None]) -> None:
        self.hooks.append(hook)

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append({"argv": argv, **kwargs})
        real = _strip_sudo(argv)
        program = os.path.basename(real[0])
        rc = self.failures.get(program, 0)
        stdout = ""
        if rc == 0:
            if program == "curl":
                stdout = INSTALLER_SCRIPT
            for hook in self.hooks:
                hook(real, kwargs)
        return subprocess.CompletedProcess(argv, rc, stdout=stdout, stderr="boom" if rc else "")

    @property
    def commands(self) -> List[List[str]]:
        """argv of every call, without a leading sudo."""
        return [_strip_sudo(c["argv"]) for c in self.calls]

    @property
    def programs(self) -> List[str]:
        return [os.path.basename(argv[0]) for argv in self.commands]


@pytest.fixture
def runner(monkeypatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(command, "subprocess", SimpleNamespace(run=fake, PIPE=subprocess.PIPE))
    return fake


@pytest.fixture
def bin_dir(tmp_path, monkeypatch) -> Path:
    d = tmp_path / "bin"
    d.mkdir()
    monkeypatch.setenv("PATH", str(d))
    return d


@pytest.fixture
def make_bin(bin_dir) -> Callable[..., Path]:
    def _make(*names: str) -> Path:
        for name in names:
            p = bin_dir / name
            p.write_text("#!/bin/sh\nexit 0\n")
            p.chmod(0o755)
        return bin_dir

    return _make


@pytest.fixture
def home(tmp_path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def overrides(home, tmp_path) -> Dict:
    shells = tmp_path / "shells"
    shells.write_text("/bin/sh\n/bin/bash\n")
    return {
        "home": str(home),
        "platform": "linux",
        "shells_file": str(shells),
    }


@pytest.fixture
def state(overrides) -> Dict:
    return ensure_defaults({"config": dict(overrides)})


@pytest.fixture
def installed(home, make_bin) -> Path:
    """Everything already present: tools, framework, both plugins, configured rc file."""
    make_bin("apt-get", "zsh", "git", "curl")
    plugins = home / ".oh-my-zsh" / "custom" / "plugins"
    (plugins / "zsh-autosuggestions").mkdir(parents=True)
    (plugins / "zsh-syntax-highlighting").mkdir(parents=True)
    zshrc = home / ".zshrc"
    zshrc.write_text(
        'export ZSH="$HOME/.oh-my-zsh"\n'
        "plugins=(git zsh-autosuggestions zsh-syntax-highlighting)\n"
        "source $ZSH/oh-my-zsh.sh\n"
    )
    return home


@pytest.fixture(autouse=True)
def reset_root_logger():
    root = logging.getLogger()
    yield
    for h in getattr(root, "_zsh_installer_handlers", []):
        root.removeHandler(h)
        h.close()
    for attr in ("_zsh_installer_configured", "_zsh_installer_log_path", "_zsh_installer_handlers"):
        if hasattr(root, attr):
            delattr(root, attr)
