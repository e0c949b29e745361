from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .lib.detect import SUPPORTED_PLATFORMS, detect_platform

OMZ_INSTALL_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

DEFAULT_PLUGINS: List[Dict[str, str]] = [
    {"name": "zsh-autosuggestions", "url": "https://github.com/zsh-users/zsh-autosuggestions"},
    {"name": "zsh-syntax-highlighting", "url": "https://github.com/zsh-users/zsh-syntax-highlighting.git"},
]

DEFAULT_CONFIG: Dict[str, Any] = {
    "home": None,
    "platform": "auto",
    "make_default_shell": False,
    "dry_run": False,
    "framework_dir": "~/.oh-my-zsh",
    "custom_dir": None,
    "framework_install_url": OMZ_INSTALL_URL,
    "package_manager_install_url": None,
    "plugins": DEFAULT_PLUGINS,
    "zshrc": "~/.zshrc",
    "backup_rc": True,
    "reload_config": True,
    "shells_file": "/etc/shells",
}


@dataclass(frozen=True)
class Plugin:
    name: str
    url: str


@dataclass(frozen=True)
class InstallConfig:
    raw: Dict[str, Any]

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "InstallConfig":
        return cls(raw=state.get("config") or {})

    def _get(self, key: str) -> Any:
        v = self.raw.get(key)
        return DEFAULT_CONFIG.get(key) if v is None else v

    @property
    def home(self) -> Path:
        v = self.raw.get("home")
        return Path(v).expanduser() if v else Path.home()

    def expand(self, value: str) -> Path:
        """Expand a leading ~ against the configured home, not the process one."""
        if value == "~":
            return self.home
        if value.startswith("~/"):
            return self.home / value[2:]
        return Path(value)

    @property
    def platform(self) -> str:
        v = str(self._get("platform")).lower()
        if v == "auto":
            return detect_platform()
        if v not in SUPPORTED_PLATFORMS:
            raise ValueError(f"config.platform must be auto|darwin|linux, got {v!r}")
        return v

    @property
    def make_default_shell(self) -> bool:
        return bool(self._get("make_default_shell"))

    @property
    def dry_run(self) -> bool:
        return bool(self._get("dry_run"))

    @property
    def framework_dir(self) -> Path:
        return self.expand(str(self._get("framework_dir")))

    @property
    def custom_dir(self) -> Path:
        v = self.raw.get("custom_dir")
        return self.expand(str(v)) if v else self.framework_dir / "custom"

    @property
    def framework_install_url(self) -> str:
        return str(self._get("framework_install_url"))

    @property
    def package_manager_install_url(self) -> Optional[str]:
        v = self.raw.get("package_manager_install_url")
        return str(v) if v else None

    @property
    def plugins(self) -> List[Plugin]:
        items = self._get("plugins")
        if not isinstance(items, list):
            raise ValueError("config.plugins must be a list of {name, url}")
        out: List[Plugin] = []
        for it in items:
            if not isinstance(it, dict) or not it.get("name") or not it.get("url"):
                raise ValueError(f"config.plugins entry needs name and url: {it!r}")
            out.append(Plugin(name=str(it["name"]), url=str(it["url"])))
        return out

    @property
    def plugin_names(self) -> List[str]:
        return [p.name for p in self.plugins]

    def plugin_dir(self, name: str) -> Path:
        return self.custom_dir / "plugins" / name

    @property
    def zshrc(self) -> Path:
        return self.expand(str(self._get("zshrc")))

    @property
    def backup_rc(self) -> bool:
        return bool(self._get("backup_rc"))

    @property
    def reload_config(self) -> bool:
        return bool(self._get("reload_config"))

    @property
    def shells_file(self) -> str:
        return str(self._get("shells_file"))


def load_install_config(path: str) -> InstallConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("install config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("install config must contain a mapping/object")

    unknown = sorted(set(raw) - set(DEFAULT_CONFIG))
    if unknown:
        raise ValueError(f"Unknown install config keys: {', '.join(unknown)}")

    return InstallConfig(raw=raw)
