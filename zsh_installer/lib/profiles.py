from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .detect import SUPPORTED_PLATFORMS


def _profiles_dir() -> Path:
    # zsh_installer/lib/profiles.py -> zsh_installer/profiles
    return Path(__file__).resolve().parents[1] / "profiles"


@dataclass(frozen=True)
class Profile:
    """Per-platform facts: which package manager, where binaries live."""

    raw: Dict[str, Any]

    @property
    def profile_id(self) -> str:
        return str(self.raw.get("id") or "")

    @property
    def _pm(self) -> Dict[str, Any]:
        return self.raw.get("package_manager") or {}

    @property
    def package_manager(self) -> str:
        return str(self._pm.get("name") or "")

    @property
    def package_manager_binary(self) -> str:
        return str(self._pm.get("binary") or self.package_manager)

    @property
    def package_manager_candidates(self) -> List[str]:
        return [str(c) for c in (self._pm.get("candidates") or [])]

    def candidates_for(self, binary: str) -> List[str]:
        """Where the package manager puts `binary` before PATH knows about it."""
        return [str(Path(c).parent / binary) for c in self.package_manager_candidates]

    @property
    def bootstrap(self) -> Optional[Dict[str, Any]]:
        return self._pm.get("bootstrap") or None

    @property
    def login_profile(self) -> Optional[str]:
        v = self._pm.get("login_profile")
        return str(v) if v else None

    def shellenv_line(self, binary_path: str) -> Optional[str]:
        tmpl = self._pm.get("shellenv")
        return str(tmpl).format(binary=binary_path) if tmpl else None

    @property
    def packages(self) -> Dict[str, str]:
        """Map of required binary -> package providing it."""
        return {str(k): str(v) for k, v in (self.raw.get("packages") or {}).items()}


def load_profile(platform: str) -> Profile:
    if platform not in SUPPORTED_PLATFORMS:
        raise RuntimeError(f"No profile for platform {platform!r}")
    p = _profiles_dir() / f"{platform}.yaml"
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a mapping/dict: {p}")
    return Profile(raw=data)
