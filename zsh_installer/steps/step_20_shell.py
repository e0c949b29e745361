from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.detect import find_binary
from ..lib.pkg import install_packages
from ..lib.profiles import load_profile
from ..pipeline import StepResult
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class EnsureShellStep:
    """zsh plus the git and curl the later steps download with."""

    step_id = "20_shell"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        profile = load_profile(cfg.platform)

        missing = [
            package
            for binary, package in profile.packages.items()
            if find_binary(binary, profile.candidates_for(binary)) is None
        ]
        if not missing:
            zsh = find_binary("zsh", profile.candidates_for("zsh"))
            record_decision(state, "zsh_path", zsh)
            return StepResult(self.step_id, False, f"zsh is already installed at {zsh}. Skipping installation.")

        logger.info("Installing %s...", " ".join(missing))
        manager_path = find_binary(profile.package_manager_binary, profile.package_manager_candidates)
        install_packages(
            profile.package_manager,
            missing,
            manager_path=manager_path,
            dry_run=cfg.dry_run,
        )

        zsh = find_binary("zsh", profile.candidates_for("zsh"))
        if zsh is None and not cfg.dry_run:
            raise RuntimeError(f"Installed {' '.join(missing)} but zsh is still not on PATH")

        record_decision(state, "zsh_path", zsh)
        return StepResult(self.step_id, True, f"Installed {' '.join(missing)}")
