from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.pkg import run_remote_installer
from ..pipeline import StepResult

logger = logging.getLogger(__name__)


class EnsureFrameworkStep:
    step_id = "30_framework"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        target = cfg.framework_dir

        if target.is_dir():
            return StepResult(
                self.step_id, False, f"Oh My Zsh is already installed at {target}. Skipping installation."
            )

        logger.info("Installing Oh My Zsh...")
        # --unattended: no shell switch, no zsh exec at the end; step 60 owns chsh.
        run_remote_installer(
            cfg.framework_install_url,
            shell=["sh"],
            args=["", "--unattended"],
            env={
                "HOME": str(cfg.home),
                "ZSH": str(target),
                "RUNZSH": "no",
                "CHSH": "no",
            },
            dry_run=cfg.dry_run,
        )

        if not cfg.dry_run and not target.is_dir():
            raise RuntimeError(f"Oh My Zsh installer finished but {target} does not exist")

        return StepResult(self.step_id, True, f"Installed Oh My Zsh at {target}")
