from __future__ import annotations

import logging
import shlex
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.command import run_cmd
from ..lib.detect import find_binary
from ..lib.profiles import load_profile
from ..pipeline import StepResult

logger = logging.getLogger(__name__)


class ReloadConfigStep:
    """Source the rc file once in a zsh subprocess so a broken edit fails the run."""

    step_id = "70_reload_config"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        zshrc = cfg.zshrc

        if not cfg.reload_config:
            return StepResult(self.step_id, False, "Reload disabled by config")
        if not zshrc.exists():
            return StepResult(self.step_id, False, f"{zshrc} does not exist; nothing to apply")

        profile = load_profile(cfg.platform)
        zsh = find_binary("zsh", profile.candidates_for("zsh"))
        if zsh is None:
            if cfg.dry_run:
                return StepResult(self.step_id, False, "zsh not installed yet (dry run)")
            raise RuntimeError("zsh not found; cannot apply changes")

        logger.info("Applying changes...")
        run_cmd(
            [zsh, "-c", f"source {shlex.quote(str(zshrc))}"],
            env={"HOME": str(cfg.home)},
            dry_run=cfg.dry_run,
        )
        return StepResult(self.step_id, False, f"Sourced {zshrc}")
