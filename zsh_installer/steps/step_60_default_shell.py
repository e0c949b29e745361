from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.detect import current_login_shell, find_binary
from ..lib.profiles import load_profile
from ..lib.shells import change_login_shell, is_registered_shell, register_shell
from ..pipeline import StepResult
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class DefaultShellStep:
    step_id = "60_default_shell"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        record_decision(state, "make_default_shell", cfg.make_default_shell)

        if not cfg.make_default_shell:
            return StepResult(self.step_id, False, "Skipping setting zsh as the default shell.")

        profile = load_profile(cfg.platform)
        zsh = find_binary("zsh", profile.candidates_for("zsh"))
        if zsh is None:
            logger.error("zsh binary not found; cannot make it the default shell")
            return StepResult(self.step_id, False, "zsh not found, default shell unchanged")

        current = current_login_shell()
        if current and os.path.realpath(current) == os.path.realpath(zsh):
            return StepResult(self.step_id, False, f"{zsh} is already the login shell")

        logger.info("Setting zsh as the default shell...")
        if not is_registered_shell(zsh, cfg.shells_file):
            register_shell(zsh, cfg.shells_file, dry_run=cfg.dry_run)
        change_login_shell(zsh, dry_run=cfg.dry_run)

        record_decision(state, "login_shell", zsh)
        return StepResult(self.step_id, True, f"Login shell changed to {zsh}")
