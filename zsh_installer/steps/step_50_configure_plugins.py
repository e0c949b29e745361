from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.rcfile import MISSING, UPDATED, ensure_plugins_enabled
from ..pipeline import StepResult
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class ConfigurePluginsStep:
    step_id = "50_configure_plugins"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        names = cfg.plugin_names

        logger.info("Configuring zsh plugins in %s...", cfg.zshrc)
        status = ensure_plugins_enabled(cfg.zshrc, names, backup=cfg.backup_rc, dry_run=cfg.dry_run)
        record_decision(state, "plugins_line", status)

        if status == MISSING:
            return StepResult(
                self.step_id,
                False,
                f"Add {' '.join(names)} to plugins=(...) in {cfg.zshrc} by hand",
            )
        return StepResult(self.step_id, status == UPDATED)
