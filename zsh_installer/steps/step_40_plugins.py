from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig, Plugin
from ..lib.git import git_clone
from ..pipeline import StepResult

logger = logging.getLogger(__name__)


class EnsurePluginStep:
    """Clone one plugin into the framework's custom plugins directory."""

    def __init__(self, plugin: Plugin) -> None:
        self.plugin = plugin
        self.step_id = f"40_plugin_{plugin.name}"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        dest = cfg.plugin_dir(self.plugin.name)

        if dest.is_dir():
            return StepResult(self.step_id, False, f"{self.plugin.name} already installed. Skipping.")

        logger.info("Installing %s...", self.plugin.name)
        git_clone(self.plugin.url, str(dest), dry_run=cfg.dry_run)
        return StepResult(self.step_id, True, f"Cloned {self.plugin.url} into {dest}")
