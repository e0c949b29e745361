from __future__ import annotations

import logging
from typing import Any, Dict

from ..install_config import InstallConfig
from ..lib.detect import find_binary
from ..lib.pkg import run_remote_installer
from ..lib.profiles import load_profile
from ..lib.rcfile import ensure_line
from ..pipeline import StepResult
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class EnsurePackageManagerStep:
    step_id = "10_package_manager"

    def run(self, state: Dict[str, Any]) -> StepResult:
        cfg = InstallConfig.from_state(state)
        profile = load_profile(cfg.platform)
        name = profile.package_manager

        found = find_binary(profile.package_manager_binary, profile.package_manager_candidates)
        if found:
            record_decision(state, "package_manager", {"name": name, "path": found, "installed": False})
            return StepResult(self.step_id, False, f"{name} is already installed at {found}. Skipping installation.")

        boot = profile.bootstrap
        if not boot:
            raise RuntimeError(
                f"{name} ({profile.package_manager_binary}) not found and cannot be installed on {profile.profile_id}"
            )

        url = cfg.package_manager_install_url or str(boot["url"])
        logger.info("Installing %s...", name)
        run_remote_installer(
            url,
            shell=[str(s) for s in (boot.get("shell") or ["/bin/bash"])],
            env={str(k): str(v) for k, v in (boot.get("env") or {}).items()},
            dry_run=cfg.dry_run,
        )

        installed = find_binary(profile.package_manager_binary, profile.package_manager_candidates)
        if installed is None:
            if not cfg.dry_run:
                raise RuntimeError(f"{name} installer finished but {profile.package_manager_binary} was not found")
            candidates = profile.package_manager_candidates
            installed = candidates[0] if candidates else profile.package_manager_binary

        # Fresh installs are not on PATH until the login profile evaluates shellenv.
        line = profile.shellenv_line(installed)
        if line and profile.login_profile:
            ensure_line(cfg.expand(profile.login_profile), line, dry_run=cfg.dry_run)

        record_decision(state, "package_manager", {"name": name, "path": installed, "installed": True})
        return StepResult(self.step_id, True, f"Installed {name} at {installed}")
