from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

import yaml

from .install_config import InstallConfig, load_install_config
from .lib.detect import UnsupportedPlatform
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, Step, run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    ConfigurePluginsStep,
    DefaultShellStep,
    EnsureFrameworkStep,
    EnsurePackageManagerStep,
    EnsurePluginStep,
    EnsureShellStep,
    ReloadConfigStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "~/.local/state/zsh-installer/state.json"

# The only value of the positional argument that changes the login shell.
AFFIRMATIVE = "yes"


def build_steps(cfg: InstallConfig) -> List[Step]:
    return [
        EnsurePackageManagerStep(),
        EnsureShellStep(),
        EnsureFrameworkStep(),
        *[EnsurePluginStep(p) for p in cfg.plugins],
        ConfigurePluginsStep(),
        DefaultShellStep(),
        ReloadConfigStep(),
    ]


def run(
    *,
    make_default_shell: bool = False,
    config_path: Optional[str] = None,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    platform: Optional[str] = None,
    dry_run: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Run the bootstrap pipeline and persist a record of the run.

    Effective config = defaults < config file < overrides < CLI flags. The
    previous run's record is replaced, never used as input.
    """

    actual_log_path = configure_logging(log_path=log_path)

    try:
        state = load_state(state_path)
    except (ValueError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable run record %s: %s", state_path, e)
        state = {}
    state["config"] = {}
    state["execution"] = {}
    ensure_defaults(state)

    cfg_raw = state["config"]
    if config_path:
        cfg_raw.update(load_install_config(config_path).raw)
    if overrides:
        cfg_raw.update(overrides)
    cfg_raw["make_default_shell"] = bool(make_default_shell)
    cfg_raw["dry_run"] = bool(dry_run)
    if platform:
        cfg_raw["platform"] = platform

    state["execution"]["paths"] = {"log_path_requested": log_path, "log_path_actual": actual_log_path}

    try:
        cfg = InstallConfig.from_state(state)
        cfg_raw["platform"] = cfg.platform
        logger.info("Make zsh default shell: %s", AFFIRMATIVE if cfg.make_default_shell else "no")
        if cfg.dry_run:
            logger.info("Dry run: commands are logged, nothing is changed")

        result = run_pipeline(
            state=state,
            steps=build_steps(cfg),
            start_at=start_at,
            stop_after=stop_after,
        )

        summary = state["execution"].setdefault("summary", {})
        summary["changed_steps"] = result.changed_steps
        summary["unchanged_steps"] = result.unchanged_steps

        if result.failure is not None:
            state["execution"]["errors"].append(
                {
                    "step": result.failure.step_id,
                    "error": result.failure.error,
                    "returncode": result.failure.returncode,
                }
            )
            logger.error(
                "Installation aborted at step %s (exit %s). Steps that finished stay installed; re-run to continue.",
                result.failure.step_id,
                result.failure.returncode,
            )
        else:
            logger.info(
                "Oh My Zsh installation completed with %s enabled!",
                " and ".join(cfg.plugin_names) or "no plugins",
            )
        return result
    except (ValueError, UnsupportedPlatform) as e:
        # Bad config, platform or step selection. Step errors come back as
        # result.failure, so no step has run when this is reached.
        state["execution"]["errors"].append({"step": None, "error": str(e)})
        raise
    except Exception as e:
        logger.exception("Installer failed")
        state["execution"]["errors"].append(
            {"step": state["execution"].get("current_step"), "error": str(e)}
        )
        raise
    finally:
        save_state(state_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="zsh-installer",
        description="Install zsh, Oh My Zsh and the autosuggestions/syntax-highlighting plugins",
    )
    p.add_argument(
        "make_default_shell",
        nargs="?",
        default="no",
        metavar="MAKE_DEFAULT_SHELL",
        help=f"'{AFFIRMATIVE}' to make zsh the login shell (default: no)",
    )
    p.add_argument("--config", default=None, help="YAML file overriding install settings")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to the run record (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the installer log")
    p.add_argument("--platform", choices=["auto", "darwin", "linux"], default=None)
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_framework)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")

    args = p.parse_args(argv)

    try:
        result = run(
            make_default_shell=args.make_default_shell == AFFIRMATIVE,
            config_path=args.config,
            state_path=args.state,
            log_path=args.log,
            platform=args.platform,
            dry_run=bool(args.dry_run),
            start_at=args.start_at,
            stop_after=args.stop_after,
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted; nothing was rolled back")
        return 130
    except (ValueError, FileNotFoundError, UnsupportedPlatform, yaml.YAMLError) as e:
        logger.error("%s", e)
        return 2

    if result.failure is not None:
        return result.failure.returncode
    return 0
