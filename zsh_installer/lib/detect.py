from __future__ import annotations

import logging
import os
import pwd
import shutil
import sys
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("darwin", "linux")


class UnsupportedPlatform(RuntimeError):
    pass


def detect_platform() -> str:
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    raise UnsupportedPlatform(f"Unsupported platform: {sys.platform}")


def find_binary(name: str, extra_paths: Iterable[str] = ()) -> Optional[str]:
    """Locate an executable on PATH, then in the given candidate locations.

    Candidates cover installs that are not on PATH yet, e.g. a Homebrew that
    was installed earlier in the same run.
    """

    found = shutil.which(name)
    if found:
        return found
    for cand in extra_paths:
        p = Path(cand).expanduser()
        if p.is_file() and os.access(p, os.X_OK):
            logger.debug("Found %s outside PATH at %s", name, p)
            return str(p)
    return None


def current_login_shell() -> Optional[str]:
    try:
        return pwd.getpwuid(os.getuid()).pw_shell or None
    except KeyError:
        return os.environ.get("SHELL")
