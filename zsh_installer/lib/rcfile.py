"""Line-oriented edits of shell startup files.

The rc file is never parsed as a whole. We locate a single line by pattern,
transform just that line and write every line back untouched otherwise.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)

# An uncommented single-line `plugins=(...)`, e.g. `plugins=(git docker)  # core`.
PLUGINS_LINE = re.compile(
    r"^(?P<indent>[ \t]*)plugins=\((?P<body>[^)\n#]*)\)(?P<tail>[ \t]*(?:#.*)?)$"
)

# Oh My Zsh template default.
DEFAULT_PLUGINS_LITERAL = "plugins=(git)"

BACKUP_SUFFIX = ".zsh-installer-backup"

PRESENT = "present"
UPDATED = "updated"
MISSING = "missing"


def _split_eol(line: str) -> Tuple[str, str]:
    content = line.rstrip("\r\n")
    return content, line[len(content):]


def _unique(names: Iterable[str]) -> List[str]:
    out: List[str] = []
    for n in names:
        if n and n not in out:
            out.append(n)
    return out


def is_plugins_line(line: str) -> bool:
    content, _ = _split_eol(line)
    return PLUGINS_LINE.match(content) is not None


def add_plugins_to_line(line: str, names: Sequence[str]) -> str:
    """Return `line` with any missing plugin names appended.

    Existing entries keep their order; the line ending is preserved.
    """

    content, eol = _split_eol(line)
    m = PLUGINS_LINE.match(content)
    if m is None:
        raise ValueError(f"Not a plugins line: {content!r}")

    existing = m.group("body").split()
    missing = [n for n in _unique(names) if n not in existing]
    if not missing:
        return line

    body = " ".join(existing + missing)
    return f"{m.group('indent')}plugins=({body}){m.group('tail')}{eol}"


def _fallback_default_literal(lines: List[str], names: Sequence[str]) -> List[str] | None:
    wanted = _unique(["git", *names])
    replacement = f"plugins=({' '.join(wanted)})"
    for i, line in enumerate(lines):
        if line.lstrip().startswith("#"):
            continue
        if DEFAULT_PLUGINS_LITERAL in line:
            out = list(lines)
            out[i] = line.replace(DEFAULT_PLUGINS_LITERAL, replacement, 1)
            return out
    return None


def patch_plugins(lines: Sequence[str], names: Sequence[str]) -> Tuple[List[str], str]:
    """Ensure the first plugins line lists `names`.

    Returns the (possibly new) lines and one of PRESENT, UPDATED, MISSING.
    """

    out = list(lines)
    for i, line in enumerate(out):
        if not is_plugins_line(line):
            continue
        new_line = add_plugins_to_line(line, names)
        if new_line == line:
            return out, PRESENT
        out[i] = new_line
        return out, UPDATED

    # Lines the pattern above does not recognise but which still carry the
    # stock single-entry form, e.g. `plugins=(git); export FOO=1`.
    for line in out:
        if line.lstrip().startswith("#") or "plugins=(" not in line:
            continue
        words = re.split(r"[\s()]+", line)
        if all(n in words for n in names):
            return out, PRESENT
    patched = _fallback_default_literal(out, names)
    if patched is not None:
        return patched, UPDATED
    return out, MISSING


def _read_lines(path: Path) -> List[str]:
    with path.open("r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.readlines()


def _write_lines(path: Path, lines: Sequence[str]) -> None:
    with path.open("w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.writelines(lines)


def _backup(path: Path) -> Path | None:
    """One-time backup of the rc file. Returns the backup path if one was made."""
    backup_path = path.parent / f"{path.name}{BACKUP_SUFFIX}"
    if not backup_path.exists() and path.exists():
        shutil.copy2(path, backup_path)
        return backup_path
    return None


def ensure_plugins_enabled(
    path: str | Path,
    names: Sequence[str],
    *,
    backup: bool = True,
    dry_run: bool = False,
) -> str:
    p = Path(path)
    if not p.exists():
        logger.warning("%s does not exist; plugins not configured", p)
        return MISSING

    lines, status = patch_plugins(_read_lines(p), names)

    if status == MISSING:
        logger.warning("No single-line plugins=(...) entry in %s; left unchanged", p)
        return status
    if status == PRESENT:
        logger.info("Plugins already configured in %s", p)
        return status

    if dry_run:
        logger.info("Would update plugins in %s", p)
        return status

    if backup:
        made = _backup(p)
        if made:
            logger.info("Backed up %s to %s", p, made)
    _write_lines(p, lines)
    logger.info("Updated plugins in %s", p)
    return status


def ensure_line(path: str | Path, line: str, *, dry_run: bool = False) -> bool:
    """Append `line` to a file unless an identical line is there. Returns True if modified."""

    p = Path(path)
    content = p.read_text(encoding="utf-8", errors="surrogateescape") if p.exists() else ""
    if any(existing.strip() == line.strip() for existing in content.splitlines()):
        return False

    if dry_run:
        logger.info("Would append to %s: %s", p, line)
        return True

    if content and not content.endswith("\n"):
        content += "\n"
    content += line.rstrip("\n") + "\n"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8", errors="surrogateescape")
    logger.info("Appended to %s: %s", p, line)
    return True
