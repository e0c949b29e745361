"""zsh-installer: bring a macOS or Linux account to a working zsh setup.

Core design goals:
- Idempotent steps: every step checks for its target before installing
- Fail fast: the first failing step stops the run and is named
- No rollback: a re-run picks up where a failed run stopped
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
