from __future__ import annotations

from zsh_installer.main import main as core_main


def main(argv: list[str] | None = None) -> int:
    # The console script delegates to the core entrypoint so both agree on flags.
    return core_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
