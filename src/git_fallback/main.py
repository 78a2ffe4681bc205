from __future__ import annotations
from git_fallback.interface.cli import cli

def main() -> None:
    """Run the CLI; logging is configured once the settings are loaded."""
    cli(prog_name="git-fallback")


if __name__ == "__main__":
    main()
