"""Entry point for ``python -m tektontree``."""

import sys

from tektontree.cli import run_cli


def main() -> None:
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == "__main__":
    main()
