# tracker/cli/main.py
from __future__ import annotations

from typing import Optional

from tracker.core.errors import TrackerError

from tracker.cli.args import parse_args
from tracker.cli.commands import (
    cmd_catalogs,
    cmd_decode,
    configure_logging,
)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        if args.cmd == "decode":
            return cmd_decode(args)
        if args.cmd == "catalogs":
            return cmd_catalogs(args)

        return 2
    except TrackerError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
