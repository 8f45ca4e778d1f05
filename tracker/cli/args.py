# tracker/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tracker-decode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--catalogs",
        default=None,
        help="Directory holding catalogs.yml (default: packaged tables).",
    )
    common.add_argument("--config", default=None, help="YAML decoder config file.")

    p_decode = sub.add_parser("decode", parents=[common], help="Decode one hex payload.")
    p_decode.add_argument("payload", help="Uplink payload as hex (spaces/colons allowed).")
    p_decode.add_argument("--port", type=int, default=0, help="LoRaWAN port the uplink arrived on.")
    p_decode.add_argument(
        "--zero-fill",
        action="store_true",
        help="Read bytes past the payload end as zero instead of failing.",
    )
    p_decode.add_argument("--compact", action="store_true", help="Print JSON on a single line.")

    sub.add_parser("catalogs", parents=[common], help="Print the loaded lookup catalogs.")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
