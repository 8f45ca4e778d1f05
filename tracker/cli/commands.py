# tracker/cli/commands.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace

from tracker.app.config import DecoderConfig, build_decoder, load_config
from tracker.protocol import load_catalogs


# ---------------- Logging ----------------

def configure_logging(verbose: bool) -> None:
    """
    Attach a stderr handler to the root logger, replacing an earlier CLI one.
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.WARNING

    for h in list(root.handlers):
        if getattr(h, "_tracker_cli", False):
            root.removeHandler(h)

    sh = logging.StreamHandler(sys.stderr)
    sh._tracker_cli = True  # type: ignore[attr-defined]
    sh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(sh)
    root.setLevel(level)


# ---------------- Config resolution ----------------

def resolve_config(args: argparse.Namespace) -> DecoderConfig:
    cfg = load_config(args.config) if args.config else DecoderConfig()
    if args.catalogs:
        cfg = replace(cfg, catalog_dir=args.catalogs)
    if getattr(args, "zero_fill", False):
        cfg = replace(cfg, strict=False)
    return cfg


# ---------------- Commands ----------------

def cmd_decode(args: argparse.Namespace) -> int:
    decoder = build_decoder(resolve_config(args))
    record = decoder.decode_hex(args.payload, args.port)
    print(json.dumps(record, indent=None if args.compact else 2))
    return 0


def cmd_catalogs(args: argparse.Namespace) -> int:
    cfg = resolve_config(args)
    catalogs = load_catalogs(cfg.catalog_dir)
    for name, entries in catalogs.as_dict().items():
        print(f"{name}:")
        for code, text in enumerate(entries):
            print(f"  {code:>2}  {text}")
    return 0
