# tracker/app/config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tracker.core.errors import ConfigError
from tracker.protocol import TrackerDecoder, load_catalogs
from tracker.protocol.core.decoder import Clock


@dataclass(frozen=True)
class DecoderConfig:
    catalog_dir: Optional[str] = None  # None -> packaged tracker/metadata
    strict: bool = True                # False -> zero-fill reads past the payload end
    temperature_digits: int = 2


_KNOWN_KEYS = ("catalog_dir", "strict", "temperature_digits")


def config_from_mapping(data: Dict[str, Any]) -> DecoderConfig:
    if not isinstance(data, dict):
        raise ConfigError("Decoder config must be a mapping")

    unknown = sorted(set(data) - set(_KNOWN_KEYS))
    if unknown:
        raise ConfigError(f"Unknown decoder config keys: {', '.join(unknown)}")

    catalog_dir = data.get("catalog_dir")
    if catalog_dir is not None and not isinstance(catalog_dir, str):
        raise ConfigError("'catalog_dir' must be a string path")

    strict = data.get("strict", True)
    if not isinstance(strict, bool):
        raise ConfigError(f"'strict' must be true/false (got {strict!r})")

    digits = data.get("temperature_digits", 2)
    if isinstance(digits, bool) or not isinstance(digits, int) or digits < 0:
        raise ConfigError(f"'temperature_digits' must be a non-negative integer (got {digits!r})")

    return DecoderConfig(catalog_dir=catalog_dir, strict=strict, temperature_digits=digits)


def load_config(path: str | Path) -> DecoderConfig:
    """Read a YAML decoder config; an empty file yields the defaults."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    cfg = config_from_mapping(data)

    # Relative catalog dirs are resolved against the config file location
    if cfg.catalog_dir is not None and not Path(cfg.catalog_dir).is_absolute():
        cfg = DecoderConfig(
            catalog_dir=str(path.parent / cfg.catalog_dir),
            strict=cfg.strict,
            temperature_digits=cfg.temperature_digits,
        )
    return cfg


def build_decoder(cfg: DecoderConfig, *, clock: Optional[Clock] = None) -> TrackerDecoder:
    return TrackerDecoder(
        load_catalogs(cfg.catalog_dir),
        clock=clock,
        strict=cfg.strict,
        temperature_digits=cfg.temperature_digits,
    )
