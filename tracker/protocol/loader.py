# tracker/protocol/loader.py
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from tracker.core.errors import CatalogError


def default_catalog_dir() -> Path:
    # <repo>/tracker/metadata, based on this file's location
    return Path(__file__).resolve().parents[1] / "metadata"


@dataclass(frozen=True)
class Catalogs:
    """Immutable description tables indexed by the codes the tracker sends."""
    modes: Tuple[str, ...]
    gps_timeout_causes: Tuple[str, ...]
    wifi_failure_causes: Tuple[str, ...]
    ble_failure_causes: Tuple[str, ...]

    def as_dict(self) -> Dict[str, list]:
        return {
            "modes": list(self.modes),
            "gps_timeout_causes": list(self.gps_timeout_causes),
            "wifi_failure_causes": list(self.wifi_failure_causes),
            "ble_failure_causes": list(self.ble_failure_causes),
        }


class CatalogLoader:
    """Load the lookup catalogs from YAML and validate their shape."""

    FILENAME = "catalogs.yml"

    # catalog name -> number of entries the firmware defines
    EXPECTED_SIZES: Dict[str, int] = {
        "modes": 6,
        "gps_timeout_causes": 1,
        "wifi_failure_causes": 4,
        "ble_failure_causes": 6,
    }

    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else default_catalog_dir()
        self.doc: Dict[str, Any] = {}

    @property
    def path(self) -> Path:
        return self.config_dir / self.FILENAME

    def load_all(self) -> Catalogs:
        if not self.path.exists():
            raise CatalogError(
                f"Catalog file not found: {self.path}",
                hint="Point --catalogs (or catalog_dir) at a directory containing catalogs.yml.",
            )

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self.doc = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in {self.path}: {e}") from e

        catalogs = self.doc.get("catalogs") if isinstance(self.doc, dict) else None
        if not isinstance(catalogs, dict):
            raise CatalogError(f"{self.FILENAME} is missing 'catalogs' root node")

        tables: Dict[str, Tuple[str, ...]] = {}
        for name, size in self.EXPECTED_SIZES.items():
            entries = catalogs.get(name)
            if not isinstance(entries, list):
                raise CatalogError(f"Catalog '{name}' must be a list")
            if not all(isinstance(e, str) for e in entries):
                raise CatalogError(f"Catalog '{name}' entries must be strings")
            if len(entries) != size:
                raise CatalogError(
                    f"Catalog '{name}' must have {size} entries (got {len(entries)})",
                    details={"catalog": name, "expected": size, "actual": len(entries)},
                )
            tables[name] = tuple(entries)

        return Catalogs(**tables)


def load_catalogs(config_dir: str | Path | None = None) -> Catalogs:
    return CatalogLoader(config_dir).load_all()


@lru_cache(maxsize=1)
def default_catalogs() -> Catalogs:
    """Packaged catalogs, loaded once per process."""
    return CatalogLoader().load_all()
