"""Reading the exporter settings used by ``dockerstats serve``.

Settings come from an optional YAML/JSON file given with ``--config``; any
command-line flag that was actually passed wins over the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from dockerstats.core.schemas import ExporterConfig

SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")


def load_config(path: Path | str) -> ExporterConfig:
    """Build an ExporterConfig from a settings file.

    An empty file yields the defaults. Keys that are left out keep their
    default values, and the polling interval is clamped the same way as the
    ``--interval`` flag.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the suffix is not .yaml, .yml or .json
        pydantic.ValidationError: If a setting has the wrong type or range
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Exporter config not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported config format: {suffix}. Use {', '.join(SUPPORTED_SUFFIXES)}"
        )

    with open(path, encoding="utf-8") as f:
        data = json.load(f) if suffix == ".json" else yaml.safe_load(f)

    return ExporterConfig.model_validate(data or {})


def merge_overrides(config: ExporterConfig, overrides: dict[str, Any]) -> ExporterConfig:
    """Apply CLI flags on top of file settings; flags left as None are ignored."""
    data = config.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return ExporterConfig.model_validate(data)
