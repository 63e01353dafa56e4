"""Configuration loading utilities."""

import json
from pathlib import Path

from relroot.config import NormalizeConfig


def load_config(path: Path) -> NormalizeConfig:
    """Load a NormalizeConfig from a JSON file.

    Args:
        path: JSON file whose keys are NormalizeConfig field names

    Returns:
        NormalizeConfig
    """
    with path.open() as f:
        data = json.load(f)
    # Coerce path-like fields back to Path objects
    if "data_raw" in data:
        data["data_raw"] = Path(data["data_raw"])
    if "data_processed" in data:
        data["data_processed"] = Path(data["data_processed"])
    return NormalizeConfig(**data)
