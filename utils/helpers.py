# utils/helpers.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

log = structlog.get_logger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def load_yaml_config(config_path: Path | str, config_name: str) -> Dict[str, Any]:
    """Loads a generic YAML configuration file.

    Raises ``FileNotFoundError`` for a missing file; parse errors are logged
    and re-raised. An empty file yields ``{}``.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(f"{config_name} configuration file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
            exc_info=True,
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    if not isinstance(config_data, dict):
        log.error(f"{config_name} config must be a mapping", path=str(config_path))
        raise ValueError(f"{config_name} configuration must be a mapping: {config_path}")
    log.info(f"{config_name} config loaded", path=str(config_path))
    return config_data
