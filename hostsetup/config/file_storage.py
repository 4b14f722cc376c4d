from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..core.errors import ConfigError


def load_config_settings(*, config_file: Path, defaults: dict[str, Any], logger) -> dict[str, Any]:
    """Load config JSON and merge it over *defaults*.

    Returns a copy of `defaults` when the file does not exist. Unknown keys are
    dropped with a warning. Raises ConfigError for unreadable or malformed files.
    """

    if not config_file.exists():
        return dict(defaults)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Malformed config file {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {config_file} must contain a JSON object")

    unknown = sorted(k for k in loaded if k not in defaults)
    for key in unknown:
        logger.warning("Ignoring unknown config key %r in %s", key, config_file)
        loaded.pop(key)

    return {**defaults, **loaded}
