"""Provisioning configuration.

Values come from DEFAULTS, then the JSON config file, then command-line flags.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from .defaults import DEFAULTS
from .file_storage import load_config_settings
from .paths import config_file_path, log_dir as default_log_dir
from ..core.errors import ConfigError

logger = logging.getLogger(__name__)

EXISTING_SOURCE_POLICIES = ("skip", "fail")

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0"}


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


@dataclass(frozen=True)
class ProvisionConfig:
    mirror_url: str
    upstream_url: str
    sources_files: tuple[str, ...]
    packages: tuple[str, ...]
    firmware_dir: str
    firmware_link_target: str
    repo_url: str
    branch: str
    source_dir: str
    on_existing_source: str
    build_jobs: int | None
    cmdline_script: str
    skip_confirmation: bool
    confirm_timeout_s: float | None
    reboot: bool
    log_dir: str | None

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "ProvisionConfig":
        merged = {**DEFAULTS, **settings}
        for key in ("sources_files", "packages"):
            if isinstance(merged[key], str):
                merged[key] = merged[key].split()
        try:
            config = cls(
                mirror_url=str(merged["mirror_url"]),
                upstream_url=str(merged["upstream_url"]),
                sources_files=tuple(str(p) for p in merged["sources_files"]),
                packages=tuple(str(p) for p in merged["packages"]),
                firmware_dir=str(merged["firmware_dir"]),
                firmware_link_target=str(merged["firmware_link_target"]),
                repo_url=str(merged["repo_url"]),
                branch=str(merged["branch"]),
                source_dir=str(merged["source_dir"]),
                on_existing_source=str(merged["on_existing_source"]).lower(),
                build_jobs=None if merged["build_jobs"] is None else int(merged["build_jobs"]),
                cmdline_script=str(merged["cmdline_script"]),
                skip_confirmation=_parse_bool("skip_confirmation", merged["skip_confirmation"]),
                confirm_timeout_s=None if merged["confirm_timeout_s"] is None else float(merged["confirm_timeout_s"]),
                reboot=_parse_bool("reboot", merged["reboot"]),
                log_dir=None if merged["log_dir"] is None else str(merged["log_dir"]),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        config.validate()
        return config

    def validate(self) -> None:
        if self.on_existing_source not in EXISTING_SOURCE_POLICIES:
            raise ConfigError(
                f"on_existing_source must be one of {', '.join(EXISTING_SOURCE_POLICIES)}, "
                f"got {self.on_existing_source!r}"
            )
        if self.confirm_timeout_s is not None and self.confirm_timeout_s < 0:
            raise ConfigError("confirm_timeout_s must not be negative")
        if self.build_jobs is not None and self.build_jobs < 1:
            raise ConfigError("build_jobs must be at least 1")
        if not self.packages:
            raise ConfigError("packages must not be empty")
        if not self.mirror_url or not self.upstream_url:
            raise ConfigError("mirror_url and upstream_url must not be empty")

    def with_overrides(self, **overrides: Any) -> "ProvisionConfig":
        """Return a copy with non-None *overrides* applied (command-line flags)."""

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

        applied = {k: v for k, v in overrides.items() if v is not None}
        if not applied:
            return self

        settings = {f.name: getattr(self, f.name) for f in fields(self)}
        settings.update(applied)
        return ProvisionConfig.from_settings(settings)

    @property
    def resolved_log_dir(self) -> Path:
        if self.log_dir:
            return Path(os.path.expanduser(self.log_dir))
        return default_log_dir()

    @property
    def resolved_source_dir(self) -> str:
        return os.path.abspath(os.path.expanduser(self.source_dir))

    @property
    def resolved_link_target(self) -> str:
        return os.path.abspath(os.path.expanduser(self.firmware_link_target))


def load_config(path: Path | None = None) -> ProvisionConfig:
    config_file = path if path is not None else config_file_path()
    if path is not None and not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    settings = load_config_settings(config_file=config_file, defaults=DEFAULTS, logger=logger)
    logger.debug("Loaded configuration from %s", config_file)
    return ProvisionConfig.from_settings(settings)


def default_config() -> ProvisionConfig:
    return ProvisionConfig.from_settings(dict(DEFAULTS))
