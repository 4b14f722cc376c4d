from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from hostsetup.config.config import ProvisionConfig, default_config, load_config
from hostsetup.config.defaults import DEFAULTS
from hostsetup.config.file_storage import load_config_settings
from hostsetup.config.paths import config_dir, config_file_path, log_dir
from hostsetup.core.errors import ConfigError


class TestLoadConfigSettings:
    def test_missing_file_returns_defaults(self, tmp_path):
        result = load_config_settings(
            config_file=tmp_path / "missing.json",
            defaults={"branch": "rt"},
            logger=logging.getLogger(),
        )

        assert result == {"branch": "rt"}

    def test_loaded_values_win_over_defaults(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"branch": "dev"}), encoding="utf-8")

        result = load_config_settings(
            config_file=config_file,
            defaults={"branch": "rt", "reboot": True},
            logger=logging.getLogger(),
        )

        assert result == {"branch": "dev", "reboot": True}

    def test_unknown_keys_are_dropped_with_warning(self, tmp_path, caplog):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"brnach": "dev"}), encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            result = load_config_settings(
                config_file=config_file,
                defaults={"branch": "rt"},
                logger=logging.getLogger(),
            )

        assert result == {"branch": "rt"}
        assert "brnach" in caplog.text

    def test_malformed_json_raises(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config_settings(config_file=config_file, defaults={}, logger=logging.getLogger())

    def test_non_object_raises(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[]", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config_settings(config_file=config_file, defaults={}, logger=logging.getLogger())


def test_defaults_match_historical_script():
    config = default_config()

    assert config.upstream_url == "http://archive.ubuntu.com"
    assert config.mirror_url == "http://mirrors.tuna.tsinghua.edu.cn"
    assert config.packages == ("build-essential", "python3-mako")
    assert config.firmware_dir == "/lib/firmware"
    assert config.firmware_link_target == "~/rvm-intel.bin"
    assert config.repo_url == "https://github.com/rvm-rtos/jailhouse.git"
    assert config.branch == "rt"
    assert config.on_existing_source == "skip"
    assert config.skip_confirmation is False
    assert config.confirm_timeout_s is None
    assert config.reboot is True


def test_load_config_reads_explicit_file(tmp_path):
    config_file = tmp_path / "setup.json"
    config_file.write_text(json.dumps({"mirror_url": "http://mirrors.aliyun.com", "build_jobs": 8}), encoding="utf-8")

    config = load_config(config_file)

    assert config.mirror_url == "http://mirrors.aliyun.com"
    assert config.build_jobs == 8


def test_load_config_missing_explicit_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.json")


def test_overrides_win_and_none_is_ignored():
    config = default_config().with_overrides(branch="dev", mirror_url=None, skip_confirmation=True)

    assert config.branch == "dev"
    assert config.mirror_url == DEFAULTS["mirror_url"]
    assert config.skip_confirmation is True


def test_unknown_override_raises():
    with pytest.raises(ConfigError):
        default_config().with_overrides(colour="red")


@pytest.mark.parametrize(
    "settings",
    [
        {"on_existing_source": "overwrite"},
        {"confirm_timeout_s": -1},
        {"build_jobs": 0},
        {"packages": []},
        {"build_jobs": "many"},
    ],
)
def test_invalid_values_raise(settings):
    with pytest.raises(ConfigError):
        ProvisionConfig.from_settings(settings)


def test_string_package_list_is_split():
    config = ProvisionConfig.from_settings({"packages": "build-essential python3-mako git"})

    assert config.packages == ("build-essential", "python3-mako", "git")


def test_paths_respect_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("RVM_SETUP_CONFIG_DIR", str(tmp_path / "cfg"))
    monkeypatch.delenv("RVM_SETUP_CONFIG_PATH", raising=False)
    monkeypatch.setenv("RVM_SETUP_LOG_DIR", str(tmp_path / "logs"))

    assert config_dir() == tmp_path / "cfg"
    assert config_file_path() == tmp_path / "cfg" / "config.json"
    assert log_dir() == tmp_path / "logs"


def test_paths_fall_back_to_xdg(monkeypatch, tmp_path):
    monkeypatch.delenv("RVM_SETUP_CONFIG_DIR", raising=False)
    monkeypatch.delenv("RVM_SETUP_LOG_DIR", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))

    assert config_dir() == tmp_path / "xdg-config" / "rvm-host-setup"
    assert log_dir() == tmp_path / "xdg-state" / "rvm-host-setup" / "logs"


def test_log_dir_setting_overrides_default(tmp_path):
    config = ProvisionConfig.from_settings({"log_dir": str(tmp_path / "here")})

    assert config.resolved_log_dir == Path(tmp_path / "here")


@pytest.mark.parametrize(
    "raw, expected",
    [(True, True), (False, False), ("false", False), ("No", False), ("0", False), ("yes", True), ("1", True)],
)
def test_boolean_settings_are_parsed(raw, expected):
    config = ProvisionConfig.from_settings({"skip_confirmation": raw, "reboot": raw})

    assert config.skip_confirmation is expected
    assert config.reboot is expected


@pytest.mark.parametrize("raw", ["nope", "", 1, None, [True]])
def test_invalid_boolean_raises(raw):
    with pytest.raises(ConfigError):
        ProvisionConfig.from_settings({"skip_confirmation": raw})
