#!/usr/bin/env python3
"""Tests for provider default settings."""

import pytest
import yaml
from pydantic import ValidationError

from cpi_virtualbox.settings import ProviderSettings


class TestProviderSettings:
    def test_default_values(self):
        settings = ProviderSettings()
        assert settings.os_type == "Ubuntu_64"
        assert settings.memory_mb == 2048
        assert settings.cpu_count == 2
        assert settings.controller_name == "SATA Controller"
        assert settings.network_type == "nat"
        assert settings.username == "vboxuser"
        assert settings.password == "password"
        assert settings.vboxmanage_path is None

    def test_frozen(self):
        settings = ProviderSettings()
        with pytest.raises(ValidationError):
            settings.memory_mb = 1

    @pytest.mark.parametrize("field,value", [
        ("memory_mb", 0),
        ("cpu_count", -1),
        ("os_type", ""),
        ("controller_name", "   "),
        ("network_type", ""),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValueError):
            ProviderSettings(**{field: value})

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            ProviderSettings(ram=1)

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "virtualbox.yaml"
        path.write_text(yaml.dump({"os_type": "Debian_64", "memory_mb": 4096}))

        settings = ProviderSettings.load(path)

        assert settings.os_type == "Debian_64"
        assert settings.memory_mb == 4096
        assert settings.cpu_count == 2

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ProviderSettings.load(path) == ProviderSettings()

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            ProviderSettings.load(tmp_path / "nope.yaml")

    def test_from_env_defaults(self, monkeypatch):
        monkeypatch.delenv("CPI_VIRTUALBOX_CONFIG", raising=False)
        monkeypatch.delenv("CPI_VIRTUALBOX_VBOXMANAGE", raising=False)
        assert ProviderSettings.from_env() == ProviderSettings()

    def test_from_env_config_and_executable(self, monkeypatch, tmp_path):
        path = tmp_path / "virtualbox.yaml"
        path.write_text(yaml.dump({"network_type": "bridged"}))
        monkeypatch.setenv("CPI_VIRTUALBOX_CONFIG", str(path))
        monkeypatch.setenv("CPI_VIRTUALBOX_VBOXMANAGE", "C:\\VirtualBox\\VBoxManage.exe")

        settings = ProviderSettings.from_env()

        assert settings.network_type == "bridged"
        assert settings.vboxmanage_path == "C:\\VirtualBox\\VBoxManage.exe"
