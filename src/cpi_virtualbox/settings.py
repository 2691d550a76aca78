"""
Provider-wide default settings.

Values here fill in optional action parameters that a caller leaves out. The
model is frozen: build it once and share the instance.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_ENV_VAR = "CPI_VIRTUALBOX_CONFIG"
VBOXMANAGE_ENV_VAR = "CPI_VIRTUALBOX_VBOXMANAGE"


class ProviderSettings(BaseModel):
    """Default values consulted when optional parameters are omitted."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    os_type: str = Field(default="Ubuntu_64", description="Guest OS type for new VMs")
    memory_mb: int = Field(default=2048, ge=1, description="Memory for new VMs in MB")
    cpu_count: int = Field(default=2, ge=1, description="vCPUs for new VMs")
    controller_name: str = Field(
        default="SATA Controller", description="Storage controller used for disks"
    )
    network_type: str = Field(default="nat", description="NIC attachment type")
    # Credential placeholders; no action reads them yet.
    username: str = Field(default="vboxuser", description="Guest username")
    password: str = Field(default="password", description="Guest password")
    vboxmanage_path: Optional[str] = Field(
        default=None, description="Explicit VBoxManage executable"
    )

    @field_validator("os_type", "controller_name", "network_type")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @classmethod
    def load(cls, path: Path) -> "ProviderSettings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        data = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(data)

    @classmethod
    def from_env(cls) -> "ProviderSettings":
        """Build settings from ``CPI_VIRTUALBOX_CONFIG`` and ``CPI_VIRTUALBOX_VBOXMANAGE``."""
        config_path = os.getenv(CONFIG_ENV_VAR)
        settings = cls.load(Path(config_path)) if config_path else cls()

        vboxmanage = os.getenv(VBOXMANAGE_ENV_VAR)
        if vboxmanage:
            settings = settings.model_copy(update={"vboxmanage_path": vboxmanage})
        return settings
