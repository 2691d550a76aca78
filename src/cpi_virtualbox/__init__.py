"""
cpi-virtualbox - VirtualBox provider for the CPI action contract.

Exposes VM, disk, snapshot and network actions as named operations with
typed parameter schemas, executed through the VBoxManage command line tool.
"""

__version__ = "0.1.0"

from cpi_virtualbox.actions import ActionDefinition, ActionResult, ParameterSpec, ParamType
from cpi_virtualbox.provider import VirtualBoxExtension
from cpi_virtualbox.settings import ProviderSettings


def get_extension() -> VirtualBoxExtension:
    """Entry point used by host runtimes to instantiate the provider."""
    return VirtualBoxExtension(settings=ProviderSettings.from_env())


__all__ = [
    "ActionDefinition",
    "ActionResult",
    "ParameterSpec",
    "ParamType",
    "ProviderSettings",
    "VirtualBoxExtension",
    "get_extension",
    "__version__",
]
