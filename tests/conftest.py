"""
Pytest fixtures and configuration for cpi-virtualbox tests.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
import structlog

from cpi_virtualbox.interfaces.process import ProcessResult, ProcessRunner
from cpi_virtualbox.provider import VirtualBoxExtension
from cpi_virtualbox.settings import ProviderSettings
from cpi_virtualbox.vboxmanage import VBoxManage


class ScriptedRunner(ProcessRunner):
    """ProcessRunner that answers VBoxManage calls from canned replies.

    Replies are keyed by an argument prefix (without the executable); the
    longest matching prefix wins. Unscripted calls succeed with empty output.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self._replies: Dict[Tuple[str, ...], Tuple[ProcessResult, Optional[Exception]]] = {}

    def reply(self, *args: str, stdout: str = "", stderr: str = "", returncode: int = 0):
        self._replies[tuple(args)] = (ProcessResult(returncode, stdout, stderr), None)

    def fail(self, *args: str, stderr: str = "error", returncode: int = 1):
        self.reply(*args, stderr=stderr, returncode=returncode)

    def raise_on(self, *args: str, error: Exception):
        self._replies[tuple(args)] = (ProcessResult(0, "", ""), error)

    def run(self, command: Sequence[str], env=None) -> ProcessResult:
        command = list(command)
        self.calls.append(command)
        args = tuple(command[1:])

        best = None
        for prefix in self._replies:
            if args[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        if best is None:
            return ProcessResult(0, "", "")

        result, error = self._replies[best]
        if error is not None:
            raise error
        return result

    @property
    def commands(self) -> List[List[str]]:
        """Argument vectors of all calls, without the executable."""
        return [call[1:] for call in self.calls]


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging so tests stay isolated."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


@pytest.fixture
def runner():
    return ScriptedRunner()


@pytest.fixture
def vboxmanage(runner):
    return VBoxManage(executable="VBoxManage", runner=runner)


@pytest.fixture
def provider(vboxmanage):
    return VirtualBoxExtension(settings=ProviderSettings(), vboxmanage=vboxmanage)


@pytest.fixture
def vm_list_output():
    return (
        '"ubuntu-dev" {0f3a9d2e-1c44-4b8e-9a5f-2d6c7e8b9a01}\n'
        '"Windows 11" {7d1e2f3a-4b5c-6d7e-8f90-111122223333}\n'
    )


@pytest.fixture
def vm_info_output():
    return (
        'name="ubuntu-dev"\n'
        'groups="/"\n'
        'ostype="Ubuntu (64-bit)"\n'
        'UUID="0f3a9d2e-1c44-4b8e-9a5f-2d6c7e8b9a01"\n'
        'CfgFile="/home/user/VirtualBox VMs/ubuntu-dev/ubuntu-dev.vbox"\n'
        "memory=4096\n"
        "cpus=2\n"
        'firmware="BIOS"\n'
        'graphicscontroller="vmsvga"\n'
        'VMState="poweroff"\n'
        'VMStateChangeTime="2024-03-01T10:15:00.000000000"\n'
    )


@pytest.fixture
def hdd_list_output():
    return (
        "UUID:           6a1e8f3c-0000-4000-8000-000000000001\n"
        "Parent UUID:    base\n"
        "State:          created\n"
        "Type:           normal (base)\n"
        "Location:       /home/user/VirtualBox VMs/ubuntu-dev/ubuntu-dev.vdi\n"
        "Format:         VDI\n"
        "Capacity:       10240 MBytes\n"
        "Encryption:     disabled\n"
        "\n"
        "UUID:           6a1e8f3c-0000-4000-8000-000000000002\n"
        "Parent UUID:    6a1e8f3c-0000-4000-8000-000000000001\n"
        "State:          inaccessible\n"
        "Type:           normal (differencing)\n"
        "Location:       /tmp/snap.vdi\n"
        "Format:         VDI\n"
        "Capacity:       2 GBytes\n"
        "\n"
    )


# Markers for test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: Tests that need a real VBoxManage")
