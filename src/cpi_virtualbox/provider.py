#!/usr/bin/env python3
"""
VirtualBox provider: the action registry, the dispatcher and one executor per
action. Executors build a VBoxManage argument vector, run it and hand the
output to a parser from :mod:`cpi_virtualbox.parsers`.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from .actions import ActionDefinition, ActionResult, ParameterSpec, ParamType, param
from .errors import CpiError, SubprocessError, UnknownActionError
from .logging import get_logger, log_operation
from .parsers import (
    extract_labeled_value,
    listing_contains,
    parse_hdd_list,
    parse_snapshot_taken,
    parse_version,
    parse_vm_info,
    parse_vm_list,
)
from .settings import ProviderSettings
from .validation import bind_arguments
from .vboxmanage import VBoxManage, resolve_executable

log = get_logger(__name__)

Record = Dict[str, Any]


def _worker(description: str = "Name of the VM") -> ParameterSpec:
    return param("worker_name", description, ParamType.STRING)


def _disk(description: str = "Path to the disk") -> ParameterSpec:
    return param("disk_path", description, ParamType.STRING)


@dataclass(frozen=True)
class RegisteredAction:
    """An action's schema paired with the method that executes it."""

    definition: ActionDefinition
    executor: Callable[..., Record]


class VirtualBoxExtension:
    """Exposes VM, disk, snapshot and network actions backed by VBoxManage.

    Usage:
        provider = VirtualBoxExtension()
        result = provider.execute_action("create_volume", {
            "disk_path": "/tmp/disk.vdi",
            "size_mb": 10240,
        })
        result.to_dict()  # {"success": True, "uuid": "...", "path": "..."}
    """

    name = "virtualbox"
    provider_type = "command"

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        vboxmanage: Optional[VBoxManage] = None,
    ):
        self.settings = settings or ProviderSettings()
        self.vboxmanage = vboxmanage or VBoxManage(
            executable=resolve_executable(override=self.settings.vboxmanage_path)
        )
        self._registry = self._build_registry()

    # ── contract ────────────────────────────────────────────────────────────

    def list_actions(self) -> List[str]:
        return list(self._registry)

    def get_action_definition(self, action: str) -> Optional[ActionDefinition]:
        registered = self._registry.get(action)
        return registered.definition if registered else None

    def execute_action(self, action: str, params: Mapping[str, Any]) -> ActionResult:
        """Validate ``params`` for ``action``, run it and wrap the outcome."""
        try:
            registered = self._registry.get(action)
            if registered is None:
                raise UnknownActionError(action)

            with log_operation(log, action):
                arguments = bind_arguments(registered.definition, params or {})
                record = registered.executor(**arguments)
        except CpiError as e:
            return ActionResult.err(str(e))
        return ActionResult.ok(record)

    # ── registry ────────────────────────────────────────────────────────────

    def _build_registry(self) -> Dict[str, RegisteredAction]:
        s = self.settings
        controller = param(
            "controller_name",
            "Name of the storage controller",
            ParamType.STRING,
            required=False,
            default=s.controller_name,
        )
        snapshot = param("snapshot_name", "Name of the snapshot", ParamType.STRING)
        port = param("port", "Port number", ParamType.INTEGER)

        table = [
            ("test_install", "Test if VirtualBox is properly installed", [], self.test_install),
            ("list_workers", "List all virtual machines", [], self.list_workers),
            (
                "create_worker",
                "Create a new virtual machine",
                [
                    _worker("Name of the VM to create"),
                    param("os_type", "Operating system type", ParamType.STRING,
                          required=False, default=s.os_type),
                    param("memory_mb", "Memory in MB", ParamType.INTEGER,
                          required=False, default=s.memory_mb),
                    param("cpu_count", "Number of CPUs", ParamType.INTEGER,
                          required=False, default=s.cpu_count),
                ],
                self.create_worker,
            ),
            (
                "delete_worker",
                "Delete a virtual machine",
                [_worker("Name of the VM to delete")],
                self.delete_worker,
            ),
            (
                "get_worker",
                "Get information about a virtual machine",
                [_worker()],
                self.get_worker,
            ),
            ("has_worker", "Check if a virtual machine exists", [_worker()], self.has_worker),
            (
                "start_worker",
                "Start a virtual machine",
                [_worker("Name of the VM to start")],
                self.start_worker,
            ),
            ("get_volumes", "List all virtual disk volumes", [], self.get_volumes),
            ("has_volume", "Check if a disk volume exists", [_disk()], self.has_volume),
            (
                "create_volume",
                "Create a new disk volume",
                [
                    _disk("Path for the new disk"),
                    param("size_mb", "Size in MB", ParamType.INTEGER),
                ],
                self.create_volume,
            ),
            ("delete_volume", "Delete a disk volume", [_disk()], self.delete_volume),
            (
                "attach_volume",
                "Create a storage controller and attach a disk to a VM",
                [_worker(), controller, port, _disk()],
                self.attach_volume,
            ),
            (
                "detach_volume",
                "Detach a disk from a VM",
                [_worker(), controller, port],
                self.detach_volume,
            ),
            (
                "create_snapshot",
                "Create a snapshot of a VM",
                [_worker(), snapshot],
                self.create_snapshot,
            ),
            (
                "delete_snapshot",
                "Delete a snapshot of a VM",
                [_worker(), snapshot],
                self.delete_snapshot,
            ),
            (
                "has_snapshot",
                "Check if a snapshot exists",
                [_worker(), snapshot],
                self.has_snapshot,
            ),
            ("reboot_worker", "Reboot a VM", [_worker()], self.reboot_worker),
            (
                "configure_networks",
                "Configure network settings for a VM",
                [
                    _worker(),
                    param("network_index", "Network adapter index", ParamType.INTEGER),
                    param("network_type", "Network type", ParamType.STRING,
                          required=False, default=s.network_type),
                ],
                self.configure_networks,
            ),
            (
                "set_worker_metadata",
                "Set metadata for a VM",
                [
                    _worker(),
                    param("key", "Metadata key", ParamType.STRING),
                    param("value", "Metadata value", ParamType.STRING),
                ],
                self.set_worker_metadata,
            ),
            (
                "snapshot_volume",
                "Clone a disk volume",
                [
                    param("source_volume_path", "Path to the source disk", ParamType.STRING),
                    param("target_volume_path", "Path for the cloned disk", ParamType.STRING),
                ],
                self.snapshot_volume,
            ),
        ]

        return {
            name: RegisteredAction(ActionDefinition(name, description, tuple(params)), executor)
            for name, description, params, executor in table
        }

    # ── workers ─────────────────────────────────────────────────────────────

    def test_install(self) -> Record:
        output = self.vboxmanage.run(["--version"])
        return {"version": parse_version(output)}

    def list_workers(self) -> Record:
        output = self.vboxmanage.run(["list", "vms"])
        workers = parse_vm_list(output)
        for worker in workers:
            log.debug("list_workers.parsed", name=worker.name, uuid=worker.uuid)
        return {"workers": [w.to_dict() for w in workers]}

    def create_worker(
        self, worker_name: str, os_type: str, memory_mb: int, cpu_count: int
    ) -> Record:
        output = self.vboxmanage.run(
            ["createvm", "--name", worker_name, "--ostype", os_type, "--register"]
        )
        uuid = extract_labeled_value(output, "UUID") or ""

        # A failure below leaves the registered VM in place.
        self.vboxmanage.run(
            ["modifyvm", worker_name, "--memory", str(memory_mb), "--cpus", str(cpu_count)]
        )
        self.vboxmanage.run(["modifyvm", worker_name, "--nic1", self.settings.network_type])

        return {"uuid": uuid, "name": worker_name}

    def delete_worker(self, worker_name: str) -> Record:
        self.vboxmanage.run(["unregistervm", worker_name, "--delete"])
        return {}

    def get_worker(self, worker_name: str) -> Record:
        output = self.vboxmanage.run(["showvminfo", worker_name, "--machinereadable"])
        return {"vm": parse_vm_info(output).to_dict()}

    def has_worker(self, worker_name: str) -> Record:
        return {"exists": self._probe(["showvminfo", worker_name, "--machinereadable"])}

    def start_worker(self, worker_name: str) -> Record:
        self.vboxmanage.run(["startvm", worker_name, "--type", "headless"])
        return {"started": worker_name}

    def reboot_worker(self, worker_name: str) -> Record:
        self.vboxmanage.run(["controlvm", worker_name, "reset"])
        return {}

    def configure_networks(self, worker_name: str, network_index: int, network_type: str) -> Record:
        self.vboxmanage.run(["modifyvm", worker_name, f"--nic{network_index}", network_type])
        return {}

    def set_worker_metadata(self, worker_name: str, key: str, value: str) -> Record:
        self.vboxmanage.run(["setextradata", worker_name, key, value])
        return {}

    # ── volumes ─────────────────────────────────────────────────────────────

    def get_volumes(self) -> Record:
        output = self.vboxmanage.run(["list", "hdds"])
        return {"volumes": [v.to_dict() for v in parse_hdd_list(output)]}

    def has_volume(self, disk_path: str) -> Record:
        return {"exists": self._probe(["showmediuminfo", "disk", disk_path])}

    def create_volume(self, disk_path: str, size_mb: int) -> Record:
        output = self.vboxmanage.run(
            [
                "createmedium", "disk",
                "--filename", disk_path,
                "--size", str(size_mb),
                "--format", "VDI",
            ]
        )
        return {
            "uuid": extract_labeled_value(output, "UUID:") or "",
            "path": extract_labeled_value(output, "Location:") or "",
        }

    def delete_volume(self, disk_path: str) -> Record:
        self.vboxmanage.run(["closemedium", "disk", disk_path, "--delete"])
        return {}

    def attach_volume(
        self, worker_name: str, controller_name: str, port: int, disk_path: str
    ) -> Record:
        """Attach ``disk_path`` as a hard disk (``--type hdd``).

        ``hdd`` matches the VDI media ``create_volume`` makes and the type
        ``detach_volume`` releases; older providers passed ``dvddrive`` here.
        Creating the controller first is best effort.
        """
        self._try_create_controller(worker_name, controller_name)
        self.vboxmanage.run(
            [
                "storageattach", worker_name,
                "--storagectl", controller_name,
                "--port", str(port),
                "--device", "0",
                "--type", "hdd",
                "--medium", disk_path,
            ]
        )
        return {}

    def detach_volume(self, worker_name: str, controller_name: str, port: int) -> Record:
        self.vboxmanage.run(
            [
                "storageattach", worker_name,
                "--storagectl", controller_name,
                "--port", str(port),
                "--device", "0",
                "--type", "hdd",
                "--medium", "none",
            ]
        )
        return {}

    def snapshot_volume(self, source_volume_path: str, target_volume_path: str) -> Record:
        output = self.vboxmanage.run(
            ["clonemedium", "disk", source_volume_path, target_volume_path]
        )
        return {"uuid": extract_labeled_value(output, "UUID:") or ""}

    # ── snapshots ───────────────────────────────────────────────────────────

    def create_snapshot(self, worker_name: str, snapshot_name: str) -> Record:
        output = self.vboxmanage.run(["snapshot", worker_name, "take", snapshot_name])
        return {"uuid": parse_snapshot_taken(output) or ""}

    def delete_snapshot(self, worker_name: str, snapshot_name: str) -> Record:
        self.vboxmanage.run(["snapshot", worker_name, "delete", snapshot_name])
        return {}

    def has_snapshot(self, worker_name: str, snapshot_name: str) -> Record:
        output = self.vboxmanage.run(["snapshot", worker_name, "list", "--machinereadable"])
        return {"exists": listing_contains(output, snapshot_name)}

    # ── helpers ─────────────────────────────────────────────────────────────

    def _probe(self, args: List[str]) -> bool:
        """Run a query; success means the target exists, failure means it does not."""
        try:
            self.vboxmanage.run(args)
        except SubprocessError:
            return False
        return True

    def _try_create_controller(self, worker_name: str, controller_name: str) -> bool:
        """Add a SATA controller, ignoring failure (it usually already exists)."""
        try:
            self.vboxmanage.run(
                [
                    "storagectl", worker_name,
                    "--name", controller_name,
                    "--add", "sata",
                    "--controller", "IntelAhci",
                    "--portcount", "30",
                ]
            )
        except SubprocessError as e:
            log.info(
                "attach_volume.controller_skipped",
                worker_name=worker_name,
                controller_name=controller_name,
                error=str(e),
            )
            return False
        return True
