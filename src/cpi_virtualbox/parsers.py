"""
Parsers for VBoxManage text output.

Every function here is pure: raw text in, records out. Empty input yields an
empty result rather than an error, and lines or fields that do not match the
expected shape are skipped without aborting the rest of the parse.
"""

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

_INTEGER = re.compile(r"[+-]?\d+")
_BLANK_LINE = re.compile(r"\n[ \t]*\n")


@dataclass
class WorkerRecord:
    """A virtual machine as reported by VBoxManage.

    Only ``name`` and ``id`` are guaranteed; which other fields are set
    depends on the output format the record was parsed from.
    """

    name: Optional[str] = None
    id: Optional[str] = None
    uuid: Optional[str] = None
    state: Optional[str] = None
    memory_mb: Optional[int] = None
    cpu_count: Optional[int] = None
    os_type: Optional[str] = None
    firmware: Optional[str] = None
    graphics_controller: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class VolumeRecord:
    """A virtual disk from ``list hdds``."""

    id: Optional[str] = None
    path: Optional[str] = None
    size_mb: Optional[int] = None
    format: Optional[str] = None
    type: Optional[str] = None
    parent: Optional[str] = None
    state: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def _lines(text: str) -> List[str]:
    return text.splitlines()


def _parse_int(value: str) -> Optional[int]:
    value = value.strip()
    if _INTEGER.fullmatch(value):
        return int(value)
    return None


def parse_version(text: str) -> str:
    """``VBoxManage --version`` prints a single line such as ``7.0.14r161095``."""
    return text.rstrip()


def parse_vm_list(text: str) -> List[WorkerRecord]:
    """Parse ``list vms`` output.

    Each line looks like ``"VM Name" {uuid}``. The name sits between the first
    and last double quote, the uuid between the first and last brace.
    """
    workers = []
    for line in _lines(text):
        if not line.strip():
            continue

        first_quote, last_quote = line.find('"'), line.rfind('"')
        if first_quote == -1 or first_quote >= last_quote:
            continue
        open_brace, close_brace = line.find("{"), line.rfind("}")
        if open_brace == -1 or open_brace >= close_brace:
            continue

        name = line[first_quote + 1 : last_quote]
        uuid = line[open_brace + 1 : close_brace]
        workers.append(WorkerRecord(name=name, id=uuid, uuid=uuid, state="unknown"))
    return workers


# machinereadable key -> (record field, is integer)
_VM_INFO_KEYS = {
    "name": ("name", False),
    "UUID": ("id", False),
    "VMState": ("state", False),
    "memory": ("memory_mb", True),
    "cpus": ("cpu_count", True),
    "ostype": ("os_type", False),
    "firmware": ("firmware", False),
    "graphicscontroller": ("graphics_controller", False),
}


def parse_vm_info(text: str) -> WorkerRecord:
    """Parse ``showvminfo <vm> --machinereadable`` output.

    Lines are ``key=value`` with the value optionally double quoted. Keys not
    listed in ``_VM_INFO_KEYS`` are ignored; an integer field whose value does
    not parse is left unset.
    """
    record = WorkerRecord()
    for line in _lines(text):
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip().strip('"')
        if key not in _VM_INFO_KEYS:
            continue

        field_name, is_integer = _VM_INFO_KEYS[key]
        value = value.strip().strip('"')
        if is_integer:
            number = _parse_int(value)
            if number is None:
                continue
            setattr(record, field_name, number)
        else:
            setattr(record, field_name, value)
    return record


def extract_labeled_value(text: str, label: str) -> Optional[str]:
    """Return the value of the first line mentioning ``label``.

    The value is everything after that line's first colon, trimmed, so
    ``Medium created. UUID: 1234`` yields ``1234`` for label ``UUID``.
    """
    for line in _lines(text):
        if label not in line:
            continue
        _, sep, rest = line.partition(":")
        if sep:
            return rest.strip()
    return None


def parse_snapshot_taken(text: str) -> Optional[str]:
    """Pull the snapshot id out of ``snapshot <vm> take`` output.

    Older releases print ``... taken as <uuid>``; current ones print
    ``Snapshot taken. UUID: <uuid>``.
    """
    for line in _lines(text):
        if "taken as" in line:
            return line.split("taken as", 1)[1].strip()
    return extract_labeled_value(text, "UUID")


# Order matters: "Parent UUID:" must not be read as "UUID:".
_VOLUME_LABELS = (
    ("Parent UUID:", "parent"),
    ("UUID:", "id"),
    ("Location:", "path"),
    ("Capacity:", "size_mb"),
    ("Format:", "format"),
    ("Type:", "type"),
    ("State:", "state"),
)


def _parse_capacity(value: str) -> Optional[int]:
    parts = value.split()
    if len(parts) >= 2 and parts[1] == "MBytes":
        return _parse_int(parts[0])
    return None


def parse_hdd_list(text: str) -> List[VolumeRecord]:
    """Parse ``list hdds`` output into volumes.

    Records are separated by a blank line and consist of ``Label: value``
    lines. A block in which no known label appears produces no record.
    """
    volumes = []
    for block in _BLANK_LINE.split(text.replace("\r\n", "\n")):
        if not block.strip():
            continue

        volume = VolumeRecord()
        for line in block.split("\n"):
            line = line.strip()
            for label, field_name in _VOLUME_LABELS:
                if not line.startswith(label):
                    continue
                value = line[len(label) :].strip()
                if field_name == "size_mb":
                    size = _parse_capacity(value)
                    if size is not None:
                        volume.size_mb = size
                else:
                    setattr(volume, field_name, value)
                break

        if not volume.is_empty():
            volumes.append(volume)
    return volumes


def listing_contains(text: str, needle: str) -> bool:
    """True if any line of ``text`` contains ``needle``.

    This is a substring test, so ``base`` also matches a snapshot named
    ``base-v2``.
    """
    return any(needle in line for line in _lines(text))
