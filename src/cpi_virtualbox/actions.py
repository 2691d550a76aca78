"""Action contract types: parameter schemas, definitions and results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ParamType(Enum):
    """Declared type of an action parameter."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ParameterSpec:
    """One entry in an action's parameter schema."""

    name: str
    description: str
    type: ParamType
    required: bool = True
    default: Any = None

    def __post_init__(self):
        if not self.required and self.default is None:
            raise ValueError(f"Optional parameter '{self.name}' needs a default")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "required": self.required,
            "default": self.default,
        }


def param(
    name: str,
    description: str,
    type: ParamType,
    required: bool = True,
    default: Any = None,
) -> ParameterSpec:
    """Shorthand used when declaring action schemas."""
    return ParameterSpec(name, description, type, required, default)


@dataclass(frozen=True)
class ActionDefinition:
    """Name, description and ordered parameter schema of an action."""

    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...] = ()

    def get_parameter(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [p.to_dict() for p in self.parameters],
        }


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one dispatched action.

    Either a success carrying a record, or an error carrying a human readable
    message. Build instances with :meth:`ok` and :meth:`err`.
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def ok(cls, record: Optional[Dict[str, Any]] = None) -> "ActionResult":
        data = {"success": True}
        data.update(record or {})
        data["success"] = True
        return cls(success=True, data=data)

    @classmethod
    def err(cls, message: str) -> "ActionResult":
        return cls(success=False, error=message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape returned to callers."""
        if self.success:
            return dict(self.data)
        return {"success": False, "error": self.error}
