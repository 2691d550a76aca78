"""
Typed extraction of action parameters from an untyped mapping.

Extractors never substitute defaults: an absent optional parameter comes back
as ``None`` and the caller decides what to use instead. A key whose value is
``None`` counts as absent. Keys nobody asks for are ignored.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from .actions import ActionDefinition, ParamType
from .errors import MissingParameterError, WrongTypeError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _as_string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise WrongTypeError(name, "a string", value)
    return value


def _as_int(name: str, value: Any) -> int:
    # bool is an int subclass; True is not a port number.
    if isinstance(value, bool):
        raise WrongTypeError(name, "an integer", value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    else:
        raise WrongTypeError(name, "an integer", value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise WrongTypeError(name, "a 64-bit integer", value)
    return number


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise WrongTypeError(name, "a boolean", value)
    return value


def extract_string(params: Mapping[str, Any], name: str) -> str:
    value = params.get(name)
    if value is None:
        raise MissingParameterError(name)
    return _as_string(name, value)


def extract_string_opt(params: Mapping[str, Any], name: str) -> Optional[str]:
    value = params.get(name)
    return None if value is None else _as_string(name, value)


def extract_int(params: Mapping[str, Any], name: str) -> int:
    value = params.get(name)
    if value is None:
        raise MissingParameterError(name)
    return _as_int(name, value)


def extract_int_opt(params: Mapping[str, Any], name: str) -> Optional[int]:
    value = params.get(name)
    return None if value is None else _as_int(name, value)


def extract_bool(params: Mapping[str, Any], name: str) -> bool:
    value = params.get(name)
    if value is None:
        raise MissingParameterError(name)
    return _as_bool(name, value)


def extract_bool_opt(params: Mapping[str, Any], name: str) -> Optional[bool]:
    value = params.get(name)
    return None if value is None else _as_bool(name, value)


_REQUIRED: Dict[ParamType, Callable[[Mapping[str, Any], str], Any]] = {
    ParamType.STRING: extract_string,
    ParamType.INTEGER: extract_int,
    ParamType.BOOLEAN: extract_bool,
}

_OPTIONAL: Dict[ParamType, Callable[[Mapping[str, Any], str], Any]] = {
    ParamType.STRING: extract_string_opt,
    ParamType.INTEGER: extract_int_opt,
    ParamType.BOOLEAN: extract_bool_opt,
}


def extract(
    params: Mapping[str, Any], name: str, param_type: ParamType, required: bool = True
) -> Any:
    """Extract one parameter with the extractor matching its declared type."""
    table = _REQUIRED if required else _OPTIONAL
    return table[param_type](params, name)


def bind_arguments(
    definition: ActionDefinition, params: Mapping[str, Any]
) -> Dict[str, Any]:
    """Validate ``params`` against a definition and return executor kwargs.

    Parameters are checked in declared order, so the first invalid one is the
    one reported. Absent optional parameters take the schema default.
    """
    arguments: Dict[str, Any] = {}
    for spec in definition.parameters:
        value = extract(params, spec.name, spec.type, spec.required)
        if value is None:
            value = spec.default
        arguments[spec.name] = value
    return arguments
