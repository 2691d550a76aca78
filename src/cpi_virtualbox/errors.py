"""Error types raised inside the VirtualBox provider.

All of them derive from :class:`CpiError`. The dispatcher turns any
``CpiError`` into an error :class:`~cpi_virtualbox.actions.ActionResult`
carrying ``str(error)``; nothing else is caught there.
"""

from typing import Optional


class CpiError(Exception):
    """Base class for provider errors."""


class SubprocessError(CpiError):
    """VBoxManage could not be launched or exited with a nonzero status."""

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ParameterError(CpiError):
    """An action parameter failed validation."""

    def __init__(self, message: str, parameter: str):
        super().__init__(message)
        self.parameter = parameter


class MissingParameterError(ParameterError):
    def __init__(self, parameter: str):
        super().__init__(f"Missing required parameter: {parameter}", parameter)


class WrongTypeError(ParameterError):
    def __init__(self, parameter: str, expected: str, value: object):
        super().__init__(
            f"Parameter '{parameter}' must be {expected}, got {type(value).__name__}",
            parameter,
        )
        self.expected = expected


class UnknownActionError(CpiError):
    def __init__(self, action: str):
        super().__init__(f"Action '{action}' not found")
        self.action = action
