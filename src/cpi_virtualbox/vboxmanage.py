"""Invocation of the VBoxManage command line tool."""

import sys
from typing import Optional, Sequence

from .backends.subprocess_runner import SubprocessRunner
from .errors import SubprocessError
from .interfaces.process import ProcessRunner
from .logging import get_logger

log = get_logger(__name__)

VBOXMANAGE = "VBoxManage"


def resolve_executable(platform: Optional[str] = None, override: Optional[str] = None) -> str:
    """Return the VBoxManage executable for ``platform`` (default: this one)."""
    if override:
        return override
    platform = platform or sys.platform
    if platform.startswith(("win32", "cygwin")):
        return f"{VBOXMANAGE}.exe"
    return VBOXMANAGE


class VBoxManage:
    """Runs VBoxManage synchronously and returns its standard output.

    No timeout and no retry: a hung VBoxManage blocks the caller.
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        self.executable = executable or resolve_executable()
        self.runner = runner or SubprocessRunner()

    def run(self, args: Sequence[str]) -> str:
        """Run ``VBoxManage <args>``.

        Returns stdout untouched. Raises :class:`SubprocessError` when the
        program cannot be started (including arguments with a NUL byte) or
        exits with a nonzero status.
        """
        command = [self.executable, *args]
        log.debug("vboxmanage.run", args=list(args))

        try:
            result = self.runner.run(command)
        except (OSError, ValueError) as e:
            log.warning("vboxmanage.spawn_failed", args=list(args), error=str(e))
            raise SubprocessError(f"Failed to execute VBoxManage command: {e}") from e

        if not result.success:
            log.debug(
                "vboxmanage.failed", args=list(args), returncode=result.returncode
            )
            raise SubprocessError(
                f"VBoxManage command failed: {result.stderr}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.stdout
