"""Abstract interface for spawning the external tool."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence


@dataclass
class ProcessResult:
    """Captured outcome of one finished process."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner(ABC):
    """Runs an argument vector to completion and captures its output."""

    @abstractmethod
    def run(
        self,
        command: Sequence[str],
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run a command, blocking until it exits.

        Implementations must not raise on a nonzero exit status. Failure to
        launch the program surfaces as ``OSError``, or ``ValueError`` for an
        argument the OS cannot pass (such as one with a NUL byte).
        """
        pass
