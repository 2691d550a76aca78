"""Subprocess process runner implementation."""

import subprocess
from typing import Dict, Optional, Sequence

from ..interfaces.process import ProcessResult, ProcessRunner


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    def run(
        self,
        command: Sequence[str],
        env: Optional[Dict[str, str]] = None,
    ) -> ProcessResult:
        """Run a command and capture its text output."""
        result = subprocess.run(
            list(command),
            capture_output=True,
            check=False,
            env=env,
            text=True,
            errors="replace",
        )
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
