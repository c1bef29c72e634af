"""External command execution for diagnostic probes."""

import shutil
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import List, Optional

from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Outcome of running an external command."""
    argv: List[str]
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None  # not found / timed out / OS error
    duration_ms: Optional[float] = None

    @property
    def ok(self) -> bool:
        """True when the command ran and exited with status 0."""
        return self.error is None and self.returncode == 0

    def head(self, count: int) -> List[str]:
        """First `count` lines of stdout."""
        return self.stdout.splitlines()[:count]


class CommandRunner:
    """
    Runs external tools, never raising for tool failures.

    Captured runs return stdout/stderr for classification. Interactive runs
    inherit the terminal so the remote session and any pinentry prompt are
    visible to the user.
    """

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    def which(self, name: str) -> Optional[str]:
        """Locate an executable on PATH."""
        return shutil.which(name)

    def run(
        self,
        argv: List[str],
        timeout: Optional[float] = None
    ) -> CommandResult:
        """
        Run a command to completion and capture its output.

        Args:
            argv: Command and arguments
            timeout: Seconds before giving up (defaults to the runner timeout)

        Returns:
            CommandResult; `error` is set when the command could not run
        """
        timeout = self.timeout if timeout is None else timeout
        result = CommandResult(argv=list(argv))
        logger.debug(f"Running: {' '.join(argv)}")

        start = time.perf_counter()
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout
            )
            result.returncode = proc.returncode
            result.stdout = proc.stdout or ""
            result.stderr = proc.stderr or ""
        except FileNotFoundError:
            result.error = f"{argv[0]}: command not found"
        except subprocess.TimeoutExpired:
            result.error = f"{argv[0]}: timed out after {timeout:.0f}s"
        except OSError as e:
            result.error = f"{argv[0]}: {e}"
        result.duration_ms = (time.perf_counter() - start) * 1000

        if result.error:
            logger.warning(result.error)
        else:
            logger.debug(f"{argv[0]} exited {result.returncode} in {result.duration_ms:.0f}ms")
            if result.stderr.strip():
                logger.debug(f"{argv[0]} stderr: {result.stderr.strip()}")
        return result

    def run_interactive(self, argv: List[str], input_text: Optional[str] = None) -> CommandResult:
        """
        Run a command attached to the user's terminal (no capture, no timeout).

        Pending console output is flushed first so it appears before the
        child's output.
        """
        result = CommandResult(argv=list(argv))
        logger.info(f"Starting interactive: {' '.join(argv)}")

        sys.stdout.flush()
        sys.stderr.flush()

        start = time.perf_counter()
        try:
            proc = subprocess.run(argv, input=input_text, text=True)
            result.returncode = proc.returncode
        except FileNotFoundError:
            result.error = f"{argv[0]}: command not found"
        except OSError as e:
            result.error = f"{argv[0]}: {e}"
        result.duration_ms = (time.perf_counter() - start) * 1000

        if result.error:
            logger.error(result.error)
        else:
            logger.info(f"Interactive session exited {result.returncode}")
        return result
