"""SSH client probes: effective config, control connection, remote session."""

import re
from typing import List

from .commands import CommandRunner, CommandResult
from ..utils import get_logger

logger = get_logger(__name__)


class SSHProbe:
    """
    Queries the local OpenSSH client.

    Config resolution is left to `ssh -G`, which prints the effective
    options for a host after all Host/Match blocks are merged.
    """

    def __init__(
        self,
        runner: CommandRunner,
        ssh_binary: str = "ssh",
        control_check_timeout: float = 10.0
    ):
        self.runner = runner
        self.ssh_binary = ssh_binary
        self.control_check_timeout = control_check_timeout

    def effective_config(self, host: str) -> CommandResult:
        """Run `ssh -G <host>`."""
        return self.runner.run([self.ssh_binary, "-G", host])

    @staticmethod
    def filter_options(config_text: str, keys: List[str]) -> List[str]:
        """
        Lines of `ssh -G` output mentioning any of `keys`.

        Matching is case-insensitive and anywhere in the line, so
        `user` also keeps `userknownhostsfile`.
        """
        if not keys:
            return []
        pattern = re.compile("|".join(re.escape(k) for k in keys), re.IGNORECASE)
        return [line for line in config_text.splitlines() if pattern.search(line)]

    def control_connection(self, host: str) -> CommandResult:
        """Run `ssh -O check <host>` against an existing ControlMaster."""
        result = self.runner.run(
            [self.ssh_binary, "-O", "check", host],
            timeout=self.control_check_timeout
        )
        logger.debug(f"Control check for {host}: rc={result.returncode} {result.stderr.strip()}")
        return result

    def open_session(self, host: str, script: str) -> CommandResult:
        """
        Run `script` through bash on `host` with a forced TTY.

        `-tt` allocates a terminal even though stdin is the script, so
        pinentry prompts during the remote sign test can show up.
        """
        return self.runner.run_interactive(self.session_argv(host), input_text=script)

    def session_argv(self, host: str) -> List[str]:
        """Argument vector used for the interactive session."""
        return [self.ssh_binary, "-tt", host, "bash"]
