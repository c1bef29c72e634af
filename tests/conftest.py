"""Shared fixtures: a scripted command runner and throwaway socket dirs."""

import shutil
import socket
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from gpgfwd.probes import CommandRunner, CommandResult
from gpgfwd.utils import Config

ALL_SOCKETS = ["S.gpg-agent", "S.gpg-agent.extra", "S.gpg-agent.scd", "S.scdaemon"]

SSH_G_OUTPUT = """\
user alice
hostname devbox.example.com
port 22
forwardagent no
exitonforwardfailure yes
streamlocalbindunlink yes
remoteforward /run/user/1000/gnupg/S.gpg-agent /run/user/1000/gnupg/S.gpg-agent.extra
compression no
"""


class FakeRunner(CommandRunner):
    """
    CommandRunner replaying canned results.

    Responses are looked up by full argv tuple first, then by program
    name, as (returncode, stdout) or (returncode, stdout, stderr); anything
    unknown exits 1 with no output.
    """

    def __init__(self, responses: Optional[Dict] = None, missing=()):
        super().__init__(timeout=1.0)
        self.responses = responses or {}
        self.missing = set(missing)
        self.calls: List[List[str]] = []
        self.interactive_calls: List[Tuple[List[str], Optional[str]]] = []
        self.interactive_result: Optional[CommandResult] = None

    def which(self, name):
        return None if name in self.missing else f"/usr/bin/{name}"

    def run(self, argv, timeout=None):
        self.calls.append(list(argv))
        if argv[0] in self.missing:
            return CommandResult(argv=list(argv), error=f"{argv[0]}: command not found")
        response = self.responses.get(tuple(argv), self.responses.get(argv[0]))
        if response is None:
            return CommandResult(argv=list(argv), returncode=1)
        returncode, stdout = response[:2]
        stderr = response[2] if len(response) > 2 else ""
        return CommandResult(argv=list(argv), returncode=returncode, stdout=stdout, stderr=stderr)

    def run_interactive(self, argv, input_text=None):
        self.interactive_calls.append((list(argv), input_text))
        if self.interactive_result is not None:
            return self.interactive_result
        return CommandResult(argv=list(argv), returncode=0)


def healthy_responses(host: str = "devbox") -> Dict:
    return {
        ("ssh", "-G", host): (0, SSH_G_OUTPUT),
        ("ssh", "-O", "check", host): (0, ""),
        ("gpg", "--version"): (0, "gpg (GnuPG) 2.4.4\nlibgcrypt 1.10.3\nCopyright (C) 2024 g10 Code GmbH\nLicense GNU GPL-3.0-or-later\n"),
        ("gpg-agent", "--version"): (0, "gpg-agent (GnuPG) 2.4.4\nlibgcrypt 1.10.3\nCopyright\n"),
        ("gpgconf", "--list-dirs"): (0, "sysconfdir:/etc/gnupg\nagent-socket:/run/user/1000/gnupg/S.gpg-agent\n"),
        ("pgrep", "-a", "gpg-agent"): (0, "4242 gpg-agent --homedir /home/alice/.gnupg --use-standard-socket --daemon\n"),
        ("gpg-connect-agent", "/bye"): (0, ""),
    }


@pytest.fixture
def short_dir():
    """Temp dir with a short path; AF_UNIX paths are limited to ~107 bytes."""
    path = Path(tempfile.mkdtemp(prefix="gf"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


def make_socket(path: Path) -> None:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(str(path))
    finally:
        sock.close()


@pytest.fixture
def socket_config(short_dir):
    """Config whose socket directory lives under a temp dir (not yet created)."""
    return Config(socket_dir_template=str(short_dir / "{uid}" / "gnupg"))
