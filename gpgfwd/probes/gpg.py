"""GnuPG agent probes: binaries, runtime dirs, sockets, processes, liveness."""

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .commands import CommandRunner, CommandResult
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class SocketStatus:
    """State of one expected agent socket."""
    name: str
    path: Path
    exists: bool
    is_socket: bool


@dataclass
class DirectoryListing:
    """`ls -l` style listing of a directory."""
    path: Path
    lines: List[str]
    error: Optional[str] = None


class GPGProbe:
    """
    Inspects the local GnuPG installation and agent.

    Socket files are checked directly; everything else is delegated to
    the GnuPG tools themselves.
    """

    def __init__(
        self,
        runner: CommandRunner,
        gpg_binary: str = "gpg",
        gpg_agent_binary: str = "gpg-agent",
        gpgconf_binary: str = "gpgconf",
        gpg_connect_agent_binary: str = "gpg-connect-agent",
        pgrep_binary: str = "pgrep"
    ):
        self.runner = runner
        self.gpg_binary = gpg_binary
        self.gpg_agent_binary = gpg_agent_binary
        self.gpgconf_binary = gpgconf_binary
        self.gpg_connect_agent_binary = gpg_connect_agent_binary
        self.pgrep_binary = pgrep_binary

    def version(self, binary: str) -> Optional[CommandResult]:
        """`<binary> --version`, or None when the binary is not on PATH."""
        if self.runner.which(binary) is None:
            logger.info(f"{binary} not found on PATH")
            return None
        return self.runner.run([binary, "--version"])

    def list_dirs(self) -> CommandResult:
        """`gpgconf --list-dirs`."""
        return self.runner.run([self.gpgconf_binary, "--list-dirs"])

    def agent_processes(self) -> CommandResult:
        """`pgrep -a gpg-agent`; exit 1 means no match."""
        return self.runner.run([self.pgrep_binary, "-a", "gpg-agent"])

    def ping_agent(self) -> CommandResult:
        """`gpg-connect-agent /bye` against the local agent."""
        return self.runner.run([self.gpg_connect_agent_binary, "/bye"])

    @staticmethod
    def socket_status(socket_dir: Path, name: str) -> SocketStatus:
        """Check a single socket path without following it."""
        path = socket_dir / name
        try:
            mode = os.lstat(path).st_mode
        except OSError:
            return SocketStatus(name=name, path=path, exists=False, is_socket=False)
        return SocketStatus(name=name, path=path, exists=True, is_socket=stat.S_ISSOCK(mode))

    @staticmethod
    def list_directory(path: Path) -> DirectoryListing:
        """Mode, size, mtime and name of each entry, like `ls -l`."""
        listing = DirectoryListing(path=path, lines=[])
        try:
            entries = sorted(os.scandir(path), key=lambda e: e.name)
        except OSError as e:
            listing.error = str(e)
            logger.debug(f"Cannot list {path}: {e}")
            return listing

        for entry in entries:
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as e:
                listing.lines.append(f"?????????? {entry.name} ({e.strerror})")
                continue
            mtime = datetime.fromtimestamp(st.st_mtime).strftime("%b %d %H:%M")
            listing.lines.append(
                f"{stat.filemode(st.st_mode)} {st.st_nlink:>2} {st.st_size:>6} {mtime} {entry.name}"
            )
        return listing
