"""External tool probes (ssh, gpg and friends)."""

from .commands import CommandRunner, CommandResult
from .ssh import SSHProbe
from .gpg import GPGProbe, SocketStatus, DirectoryListing

__all__ = [
    "CommandRunner",
    "CommandResult",
    "SSHProbe",
    "GPGProbe",
    "SocketStatus",
    "DirectoryListing",
]
