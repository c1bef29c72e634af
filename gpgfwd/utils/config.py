"""Application configuration for the GPG forwarding debug tool."""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Config:
    """Application configuration settings."""

    # External tools
    ssh_binary: str = "ssh"
    gpg_binary: str = "gpg"
    gpg_agent_binary: str = "gpg-agent"
    gpgconf_binary: str = "gpgconf"
    gpg_connect_agent_binary: str = "gpg-connect-agent"
    pgrep_binary: str = "pgrep"

    # Timeouts
    command_timeout: float = 15.0  # seconds
    control_check_timeout: float = 10.0

    # Agent sockets
    socket_dir_template: str = "/run/user/{uid}/gnupg"
    expected_sockets: List[str] = field(default_factory=lambda: [
        "S.gpg-agent",        # main agent socket (the one signing needs)
        "S.gpg-agent.extra",  # restricted socket, usual RemoteForward source
        "S.gpg-agent.scd",
        "S.scdaemon",
    ])

    # Keys of `ssh -G` output worth a second look (matched case-insensitively)
    relevant_ssh_options: List[str] = field(default_factory=lambda: [
        "hostname",
        "user",
        "port",
        "remoteforward",
        "localforward",
        "dynamicforward",
        "streamlocal",
        "exitonforwardfailure",
        "forwardagent",
    ])

    # Remote sign test
    sign_test_input: str = "test"
    sign_test_stdout: str = "/tmp/gpg-test.out"
    sign_test_stderr: str = "/tmp/gpg-test.err"

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def load(cls, filepath: Optional[Path] = None) -> "Config":
        """Load configuration from file."""
        if filepath is None:
            filepath = cls._default_config_path()

        if filepath.exists():
            try:
                with open(filepath, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise TypeError("top level must be a JSON object")
                known = {fld.name for fld in fields(cls)}
                unknown = set(data) - known
                if unknown:
                    logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
                return cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, json.JSONDecodeError, TypeError) as e:
                logger.warning(f"Invalid config file {filepath}, using defaults: {e}")

        return cls()

    @staticmethod
    def _default_config_path() -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".gpgfwd-debug" / "config.json"

    def logging_level(self) -> int:
        """Numeric level for `log_level`; unknown values fall back to WARNING."""
        if isinstance(self.log_level, int) and not isinstance(self.log_level, bool):
            return self.log_level
        level = logging.getLevelName(str(self.log_level).upper())
        if isinstance(level, int):
            return level
        logger.warning(f"Unknown log_level {self.log_level!r}, using WARNING")
        return logging.WARNING

    def socket_dir(self, uid: int) -> Path:
        """Expected agent socket directory for a numeric user id."""
        return Path(self.socket_dir_template.format(uid=uid))
