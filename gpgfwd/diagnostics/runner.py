"""Diagnostic checklist runner and orchestrator."""

import os
import time
from typing import Dict, List, Optional, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..probes import CommandRunner, CommandResult, SSHProbe, GPGProbe
from ..utils import get_logger, Config
from .remote import RemoteScriptBuilder

logger = get_logger(__name__)

REMOTE_SECTION = "SSH: connecting with full TTY"


class CheckStatus(Enum):
    """Outcome attached to a report line."""
    OK = "ok"
    WARN = "warn"
    FAIL = "fail"
    INFO = "info"  # plain tool output


@dataclass
class ReportLine:
    """A single printed line of a section."""
    text: str
    status: CheckStatus = CheckStatus.INFO


@dataclass
class SectionResult:
    """Output of one checklist section."""
    title: str
    lines: List[ReportLine] = field(default_factory=list)
    duration_ms: Optional[float] = None

    def count(self, status: CheckStatus) -> int:
        return sum(1 for line in self.lines if line.status == status)


@dataclass
class Check:
    """Named check descriptor: a section title and the function filling it."""
    title: str
    func: Callable[[str], List[ReportLine]]


@dataclass
class DiagnosticReport:
    """Complete diagnostic report for one host alias."""
    timestamp: datetime
    host: str
    sections: List[SectionResult] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=lambda: {
        'ok': 0,
        'warnings': 0,
        'failed': 0
    })
    remote_exit_code: Optional[int] = None
    duration_ms: Optional[float] = None


def ok(text: str) -> ReportLine:
    return ReportLine(text, CheckStatus.OK)


def warn(text: str) -> ReportLine:
    return ReportLine(text, CheckStatus.WARN)


def fail(text: str) -> ReportLine:
    return ReportLine(text, CheckStatus.FAIL)


def indented(text: str) -> List[ReportLine]:
    """Tool output as info lines, indented by two spaces."""
    return [ReportLine(f"  {line}") for line in text.splitlines()]


def plain(lines: List[str]) -> List[ReportLine]:
    return [ReportLine(line) for line in lines]


def tool_messages(result: CommandResult) -> List[ReportLine]:
    """What a tool said on stderr, or why it could not run at all."""
    return indented(result.error or result.stderr)


class DiagnosticRunner:
    """
    Runs the local checklist, then the remote session, for one host alias.

    Every check is attempted exactly once and independently; a check that
    fails, or even raises, only affects its own section.
    """

    def __init__(
        self,
        config: Config,
        runner: Optional[CommandRunner] = None,
        uid: Optional[int] = None
    ):
        self.config = config
        self.runner = runner or CommandRunner(timeout=config.command_timeout)
        self.uid = os.getuid() if uid is None else uid

        self._ssh = SSHProbe(
            self.runner,
            ssh_binary=config.ssh_binary,
            control_check_timeout=config.control_check_timeout
        )
        self._gpg = GPGProbe(
            self.runner,
            gpg_binary=config.gpg_binary,
            gpg_agent_binary=config.gpg_agent_binary,
            gpgconf_binary=config.gpgconf_binary,
            gpg_connect_agent_binary=config.gpg_connect_agent_binary,
            pgrep_binary=config.pgrep_binary
        )
        self._remote = RemoteScriptBuilder(config)

        # `ssh -G` output is shared by the first two sections
        self._ssh_config_cache: Dict[str, CommandResult] = {}

    @property
    def socket_dir(self):
        return self.config.socket_dir(self.uid)

    def local_checks(self) -> List[Check]:
        """Ordered local checklist."""
        return [
            Check("SSH CONFIG (effective, post-merge)", self._check_ssh_config),
            Check("SSH CONFIG — relevant options", self._check_ssh_relevant),
            Check("LOCAL: gpg + agent versions", self._check_versions),
            Check("LOCAL: gpg-agent runtime directories", self._check_runtime_dirs),
            Check("LOCAL: expected socket directory", self._check_socket_dir),
            Check("LOCAL: socket presence + permissions", self._check_sockets),
            Check("LOCAL: gpg-agent processes", self._check_processes),
            Check("LOCAL: agent sanity check", self._check_agent),
            Check("SSH: testing control connection (no shell)", self._check_control),
        ]

    def run_diagnostics(
        self,
        host: str,
        section_start_callback: Optional[Callable[[str], None]] = None,
        section_callback: Optional[Callable[[SectionResult], None]] = None
    ) -> DiagnosticReport:
        """
        Run the complete checklist.

        Args:
            host: SSH host alias
            section_start_callback: Callback(title) before each section runs
            section_callback: Callback(section) after each section completes

        Returns:
            DiagnosticReport with all local results and the remote exit code
        """
        start_time = datetime.now()
        report = DiagnosticReport(timestamp=start_time, host=host)
        self._ssh_config_cache.clear()

        for check in self.local_checks():
            if section_start_callback:
                section_start_callback(check.title)

            logger.info(f"Running check: {check.title}")
            section = self._run_check(check, host)
            self._record(report, section)

            if section_callback:
                section_callback(section)

        if section_start_callback:
            section_start_callback(REMOTE_SECTION)
        section = self._run_remote(host, report)
        self._record(report, section)
        if section_callback:
            section_callback(section)

        end_time = datetime.now()
        report.duration_ms = (end_time - start_time).total_seconds() * 1000

        logger.info(
            f"Diagnostics complete for {host}: {report.summary['ok']} ok, "
            f"{report.summary['warnings']} warnings, {report.summary['failed']} failed"
        )
        return report

    def _run_check(self, check: Check, host: str) -> SectionResult:
        start = time.perf_counter()
        try:
            lines = check.func(host)
        except Exception as e:
            logger.error(f"Check error ({check.title}): {e}")
            lines = [fail(f"{check.title} check error: {e}")]
        return SectionResult(
            title=check.title,
            lines=lines,
            duration_ms=(time.perf_counter() - start) * 1000
        )

    @staticmethod
    def _record(report: DiagnosticReport, section: SectionResult) -> None:
        report.sections.append(section)
        report.summary['ok'] += section.count(CheckStatus.OK)
        report.summary['warnings'] += section.count(CheckStatus.WARN)
        report.summary['failed'] += section.count(CheckStatus.FAIL)

    # ------------------------------------------------------------------
    # Local checks
    # ------------------------------------------------------------------

    def _ssh_config(self, host: str) -> CommandResult:
        if host not in self._ssh_config_cache:
            self._ssh_config_cache[host] = self._ssh.effective_config(host)
        return self._ssh_config_cache[host]

    def _check_ssh_config(self, host: str) -> List[ReportLine]:
        result = self._ssh_config(host)
        if not result.ok:
            reason = result.error or result.stderr.strip() or f"exit code {result.returncode}"
            return [fail(f"ssh -G failed: {reason}")]
        return indented(result.stdout)

    def _check_ssh_relevant(self, host: str) -> List[ReportLine]:
        result = self._ssh_config(host)
        matches = SSHProbe.filter_options(result.stdout, self.config.relevant_ssh_options)
        if not matches:
            return [warn("No relevant options found")]
        return plain(matches)

    def _check_versions(self, host: str) -> List[ReportLine]:
        lines: List[ReportLine] = []

        gpg = self._gpg.version(self.config.gpg_binary)
        if gpg is not None and gpg.ok:
            lines.extend(plain(gpg.head(3)))
        else:
            lines.append(fail("gpg not installed"))

        agent = self._gpg.version(self.config.gpg_agent_binary)
        if agent is not None and agent.ok:
            lines.extend(plain(agent.head(2)))
        else:
            lines.append(warn("gpg-agent binary not found"))

        return lines

    def _check_runtime_dirs(self, host: str) -> List[ReportLine]:
        result = self._gpg.list_dirs()
        if not result.ok:
            return tool_messages(result) + [warn("gpgconf --list-dirs unavailable")]
        return indented(result.stdout)

    def _check_socket_dir(self, host: str) -> List[ReportLine]:
        lines = [ReportLine(f"Path: {self.socket_dir}")]
        if self.socket_dir.is_dir():
            lines.append(ok("Directory exists"))
        else:
            lines.append(fail("Directory missing"))
        return lines

    def _check_sockets(self, host: str) -> List[ReportLine]:
        lines: List[ReportLine] = []

        listing = GPGProbe.list_directory(self.socket_dir)
        if listing.error:
            lines.append(fail("Cannot list socket dir"))
        else:
            lines.extend(plain(listing.lines))

        for name in self.config.expected_sockets:
            status = GPGProbe.socket_status(self.socket_dir, name)
            if status.is_socket:
                lines.append(ok(f"{name} exists (socket)"))
            else:
                lines.append(warn(f"{name} missing"))

        return lines

    def _check_processes(self, host: str) -> List[ReportLine]:
        result = self._gpg.agent_processes()
        if result.ok and result.stdout.strip():
            return plain(result.stdout.splitlines())
        return [warn("No gpg-agent process found")]

    def _check_agent(self, host: str) -> List[ReportLine]:
        result = self._gpg.ping_agent()
        lines = plain(result.stdout.splitlines()) + tool_messages(result)
        if result.ok:
            lines.append(ok("Local gpg-agent responds"))
        else:
            lines.append(fail("Local gpg-agent not responding"))
        return lines

    def _check_control(self, host: str) -> List[ReportLine]:
        result = self._ssh.control_connection(host)
        if result.ok:
            return [ok("Existing SSH control connection")]
        return [warn("No existing control connection")]

    # ------------------------------------------------------------------
    # Remote session
    # ------------------------------------------------------------------

    def remote_script(self) -> str:
        """Bash checklist sent to the remote host."""
        return self._remote.build()

    def _run_remote(self, host: str, report: DiagnosticReport) -> SectionResult:
        start = time.perf_counter()
        section = SectionResult(title=REMOTE_SECTION)

        try:
            result = self._ssh.open_session(host, self.remote_script())
        except Exception as e:
            logger.error(f"Remote session error: {e}")
            section.lines.append(fail(f"Remote session error: {e}"))
        else:
            report.remote_exit_code = result.returncode
            if result.error:
                section.lines.append(fail(f"Remote session could not start: {result.error}"))
            elif result.returncode != 0:
                section.lines.append(warn(f"Remote session ended with exit code {result.returncode}"))

        section.duration_ms = (time.perf_counter() - start) * 1000
        return section
