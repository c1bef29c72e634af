"""Report rendering and export for diagnostics."""

import json
from pathlib import Path
from typing import Optional, List, Dict, Any

from .runner import DiagnosticReport, SectionResult, ReportLine, CheckStatus
from ..utils import get_logger, get_log_buffer

logger = get_logger(__name__)

RULE = "=" * 49

STATUS_GLYPHS = {
    CheckStatus.OK: "✔",
    CheckStatus.WARN: "⚠",
    CheckStatus.FAIL: "✗",
}

GUIDE_TITLE = "FINAL INTERPRETATION GUIDE"

# Static reference text; never derived from the check results
INTERPRETATION_GUIDE = """\
✔ All sockets present + signing works:
  → Forwarding is correct

⚠ Sockets missing remotely:
  → SSH RemoteForward not applied
  → Wrong host alias
  → StreamLocalBindUnlink missing

⚠ gpg-connect-agent fails:
  → Remote gpg-agent running
  → Socket path mismatch
  → Local agent not running

⚠ Signing hangs:
  → Missing GPG_TTY
  → pinentry blocked
  → Wayland/X11 forwarding issue

⚠ Signing fails with 'No secret key':
  → You forwarded wrong socket (need S.gpg-agent, not extra only)"""


def format_line(line: ReportLine) -> str:
    """Prefix a status line with its glyph; info lines are left as-is."""
    glyph = STATUS_GLYPHS.get(line.status)
    return f"{glyph} {line.text}" if glyph else line.text


def _serialize_section(section: SectionResult) -> Dict[str, Any]:
    return {
        'title': section.title,
        'duration_ms': section.duration_ms,
        'lines': [
            {'status': line.status.value, 'text': line.text}
            for line in section.lines
        ],
    }


class ReportGenerator:
    """
    Renders the console transcript and exports saved reports.

    Rendering methods return lists of text lines so the CLI can style
    them; export methods write plain text or JSON.
    """

    def banner(self, host: str) -> List[str]:
        return [
            "",
            RULE,
            "GPG AGENT FORWARDING — VERBOSE DEBUG",
            f"SSH host alias: {host}",
            "",
            RULE,
        ]

    def section_header(self, title: str) -> List[str]:
        return ["", f"---- {title} ----"]

    def section_body(self, section: SectionResult) -> List[str]:
        return [format_line(line) for line in section.lines]

    def guide(self) -> List[str]:
        """Interpretation guide plus the closing banner."""
        return (
            self.section_header(GUIDE_TITLE)
            + INTERPRETATION_GUIDE.splitlines()
            + ["", RULE, "DEBUG FINISHED", "", RULE]
        )

    def to_text(self, report: DiagnosticReport, filepath: Optional[Path] = None) -> str:
        """
        Export the local part of the run as plain text.

        Args:
            report: DiagnosticReport to export
            filepath: Optional file path to save to

        Returns:
            Text string
        """
        lines = self.banner(report.host)
        lines.append(f"Timestamp: {report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")

        for section in report.sections:
            lines.extend(self.section_header(section.title))
            lines.extend(self.section_body(section))

        lines.extend([
            "",
            "-" * 49,
            "SUMMARY",
            "-" * 49,
            f"  OK:       {report.summary['ok']}",
            f"  Warnings: {report.summary['warnings']}",
            f"  Failed:   {report.summary['failed']}",
            f"  Remote session exit code: {_exit_code_text(report.remote_exit_code)}",
        ])
        lines.extend(self.guide())

        text = "\n".join(lines) + "\n"

        if filepath:
            _write(Path(filepath), text)
            logger.info(f"Text report saved to {filepath}")

        return text

    def to_json(self, report: DiagnosticReport, filepath: Optional[Path] = None) -> str:
        """
        Export the local part of the run as JSON, with captured log entries.

        Args:
            report: DiagnosticReport to export
            filepath: Optional file path to save to

        Returns:
            JSON string
        """
        data = {
            'report_version': '1.0',
            'timestamp': report.timestamp.isoformat(),
            'host': report.host,
            'duration_ms': report.duration_ms,
            'summary': report.summary,
            'remote_exit_code': report.remote_exit_code,
            'sections': [_serialize_section(s) for s in report.sections],
            'log': [entry.format() for entry in get_log_buffer().get_entries()],
        }

        json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)

        if filepath:
            _write(Path(filepath), json_str)
            logger.info(f"Report saved to {filepath}")

        return json_str

    def save(self, report: DiagnosticReport, filepath: Path) -> str:
        """Save as JSON for a `.json` path, plain text otherwise."""
        if filepath.suffix.lower() == ".json":
            return self.to_json(report, filepath)
        return self.to_text(report, filepath)


def _exit_code_text(code: Optional[int]) -> str:
    return "n/a" if code is None else str(code)


def _write(filepath: Path, text: str) -> None:
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        f.write(text)
