"""Unit tests for report rendering and export."""

import json
from datetime import datetime

from gpgfwd.diagnostics.reports import (
    INTERPRETATION_GUIDE,
    ReportGenerator,
    format_line,
)
from gpgfwd.diagnostics.runner import (
    CheckStatus,
    DiagnosticReport,
    ReportLine,
    SectionResult,
)

GUIDE_TEXT = """\
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


def sample_report():
    report = DiagnosticReport(timestamp=datetime(2026, 1, 2, 3, 4, 5), host="devbox")
    report.sections.append(SectionResult(
        title="LOCAL: expected socket directory",
        lines=[
            ReportLine("Path: /run/user/1000/gnupg"),
            ReportLine("Directory missing", CheckStatus.FAIL),
        ],
    ))
    report.summary['failed'] = 1
    report.remote_exit_code = 255
    report.duration_ms = 12.5
    return report


class TestRendering:

    def test_format_line_glyphs(self):
        assert format_line(ReportLine("Directory exists", CheckStatus.OK)) == "✔ Directory exists"
        assert format_line(ReportLine("S.scdaemon missing", CheckStatus.WARN)) == "⚠ S.scdaemon missing"
        assert format_line(ReportLine("Directory missing", CheckStatus.FAIL)) == "✗ Directory missing"
        assert format_line(ReportLine("  user alice")) == "  user alice"

    def test_banner(self):
        lines = ReportGenerator().banner("devbox")
        assert "GPG AGENT FORWARDING — VERBOSE DEBUG" in lines
        assert "SSH host alias: devbox" in lines
        assert lines.count("=" * 49) == 2

    def test_section_header(self):
        assert ReportGenerator().section_header("LOCAL: agent sanity check") == [
            "",
            "---- LOCAL: agent sanity check ----",
        ]

    def test_guide_is_verbatim(self):
        assert INTERPRETATION_GUIDE == GUIDE_TEXT
        lines = ReportGenerator().guide()
        assert lines[1] == "---- FINAL INTERPRETATION GUIDE ----"
        assert "\n".join(lines[2:2 + len(GUIDE_TEXT.splitlines())]) == GUIDE_TEXT
        assert lines[-3:] == ["DEBUG FINISHED", "", "=" * 49]

    def test_guide_is_static(self):
        generator = ReportGenerator()
        assert generator.guide() == generator.guide()


class TestExport:

    def test_to_text(self, tmp_path):
        path = tmp_path / "out" / "report.txt"
        text = ReportGenerator().to_text(sample_report(), path)

        assert path.read_text(encoding="utf-8") == text
        assert "---- LOCAL: expected socket directory ----" in text
        assert "✗ Directory missing" in text
        assert "  Failed:   1" in text
        assert "Remote session exit code: 255" in text
        assert GUIDE_TEXT in text

    def test_to_json(self, tmp_path):
        path = tmp_path / "report.json"
        ReportGenerator().to_json(sample_report(), path)
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["host"] == "devbox"
        assert data["remote_exit_code"] == 255
        assert data["summary"]["failed"] == 1
        assert data["sections"][0]["lines"][1] == {"status": "fail", "text": "Directory missing"}
        assert isinstance(data["log"], list)

    def test_save_picks_format_from_suffix(self, tmp_path):
        generator = ReportGenerator()
        generator.save(sample_report(), tmp_path / "r.JSON")
        generator.save(sample_report(), tmp_path / "r.log")

        json.loads((tmp_path / "r.JSON").read_text(encoding="utf-8"))
        assert (tmp_path / "r.log").read_text(encoding="utf-8").lstrip().startswith("=" * 49)
