"""Remote checklist executed inside the interactive SSH session."""

import shlex
from dataclasses import dataclass
from typing import List

from ..utils import Config

# Helpers shared by every remote section; same output format as the local side
PRELUDE = """\
set -uo pipefail

hr() { printf '\\n%s\\n' "================================================="; }
sec() { printf '\\n---- %s ----\\n' "$1"; }
ok() { echo "✔ $*"; }
warn() { echo "⚠ $*"; }
fail() { echo "✗ $*"; }
"""


@dataclass
class RemoteCheck:
    """One remote section: header title plus the bash that runs it."""
    title: str
    body: str


class RemoteScriptBuilder:
    """
    Builds the self-contained bash procedure sent to the remote host.

    The script runs without `set -e` so a failing check never stops the
    ones after it.
    """

    def __init__(self, config: Config):
        self.config = config

    def socket_dir_expr(self) -> str:
        """Socket directory as a bash expression using the remote $UID."""
        return self.config.socket_dir_template.replace("{uid}", "$UID")

    def checks(self) -> List[RemoteCheck]:
        """Ordered remote checklist."""
        sockets = " ".join(shlex.quote(s) for s in self.config.expected_sockets)
        out_file = shlex.quote(self.config.sign_test_stdout)
        err_file = shlex.quote(self.config.sign_test_stderr)
        sign_input = shlex.quote(self.config.sign_test_input)

        return [
            RemoteCheck(
                "REMOTE: environment (GPG / SSH)",
                "env | grep -E 'GPG|SSH' || echo \"<none>\"",
            ),
            RemoteCheck(
                "REMOTE: GPG_TTY",
                'echo "tty: $(tty)"\n'
                'if [[ -n "${GPG_TTY:-}" ]]; then\n'
                '  ok "GPG_TTY=$GPG_TTY"\n'
                'else\n'
                '  warn "GPG_TTY is NOT set (pinentry will fail)"\n'
                'fi',
            ),
            RemoteCheck(
                "REMOTE: socket directory",
                'if [[ -d "$SOCKET_DIR" ]]; then\n'
                '  ok "Socket dir exists"\n'
                'else\n'
                '  fail "Socket dir missing"\n'
                'fi\n'
                '\n'
                'ls -l "$SOCKET_DIR" || true',
            ),
            RemoteCheck(
                "REMOTE: forwarded socket verification",
                f'for s in {sockets}; do\n'
                '  if [[ -S "$SOCKET_DIR/$s" ]]; then\n'
                '    ok "$s present (forwarded)"\n'
                '  else\n'
                '    warn "$s missing"\n'
                '  fi\n'
                'done',
            ),
            RemoteCheck(
                "REMOTE: listening UNIX sockets (ssh)",
                'ss -lx | grep gpg-agent || warn "No gpg-agent sockets visible via ss"',
            ),
            RemoteCheck(
                "REMOTE: gpg-agent processes (should be NONE)",
                'if pgrep -a gpg-agent; then\n'
                '  warn "Remote gpg-agent RUNNING (conflict)"\n'
                'else\n'
                '  ok "No remote gpg-agent"\n'
                'fi',
            ),
            RemoteCheck(
                "REMOTE: gpgconf socket paths",
                "gpgconf --list-dirs | sed 's/^/  /'",
            ),
            RemoteCheck(
                "REMOTE: gpg-connect-agent (verbose)",
                'if GPG_AGENT_INFO= gpg-connect-agent -v /bye; then\n'
                '  ok "gpg-connect-agent succeeded"\n'
                'else\n'
                '  fail "gpg-connect-agent failed"\n'
                'fi',
            ),
            RemoteCheck(
                "REMOTE: test signing (very verbose)",
                f'if echo {sign_input} | gpg \\\n'
                '  --verbose \\\n'
                '  --debug-level guru \\\n'
                f'  --clearsign >{out_file} 2>{err_file}; then\n'
                '  ok "Signing succeeded"\n'
                'else\n'
                '  warn "Signing failed"\n'
                'fi\n'
                '\n'
                'echo\n'
                'echo "--- gpg stdout ---"\n'
                f"sed 's/^/  /' {out_file} || true\n"
                '\n'
                'echo\n'
                'echo "--- gpg stderr ---"\n'
                f"sed 's/^/  /' {err_file} || true",
            ),
        ]

    def build(self) -> str:
        """Full script text, fed to `bash` on stdin."""
        parts = [
            PRELUDE,
            f'SOCKET_DIR="{self.socket_dir_expr()}"',
            "",
            "hr",
            'echo "REMOTE SESSION"',
            "hostname",
            "whoami",
            "hr",
        ]
        for check in self.checks():
            parts.append("")
            parts.append(f"sec {shlex.quote(check.title)}")
            parts.append("")
            parts.append(check.body)
        parts.extend([
            "",
            "hr",
            'echo "REMOTE TEST COMPLETE"',
            "hr",
            # the forced TTY keeps bash interactive; leave explicitly
            "exit",
            "",
        ])
        return "\n".join(parts)
