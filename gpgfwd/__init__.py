"""
gpgfwd - GPG agent forwarding debug tool.

Walks through the local ssh/gpg-agent setup, repeats the checks on the
remote host in one interactive ssh session and tries a real signature
there.

Modules:
    probes: wrappers around ssh, gpg, gpgconf, gpg-connect-agent and pgrep
    diagnostics: local checklist runner, remote script builder, reports
    utils: configuration and logging
"""

__version__ = "1.0.0"
