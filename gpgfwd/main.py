"""
GPG Agent Forwarding Debug Tool

Checks whether gpg-agent socket forwarding over SSH works between this
machine and a remote host.

Usage:
    python -m gpgfwd <ssh-host-alias>

Or run directly (this is also the PyInstaller entry script):
    python gpgfwd/main.py <ssh-host-alias>
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gpgfwd.cli import main


if __name__ == "__main__":
    main(prog_name="gpgfwd-debug")
