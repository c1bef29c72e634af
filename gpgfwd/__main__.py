"""
Module entry point:
    python -m gpgfwd <ssh-host-alias>
"""

from .cli import main

if __name__ == "__main__":
    main(prog_name="gpgfwd-debug")
