#!/usr/bin/env python3
"""
Build script for the GPG Forwarding Debug Tool.

This script packages the tool as a standalone console executable using
PyInstaller, so it can be copied to machines without a Python setup.

Usage:
    python build.py              # Build for current platform
    python build.py --clean      # Clean build artifacts first
    python build.py --clean-only # Only clean
"""

import subprocess
import sys
import shutil
import platform
from pathlib import Path

# Build configuration
APP_NAME = "gpgfwd-debug"
SCRIPT_PATH = "gpgfwd/main.py"


# Read version from package
def get_version(init_path: Path = Path("gpgfwd/__init__.py")) -> str:
    """Read version from gpgfwd/__init__.py."""
    if init_path.exists():
        content = init_path.read_text(encoding="utf-8")
        for line in content.splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"\'')
    return "0.0.0"


VERSION = get_version()

IS_MACOS = platform.system() == "Darwin"


def get_pyinstaller_opts():
    """Get PyInstaller options for current platform."""
    opts = [
        "--name", APP_NAME,
        "--onefile",           # Single executable
        "--console",           # Terminal tool; the remote session needs the TTY
        "--clean",             # Clean build cache
        "--noconfirm",         # Overwrite without asking

        # rich pulls some modules in lazily
        "--collect-submodules", "rich",
    ]

    if IS_MACOS:
        opts.extend([
            "--osx-bundle-identifier", "dev.gpgfwd.debug",
        ])

    return opts


def clean(root: Path = Path(".")):
    """Clean build artifacts."""
    for dir_name in ["build", "dist"]:
        dir_path = root / dir_name
        if dir_path.exists():
            print(f"Removing {dir_path}...")
            shutil.rmtree(dir_path)

    for file_path in root.glob("*.spec"):
        print(f"Removing {file_path}...")
        file_path.unlink()

    for pycache in root.rglob("__pycache__"):
        print(f"Removing {pycache}...")
        shutil.rmtree(pycache, ignore_errors=True)


def build():
    """Build the executable."""
    print(f"Building {APP_NAME} v{VERSION} for {platform.system()}...")

    # Use sys.executable so PyInstaller comes from the running environment
    cmd = [sys.executable, "-m", "PyInstaller"] + get_pyinstaller_opts()
    cmd.append(SCRIPT_PATH)

    print(f"\nRunning: {' '.join(cmd)}\n")

    result = subprocess.run(cmd)

    if result.returncode == 0:
        print("\n" + "=" * 50)
        print("BUILD SUCCESSFUL!")
        print("=" * 50)

        dist_path = Path("dist")
        if dist_path.exists():
            executables = list(dist_path.glob("*"))
            if executables:
                print(f"\nOutput location: {executables[0].absolute()}")
                print(f"Usage: {executables[0].name} <ssh-host-alias>")
    else:
        print("\n" + "=" * 50)
        print("BUILD FAILED!")
        print("=" * 50)
        sys.exit(1)


def main(argv=None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    print(f"Platform: {platform.system()} ({platform.machine()})")

    if "--clean" in argv or "--clean-only" in argv:
        clean()

    if "--clean-only" not in argv:
        build()


if __name__ == "__main__":
    main()
