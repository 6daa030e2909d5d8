#!/usr/bin/env python3
"""
Luau Build Script

Compiles the Luau native libraries into static libraries and prints the link
metadata for the coordinator that invoked the build.

Usage:
    python build.py --target x86_64-unknown-linux-gnu --host x86_64-unknown-linux-gnu -o build
    python build.py --codegen --format cargo      # target/host/out dir from the environment
    python build.py --info                        # show the build plan
"""

import sys
from pathlib import Path

_ROOT_DIR = Path(__file__).parent.resolve()

# Allow running from a checkout without installing the package
if str(_ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(_ROOT_DIR))

from luau_build.cli import main

if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nBuild interrupted.", file=sys.stderr)
        sys.exit(130)
