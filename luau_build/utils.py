#!/usr/bin/env python3
"""
Console and command helpers for the Luau build orchestrator.

Progress goes to stderr through a shared rich console so that stdout carries
nothing but the emitted link metadata.
"""

import os
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Optional

import sh
from rich.console import Console

from .errors import CommandFailed

console = Console(stderr=True, markup=True, highlight=False)


def set_quiet(quiet: bool) -> None:
    """Silence (or restore) progress output on the shared console."""
    console.quiet = quiet


def command_exists(cmd: str) -> bool:
    """Check whether a command/binary is available on the system."""
    if "/" in cmd or "\\" in cmd:
        cmd_path = Path(cmd)
        return cmd_path.exists() and os.access(cmd_path, os.X_OK)
    return shutil.which(cmd) is not None


def format_command(cmd: Iterable) -> str:
    return " ".join(str(part) for part in cmd)


def run_command(
    cmd: list,
    description: str = "",
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Execute a command and wait for it.

    Args:
        cmd: Command to execute (program followed by its arguments)
        description: Short description printed before running
        cwd: Working directory for command execution
        env: Full environment for the child process (inherits ours if None)

    Raises:
        CommandFailed: If the program is missing or exits non-zero. The
            child's stderr is kept verbatim on the exception.
    """
    if not cmd:
        raise ValueError("empty command")

    console.print(f"[dim]{description or format_command(cmd)}[/]")

    program = str(cmd[0])
    args = [str(arg) for arg in cmd[1:]]

    kwargs = {}
    if cwd:
        kwargs["_cwd"] = str(cwd)
    if env is not None:
        kwargs["_env"] = dict(env)

    try:
        sh.Command(program)(*args, **kwargs)
    except sh.CommandNotFound:
        raise CommandFailed(
            [program, *args], 127, f"command not found: {program}"
        ) from None
    except sh.ErrorReturnCode as e:
        stderr = e.stderr.decode("utf-8", "replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
        if not stderr:
            # MSVC tools report diagnostics on stdout
            stderr = e.stdout.decode("utf-8", "replace") if isinstance(e.stdout, bytes) else (e.stdout or "")
        raise CommandFailed([program, *args], e.exit_code, stderr) from None
