"""
Error kinds raised by the Luau build orchestrator.

Every error is fatal: the build stops at the first one and no manifest is
returned.
"""

from pathlib import Path
from typing import List, Optional


class BuildError(Exception):
    """Base class for all build failures."""


class MissingConfiguration(BuildError):
    """A required setting (target, host, output location) was never provided."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} not set")


class InvalidConfiguration(BuildError):
    """A setting holds a value the build cannot use."""


class UnsupportedPlatformFeature(BuildError):
    """An optional component was requested on a target that cannot build it."""

    def __init__(self, component: str, target: str):
        self.component = component
        self.target = target
        super().__init__(f"{component} is not supported on target {target}")


class CompilationFailure(BuildError):
    """The toolchain failed while building a component."""

    def __init__(self, component: str, diagnostic: str):
        self.component = component
        self.diagnostic = diagnostic
        super().__init__(f"failed to build {component}:\n{diagnostic}")


class FilesystemFailure(BuildError):
    """Output directory, source listing or header copy failed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(f"{message}: {path}" if path is not None else message)


class CommandFailed(Exception):
    """An external command exited with a non-zero status or could not be found."""

    def __init__(self, cmd: List[str], exit_code: int, stderr: str = ""):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"{cmd[0]} exited with code {exit_code}")
