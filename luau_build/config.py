#!/usr/bin/env python3
"""
Configuration module for the Luau build orchestrator.

Settings are collected through chained setters on BuildConfig and turned into
an immutable BuildConfiguration by finalize(). finalize() is the only place
where the process environment supplies defaults; everything downstream works
from the finalized value.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import InvalidConfiguration, MissingConfiguration
from .runtime import env_override


########################################################################
# Defaults
########################################################################

PACKAGE_DIR = Path(__file__).parent.resolve()
DEFAULT_SOURCE_DIR = PACKAGE_DIR.parent / "luau"

# Max number of Lua stack slots that a C function can use
DEFAULT_MAX_CSTACK_SIZE = 100000
DEFAULT_VECTOR_SIZE = 3
VECTOR_SIZES = (3, 4)

EXCEPTIONS_UNWIND = "unwind"
EXCEPTIONS_LONGJMP = "longjmp"
EXCEPTION_STRATEGIES = (EXCEPTIONS_UNWIND, EXCEPTIONS_LONGJMP)

PROFILE_RELEASE = "release"
PROFILE_DEBUG = "debug"
PROFILES = (PROFILE_RELEASE, PROFILE_DEBUG)

OUT_SUBDIR = "luau-build"


########################################################################
# Toolchain Selection
########################################################################


def default_tools(target: str):
    """Compiler and archiver used when no CXX/AR override is set."""
    if "msvc" in target:
        return "cl.exe", "lib.exe"
    if "emscripten" in target:
        return "em++", "emar"
    return "c++", "ar"


def resolve_tool(var: str, default: str, target: str, host: str,
                 environ: Mapping[str, str]) -> str:
    return env_override(var, target, host, environ) or default


########################################################################
# Finalized Configuration
########################################################################


@dataclass(frozen=True)
class BuildConfiguration:
    target: str
    host: str
    out_dir: Path
    source_dir: Path
    max_cstack_size: int = DEFAULT_MAX_CSTACK_SIZE
    exceptions: str = EXCEPTIONS_UNWIND
    enable_codegen: bool = False
    vector_size: int = DEFAULT_VECTOR_SIZE
    profile: str = PROFILE_RELEASE
    cxx: str = "c++"
    ar: str = "ar"
    jobs: int = 1

    @property
    def is_msvc(self) -> bool:
        return "msvc" in self.target

    @property
    def use_longjmp(self) -> bool:
        return self.exceptions == EXCEPTIONS_LONGJMP

    @property
    def is_release(self) -> bool:
        return self.profile == PROFILE_RELEASE

    @property
    def lib_dir(self) -> Path:
        return self.out_dir / "lib"

    @property
    def include_dir(self) -> Path:
        return self.out_dir / "include"

    @property
    def obj_dir(self) -> Path:
        return self.out_dir / "obj"


########################################################################
# Builder
########################################################################


class BuildConfig:
    """
    Chained-setter builder for a BuildConfiguration.

    Example:
        manifest = BuildConfig().enable_codegen(True).set_vector_size(4).build()

    Setters only record values. Nothing is validated and nothing touches the
    filesystem until finalize() (or build()) is called.
    """

    def __init__(self):
        self._target: Optional[str] = None
        self._host: Optional[str] = None
        self._out_dir: Optional[Path] = None
        self._source_dir: Optional[Path] = None
        self._max_cstack_size = DEFAULT_MAX_CSTACK_SIZE
        self._exceptions = EXCEPTIONS_UNWIND
        self._enable_codegen = False
        self._vector_size = DEFAULT_VECTOR_SIZE
        self._profile: Optional[str] = None
        self._jobs: Optional[int] = None

    def target(self, target: str) -> "BuildConfig":
        self._target = target
        return self

    def host(self, host: str) -> "BuildConfig":
        self._host = host
        return self

    def out_dir(self, path) -> "BuildConfig":
        self._out_dir = Path(path)
        return self

    def source_dir(self, path) -> "BuildConfig":
        self._source_dir = Path(path)
        return self

    def set_max_cstack_size(self, size: int) -> "BuildConfig":
        self._max_cstack_size = size
        return self

    def exceptions(self, strategy: str) -> "BuildConfig":
        self._exceptions = strategy
        return self

    def use_longjmp(self, use: bool) -> "BuildConfig":
        """Use longjmp instead of C++ exceptions for error propagation."""
        return self.exceptions(EXCEPTIONS_LONGJMP if use else EXCEPTIONS_UNWIND)

    def enable_codegen(self, enable: bool) -> "BuildConfig":
        self._enable_codegen = enable
        return self

    def set_vector_size(self, size: int) -> "BuildConfig":
        """Vector size, must be 3 (default) or 4. Checked by finalize()."""
        self._vector_size = size
        return self

    def profile(self, profile: str) -> "BuildConfig":
        self._profile = profile
        return self

    def jobs(self, jobs: int) -> "BuildConfig":
        self._jobs = jobs
        return self

    def finalize(self, environ: Optional[Mapping[str, str]] = None) -> BuildConfiguration:
        """
        Validate the collected settings and produce a BuildConfiguration.

        Args:
            environ: Environment used for defaults (os.environ if None)

        Raises:
            MissingConfiguration: target, host or output location is unset
            InvalidConfiguration: a setting is out of range
        """
        if environ is None:
            environ = os.environ

        target = self._target or environ.get("TARGET")
        if not target:
            raise MissingConfiguration("TARGET")
        host = self._host or environ.get("HOST")
        if not host:
            raise MissingConfiguration("HOST")

        out_dir = self._out_dir
        if out_dir is None and environ.get("OUT_DIR"):
            out_dir = Path(environ["OUT_DIR"]) / OUT_SUBDIR
        if out_dir is None:
            raise MissingConfiguration("OUT_DIR")

        if self._vector_size not in VECTOR_SIZES:
            raise InvalidConfiguration(
                f"vector size must be 3 or 4, got {self._vector_size}"
            )
        if not isinstance(self._max_cstack_size, int) or self._max_cstack_size < 1:
            raise InvalidConfiguration(
                f"max C stack size must be a positive integer, got {self._max_cstack_size!r}"
            )
        if self._exceptions not in EXCEPTION_STRATEGIES:
            raise InvalidConfiguration(f"unknown exception strategy: {self._exceptions!r}")

        profile = self._profile or environ.get("PROFILE") or PROFILE_RELEASE
        if profile not in PROFILES:
            raise InvalidConfiguration(f"unknown build profile: {profile!r}")

        jobs = self._jobs
        if jobs is None:
            try:
                jobs = int(environ.get("NUM_JOBS", "1"))
            except ValueError:
                raise InvalidConfiguration(
                    f"NUM_JOBS must be an integer, got {environ['NUM_JOBS']!r}"
                ) from None
        if jobs < 1:
            raise InvalidConfiguration(f"jobs must be at least 1, got {jobs}")

        source_dir = self._source_dir
        if source_dir is None:
            source_dir = Path(environ.get("LUAU_SOURCE_DIR") or DEFAULT_SOURCE_DIR)

        cxx, ar = default_tools(target)
        return BuildConfiguration(
            target=target,
            host=host,
            out_dir=Path(out_dir),
            source_dir=Path(source_dir),
            max_cstack_size=self._max_cstack_size,
            exceptions=self._exceptions,
            enable_codegen=bool(self._enable_codegen),
            vector_size=self._vector_size,
            profile=profile,
            cxx=resolve_tool("CXX", cxx, target, host, environ),
            ar=resolve_tool("AR", ar, target, host, environ),
            jobs=jobs,
        )

    def build(self, components=None, runner=None):
        """Finalize and run a full build. Returns the ArtifactManifest."""
        from .builder import build

        return build(self.finalize(), components=components, runner=runner)
