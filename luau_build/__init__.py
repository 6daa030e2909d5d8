"""
Build orchestrator for the Luau native libraries.

Modules:
- config: Build settings and their finalization
- components: Component table and dependency edges
- sources: Deterministic source enumeration
- runtime: C++ runtime library resolution
- toolchain: Compiling a component into a static library
- manifest: Artifact manifest and link metadata
- builder: Orchestration entry point
"""

__version__ = "0.12.0+luau653"

from .config import (
    BuildConfig,
    BuildConfiguration,
    EXCEPTIONS_LONGJMP,
    EXCEPTIONS_UNWIND,
    PROFILE_DEBUG,
    PROFILE_RELEASE,
)

from .components import (
    Component,
    Dependency,
    GATE_ALWAYS,
    GATE_CODEGEN,
    LUAU_COMPONENTS,
    validate_components,
    plan_components,
)

from .errors import (
    BuildError,
    MissingConfiguration,
    InvalidConfiguration,
    UnsupportedPlatformFeature,
    CompilationFailure,
    FilesystemFailure,
)

from .sources import list_sources
from .runtime import resolve_runtime_library
from .toolchain import CompiledArtifact, Toolchain
from .manifest import ArtifactManifest, derive_version
from .builder import build, prepare_output_location

__all__ = [
    "__version__",
    # config
    "BuildConfig",
    "BuildConfiguration",
    "EXCEPTIONS_LONGJMP",
    "EXCEPTIONS_UNWIND",
    "PROFILE_DEBUG",
    "PROFILE_RELEASE",
    # components
    "Component",
    "Dependency",
    "GATE_ALWAYS",
    "GATE_CODEGEN",
    "LUAU_COMPONENTS",
    "validate_components",
    "plan_components",
    # errors
    "BuildError",
    "MissingConfiguration",
    "InvalidConfiguration",
    "UnsupportedPlatformFeature",
    "CompilationFailure",
    "FilesystemFailure",
    # sources / runtime
    "list_sources",
    "resolve_runtime_library",
    # toolchain / manifest / builder
    "CompiledArtifact",
    "Toolchain",
    "ArtifactManifest",
    "derive_version",
    "build",
    "prepare_output_location",
]
