#!/usr/bin/env python3
"""
Build orchestration for the Luau static libraries.

build() is the single entry point: it takes a finalized configuration and
either returns an ArtifactManifest or raises a BuildError. Every invocation
is a full rebuild into a freshly cleared output location.
"""

import shutil
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from rich.table import Table

from .config import BuildConfiguration
from .components import (
    COMMON_INCLUDE_DIR,
    LUAU_COMPONENTS,
    Component,
    include_dirs_for,
    manifest_order,
    plan_components,
    validate_components,
)
from .errors import FilesystemFailure, InvalidConfiguration
from .manifest import ArtifactManifest, derive_version
from .runtime import resolve_runtime_library
from .sources import list_component_sources
from .toolchain import SOURCE_EXT, CompiledArtifact, Toolchain
from .utils import console


# =============================================================================
# Output Location
# =============================================================================


def check_output_location(out_dir: Path, source_dir: Path) -> None:
    """
    Refuse an output location that is, or contains, the source tree.

    The output location is removed wholesale on every build.
    """
    out = Path(out_dir).resolve()
    src = Path(source_dir).resolve()
    if src == out or out in src.parents:
        raise InvalidConfiguration(
            f"output location {out} contains the source tree {src}"
        )


def prepare_output_location(out_dir: Path) -> Tuple[Path, Path]:
    """
    Remove everything under out_dir and recreate lib/ and include/.

    Safe to call repeatedly; the result is always an empty layout.

    Returns:
        (lib_dir, include_dir)
    """
    out_dir = Path(out_dir)
    lib_dir = out_dir / "lib"
    include_dir = out_dir / "include"
    try:
        if out_dir.exists():
            shutil.rmtree(out_dir)
        lib_dir.mkdir(parents=True)
        include_dir.mkdir(parents=True)
    except OSError as e:
        raise FilesystemFailure(f"cannot reset output location ({e.strerror})", out_dir) from e
    return lib_dir, include_dir


def export_headers(
    components: Sequence[Component],
    source_dir: Path,
    include_dir: Path,
) -> List[Path]:
    """
    Copy the public headers of the built components into include_dir.

    Each header is looked up in the component's include directories in order
    and keeps its relative path (Luau/Require.h lands in include/Luau/).
    """
    copied = []
    for component in components:
        for header in component.public_headers:
            candidates = [source_dir / rel / header for rel in component.include_dirs]
            src = next((c for c in candidates if c.is_file()), None)
            if src is None:
                raise FilesystemFailure(
                    f"public header {header} of {component.name} not found",
                    candidates[0] if candidates else source_dir,
                )
            dest = include_dir / header
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(src, dest)
            except OSError as e:
                raise FilesystemFailure(f"cannot copy header ({e.strerror})", src) from e
            copied.append(dest)
    return copied


# =============================================================================
# Build
# =============================================================================


def current_version() -> str:
    from . import __version__

    return __version__


def build(
    config: BuildConfiguration,
    components: Optional[Sequence[Component]] = None,
    runner: Optional[Callable] = None,
    package_version: Optional[str] = None,
) -> ArtifactManifest:
    """
    Build every selected component and assemble the artifact manifest.

    Args:
        config: Finalized configuration
        components: Component table (defaults to the Luau table)
        runner: Command runner handed to the Toolchain (utils.run_command)
        package_version: Version string the derived Luau version comes from

    Raises:
        BuildError: on the first failure; nothing is returned in that case
    """
    components = tuple(LUAU_COMPONENTS if components is None else components)

    # everything that can be rejected is rejected before the output is touched
    validate_components(components)
    selected = plan_components(config, components)
    check_output_location(config.out_dir, config.source_dir)

    toolchain = Toolchain(config, runner=runner)
    if runner is None:
        toolchain.check_tools()

    console.print(f"[bold cyan]Building Luau for {config.target}[/] ({config.profile})")

    lib_dir, include_dir = prepare_output_location(config.out_dir)

    artifacts: List[CompiledArtifact] = []
    for component in selected:
        sources = list_component_sources(
            [config.source_dir / rel for rel in component.source_dirs], SOURCE_EXT
        )
        include_dirs = include_dirs_for(
            component, components, config.source_dir, COMMON_INCLUDE_DIR
        )
        artifacts.append(
            toolchain.compile(
                component,
                sources,
                include_dirs,
                lib_dir,
                config.obj_dir / component.lib_name,
            )
        )

    export_headers(selected, config.source_dir, include_dir)

    ordered = manifest_order(selected)
    version = package_version if package_version is not None else current_version()
    manifest = ArtifactManifest(
        lib_dir=lib_dir,
        include_dir=include_dir,
        libs=tuple(c.lib_name for c in ordered),
        runtime_library=resolve_runtime_library(config.target, config.host),
        version=derive_version(version),
    )

    console.print(f"[green]Built {len(artifacts)} libraries into {lib_dir}[/]")
    return manifest


# =============================================================================
# Info
# =============================================================================


def describe(config: BuildConfiguration, components: Optional[Sequence[Component]] = None) -> Table:
    """Table of the build plan for a configuration (used by --info)."""
    components = tuple(LUAU_COMPONENTS if components is None else components)
    selected = {c.name for c in plan_components(config, components)}

    table = Table(title=f"Luau build plan ({config.target})")
    table.add_column("Component")
    table.add_column("Library")
    table.add_column("Depends on")
    table.add_column("Status")
    for component in components:
        deps = ", ".join(
            f"{d.name} (internals)" if d.internals else d.name for d in component.depends_on
        )
        status = "[green]build[/]" if component.name in selected else "[yellow]skipped[/]"
        table.add_row(component.name, component.lib_name, deps or "-", status)
    return table
