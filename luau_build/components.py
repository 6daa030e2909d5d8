#!/usr/bin/env python3
"""
Component table for the Luau native library.

Each entry describes one static library: where its sources and headers live
(relative to the Luau source tree), which other components' headers it
compiles against, the defines it needs and whether it is always built or
gated behind a toggle.

Table order is the order libraries are reported to the linker. Compiling a
component only needs the headers of its dependencies, which live in the
source tree, so the physical compile order has no effect on correctness.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .errors import InvalidConfiguration, UnsupportedPlatformFeature

########################################################################
# Model
########################################################################

GATE_ALWAYS = "always"
GATE_CODEGEN = "codegen"

COMMON_INCLUDE_DIR = "Common/include"

C_LINKAGE = 'extern "C"'

# llvm emits bytecode for the codegen module, which wasm toolchains cannot build
CODEGEN_UNSUPPORTED = ("emscripten", "wasm32", "wasm64")


class Dependency(NamedTuple):
    name: str
    # also expose the dependency's private headers (its src/ directory)
    internals: bool = False


@dataclass(frozen=True)
class Component:
    name: str
    lib_name: str
    source_dirs: Tuple[str, ...]
    include_dirs: Tuple[str, ...] = ()
    internal_include_dirs: Tuple[str, ...] = ()
    depends_on: Tuple[Dependency, ...] = ()
    defines: Tuple[Tuple[str, Optional[str]], ...] = ()
    gate: str = GATE_ALWAYS
    # headers copied to <out>/include, relative to one of include_dirs
    public_headers: Tuple[str, ...] = ()

    @property
    def optional(self) -> bool:
        return self.gate != GATE_ALWAYS


########################################################################
# Luau Components
########################################################################

LUAU_COMPONENTS: Tuple[Component, ...] = (
    Component(
        name="ast",
        lib_name="luauast",
        source_dirs=("Ast/src",),
        include_dirs=("Ast/include",),
    ),
    Component(
        name="common",
        lib_name="luaucommon",
        source_dirs=("Common/src",),
        include_dirs=("Common/include",),
    ),
    Component(
        name="compiler",
        lib_name="luaucompiler",
        source_dirs=("Compiler/src",),
        include_dirs=("Compiler/include",),
        depends_on=(Dependency("ast"),),
        defines=(("LUACODE_API", C_LINKAGE),),
        public_headers=("luacode.h",),
    ),
    Component(
        name="codegen",
        lib_name="luaucodegen",
        source_dirs=("CodeGen/src",),
        include_dirs=("CodeGen/include",),
        # Code generator uses lua VM internals, so it needs the same defines used to build VM
        depends_on=(Dependency("vm", internals=True),),
        defines=(("LUACODEGEN_API", C_LINKAGE), ("LUA_API", C_LINKAGE)),
        gate=GATE_CODEGEN,
        public_headers=("luacodegen.h",),
    ),
    Component(
        name="config",
        lib_name="luauconfig",
        source_dirs=("Config/src",),
        include_dirs=("Config/include",),
        depends_on=(Dependency("ast"), Dependency("compiler"), Dependency("vm")),
        defines=(("LUA_API", C_LINKAGE),),
    ),
    Component(
        name="custom",
        lib_name="luaucustom",
        source_dirs=("Custom/src",),
        depends_on=(Dependency("vm", internals=True),),
        defines=(("LUA_API", C_LINKAGE),),
    ),
    Component(
        name="require",
        lib_name="luaurequire",
        source_dirs=("Require/Navigator/src", "Require/Runtime/src"),
        include_dirs=("Require/Navigator/include", "Require/Runtime/include"),
        depends_on=(Dependency("ast"), Dependency("config"), Dependency("vm")),
        defines=(("LUA_API", C_LINKAGE),),
        public_headers=("Luau/Require.h",),
    ),
    Component(
        name="vm",
        lib_name="luauvm",
        source_dirs=("VM/src",),
        include_dirs=("VM/include",),
        internal_include_dirs=("VM/src",),
        defines=(("LUA_API", C_LINKAGE),),
        public_headers=("lua.h", "luaconf.h", "lualib.h"),
    ),
)


########################################################################
# Table Checks
########################################################################


def _by_name(components: Iterable[Component]) -> Dict[str, Component]:
    return {c.name: c for c in components}


def validate_components(components: Sequence[Component]) -> None:
    """
    Check that the dependency edges of a component table are well formed.

    Raises:
        InvalidConfiguration: duplicate names, unknown or self dependencies,
            or a dependency cycle
    """
    index: Dict[str, Component] = {}
    for component in components:
        if component.name in index:
            raise InvalidConfiguration(f"duplicate component: {component.name}")
        index[component.name] = component

    for component in components:
        for dep in component.depends_on:
            if dep.name == component.name:
                raise InvalidConfiguration(f"{component.name} depends on itself")
            if dep.name not in index:
                raise InvalidConfiguration(
                    f"{component.name} depends on unknown component {dep.name}"
                )

    # depth-first search, grey/black marking
    state: Dict[str, int] = {}

    def visit(name: str, trail: List[str]) -> None:
        if state.get(name) == 2:
            return
        if state.get(name) == 1:
            cycle = " -> ".join(trail[trail.index(name):] + [name])
            raise InvalidConfiguration(f"dependency cycle: {cycle}")
        state[name] = 1
        for dep in index[name].depends_on:
            visit(dep.name, trail + [name])
        state[name] = 2

    for component in components:
        visit(component.name, [])


def codegen_supported(target: str) -> bool:
    return not any(marker in target for marker in CODEGEN_UNSUPPORTED)


def plan_components(config, components: Sequence[Component]) -> Tuple[Component, ...]:
    """
    Select the components a configuration builds, in table order.

    Gated components are skipped when their toggle is off. Requesting the code
    generator on a target that cannot build it is an error rather than a
    silent downgrade.
    """
    selected = []
    for component in components:
        if component.gate == GATE_CODEGEN:
            if not config.enable_codegen:
                continue
            if not codegen_supported(config.target):
                raise UnsupportedPlatformFeature(component.name, config.target)
        elif component.gate != GATE_ALWAYS:
            raise InvalidConfiguration(
                f"{component.name} has unknown gate {component.gate!r}"
            )
        selected.append(component)
    return tuple(selected)


def manifest_order(built: Sequence[Component]) -> List[Component]:
    """Always-built components in table order, gated ones appended last."""
    return [c for c in built if not c.optional] + [c for c in built if c.optional]


def include_dirs_for(
    component: Component,
    components: Sequence[Component],
    source_dir: Path,
    common_include: Optional[str] = COMMON_INCLUDE_DIR,
) -> List[Path]:
    """
    Include search path for a component.

    Own include directories first, then every dependency's include
    directories (plus its private headers when the edge asks for internals),
    then the shared common include directory. Duplicates are dropped.
    """
    index = _by_name(components)
    relative: List[str] = list(component.include_dirs)
    for dep in component.depends_on:
        target = index[dep.name]
        relative.extend(target.include_dirs)
        if dep.internals:
            relative.extend(target.internal_include_dirs)
    if common_include:
        relative.append(common_include)

    paths: List[Path] = []
    for rel in relative:
        path = source_dir / rel
        if path not in paths:
            paths.append(path)
    return paths
