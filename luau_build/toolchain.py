#!/usr/bin/env python3
"""
Component compiler.

Turns one component's source set into a static library: every translation
unit is compiled with the same baseline flags plus the component's include
path and defines, and the objects are archived in source order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import BuildConfiguration
from .components import Component
from .errors import CommandFailed, CompilationFailure, FilesystemFailure
from .utils import command_exists, console, run_command

CXX_STD = "c++17"
SOURCE_EXT = "cpp"

# targets that never get position independent code
NO_PIC = ("windows", "wasm32", "wasm64", "emscripten")


@dataclass(frozen=True)
class CompiledArtifact:
    name: str
    lib_dir: Path
    path: Path
    objects: Tuple[Path, ...] = ()


class Toolchain:
    """Builds compile and archive commands for a finalized configuration."""

    def __init__(self, config: BuildConfiguration, runner: Optional[Callable] = None):
        self.config = config
        self.runner = runner or run_command

    # -----------------------------------------------------------------
    # Flags
    # -----------------------------------------------------------------

    def define_flag(self, name: str, value: Optional[str] = None) -> str:
        prefix = "/D" if self.config.is_msvc else "-D"
        return f"{prefix}{name}" if value is None else f"{prefix}{name}={value}"

    def include_flag(self, path: Path) -> str:
        prefix = "/I" if self.config.is_msvc else "-I"
        return f"{prefix}{path}"

    def baseline_defines(self) -> List[Tuple[str, Optional[str]]]:
        config = self.config
        defines: List[Tuple[str, Optional[str]]] = [
            ("LUAI_MAXCSTACK", str(config.max_cstack_size)),
            ("LUA_VECTOR_SIZE", str(config.vector_size)),
        ]
        if config.use_longjmp:
            defines.append(("LUA_USE_LONGJMP", "1"))
        if config.is_release:
            defines.append(("NDEBUG", None))
        else:
            defines.append(("LUAU_ENABLE_ASSERT", "1"))
        return defines

    def baseline_flags(self) -> List[str]:
        """Flags shared by every component of this build."""
        config = self.config
        if config.is_msvc:
            flags = ["/nologo", f"/std:{CXX_STD}", "/W0", "/EHsc"]
            flags += ["/O2"] if config.is_release else ["/Od", "/Zi"]
        else:
            flags = [f"-std={CXX_STD}", "-w"]
            if not any(marker in config.target for marker in NO_PIC):
                flags.append("-fPIC")
            if config.is_release:
                # lets the compiler lower sqrt() into a single CPU instruction
                flags += ["-O2", "-fno-math-errno"]
            else:
                flags += ["-O0", "-g"]
        flags += [self.define_flag(name, value) for name, value in self.baseline_defines()]
        return flags

    # -----------------------------------------------------------------
    # Naming
    # -----------------------------------------------------------------

    def static_lib_filename(self, lib_name: str) -> str:
        if self.config.is_msvc:
            return f"{lib_name}.lib"
        return f"lib{lib_name}.a"

    def object_path(self, obj_dir: Path, index: int, source: Path) -> Path:
        # index keeps equally named files from the merged require sources apart
        suffix = ".obj" if self.config.is_msvc else ".o"
        return obj_dir / f"{index:03d}-{source.stem}{suffix}"

    # -----------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------

    def compile_command(
        self,
        source: Path,
        obj: Path,
        include_dirs: Sequence[Path],
        defines: Sequence[Tuple[str, Optional[str]]] = (),
    ) -> List[str]:
        cmd = [self.config.cxx] + self.baseline_flags()
        cmd += [self.include_flag(path) for path in include_dirs]
        cmd += [self.define_flag(name, value) for name, value in defines]
        if self.config.is_msvc:
            cmd += ["/c", str(source), f"/Fo{obj}"]
        else:
            cmd += ["-c", str(source), "-o", str(obj)]
        return cmd

    def archive_command(self, lib_path: Path, objects: Sequence[Path]) -> List[str]:
        if self.config.is_msvc:
            return [self.config.ar, "/nologo", f"/OUT:{lib_path}"] + [str(o) for o in objects]
        return [self.config.ar, "crs", str(lib_path)] + [str(o) for o in objects]

    # -----------------------------------------------------------------
    # Build
    # -----------------------------------------------------------------

    def check_tools(self) -> None:
        """
        Make sure the compiler and archiver can be found.

        Raises:
            CompilationFailure: a tool is not installed or not on PATH
        """
        for role, tool in (("compiler", self.config.cxx), ("archiver", self.config.ar)):
            if not command_exists(tool):
                raise CompilationFailure("toolchain", f"{role} not found: {tool}")

    def compile(
        self,
        component: Component,
        sources: Sequence[Path],
        include_dirs: Sequence[Path],
        lib_dir: Path,
        obj_dir: Path,
    ) -> CompiledArtifact:
        """
        Compile a component's sources and archive them into a static library.

        Args:
            component: Component being built
            sources: Ordered source files (see sources.list_component_sources)
            include_dirs: Include search path for the component
            lib_dir: Directory receiving the static library
            obj_dir: Scratch directory for this component's object files

        Returns:
            CompiledArtifact describing the produced library

        Raises:
            CompilationFailure: no sources, or the compiler/archiver failed
        """
        if not sources:
            raise CompilationFailure(component.name, f"no .{SOURCE_EXT} sources found")

        try:
            obj_dir.mkdir(parents=True, exist_ok=True)
            lib_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"cannot create build directory ({e.strerror})", obj_dir) from e

        console.print(f"[bold]Compiling {component.lib_name}[/] ({len(sources)} sources)")

        jobs = [
            (source, self.object_path(obj_dir, index, source))
            for index, source in enumerate(sources)
        ]

        def compile_one(job) -> Path:
            source, obj = job
            cmd = self.compile_command(source, obj, include_dirs, component.defines)
            self._run(component, cmd, f"  {source.name}")
            return obj

        if self.config.jobs > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.config.jobs) as pool:
                futures = [pool.submit(compile_one, job) for job in jobs]
                try:
                    objects = [future.result() for future in futures]
                except CompilationFailure:
                    # queued compiles never start once one has failed
                    for future in futures:
                        future.cancel()
                    raise
        else:
            objects = [compile_one(job) for job in jobs]

        lib_path = lib_dir / self.static_lib_filename(component.lib_name)
        self._run(
            component,
            self.archive_command(lib_path, objects),
            f"  Creating static library {lib_path.name}",
        )
        console.print(f"[green]  {lib_path.name} ready[/]")

        return CompiledArtifact(
            name=component.lib_name,
            lib_dir=lib_dir,
            path=lib_path,
            objects=tuple(objects),
        )

    def _run(self, component: Component, cmd: List[str], description: str) -> None:
        try:
            self.runner(cmd, description)
        except CommandFailed as e:
            raise CompilationFailure(component.name, e.stderr or str(e)) from e
