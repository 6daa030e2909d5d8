"""Shared pytest fixtures for the luau_build tests."""

from __future__ import annotations

import pathlib
import sys
from typing import Callable, List, Optional

import pytest

# Add repository root to path so the package imports without installing
REPO_ROOT = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT))

from luau_build.components import LUAU_COMPONENTS, Component, Dependency  # noqa: E402
from luau_build.config import BuildConfig  # noqa: E402
from luau_build.errors import CommandFailed  # noqa: E402

TARGET = "x86_64-unknown-linux-gnu"


class FakeRunner:
    """
    Stands in for run_command: records every command and creates the files a
    compiler or archiver would have written.
    """

    def __init__(self, fail_on: Optional[str] = None, diagnostic: str = "error: boom"):
        self.commands: List[List[str]] = []
        self.fail_on = fail_on
        self.diagnostic = diagnostic

    def __call__(self, cmd, description="", cwd=None, env=None) -> None:
        cmd = [str(part) for part in cmd]
        self.commands.append(cmd)
        if self.fail_on and any(self.fail_on in part for part in cmd):
            raise CommandFailed(cmd, 1, self.diagnostic)

        if "-o" in cmd:
            out = pathlib.Path(cmd[cmd.index("-o") + 1])
            out.write_text(f"object for {cmd[cmd.index('-c') + 1]}\n")
        elif len(cmd) > 2 and cmd[1] == "crs":
            archive = pathlib.Path(cmd[2])
            archive.write_text("".join(pathlib.Path(o).name + "\n" for o in cmd[3:]))

    @property
    def archives(self) -> List[str]:
        return [pathlib.Path(c[2]).name for c in self.commands if len(c) > 2 and c[1] == "crs"]

    def compiled_sources(self) -> List[str]:
        return [pathlib.Path(c[c.index("-c") + 1]).name for c in self.commands if "-c" in c]


def write(path: pathlib.Path, text: str = "") -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def two_component_tree(tmp_path: pathlib.Path) -> pathlib.Path:
    """Synthetic source tree where B compiles against A's headers."""
    root = tmp_path / "src"
    write(root / "A" / "include" / "a.h", "int a(void);\n")
    write(root / "A" / "src" / "a2.cpp", "int a2() { return 2; }\n")
    write(root / "A" / "src" / "a1.cpp", '#include "a.h"\nint a() { return 1; }\n')
    write(root / "A" / "src" / "notes.txt", "not a source\n")
    write(root / "B" / "include" / "b.h", "int b(void);\n")
    write(root / "B" / "src" / "b.cpp", '#include "a.h"\nint b() { return a(); }\n')
    return root


@pytest.fixture
def two_components() -> tuple:
    return (
        Component(name="A", lib_name="A", source_dirs=("A/src",), include_dirs=("A/include",)),
        Component(
            name="B",
            lib_name="B",
            source_dirs=("B/src",),
            include_dirs=("B/include",),
            depends_on=(Dependency("A"),),
        ),
    )


@pytest.fixture
def luau_tree(tmp_path: pathlib.Path) -> pathlib.Path:
    """Minimal stand-in for the Luau source tree: one source per directory plus public headers."""
    root = tmp_path / "luau"
    for component in LUAU_COMPONENTS:
        for rel in component.source_dirs:
            write(root / rel / f"{component.name}.cpp", f"// {component.name}\n")
        for rel in component.include_dirs:
            (root / rel).mkdir(parents=True, exist_ok=True)
    write(root / "Common" / "include" / "Luau" / "Common.h")
    write(root / "VM" / "include" / "lua.h")
    write(root / "VM" / "include" / "luaconf.h")
    write(root / "VM" / "include" / "lualib.h")
    write(root / "Compiler" / "include" / "luacode.h")
    write(root / "CodeGen" / "include" / "luacodegen.h")
    write(root / "Require" / "Runtime" / "include" / "Luau" / "Require.h")
    return root


@pytest.fixture
def make_config(tmp_path: pathlib.Path) -> Callable[..., BuildConfig]:
    """BuildConfig with target, host and output location already set."""

    def factory(source_dir: Optional[pathlib.Path] = None, target: str = TARGET) -> BuildConfig:
        config = BuildConfig().target(target).host(TARGET).out_dir(tmp_path / "out")
        if source_dir is not None:
            config.source_dir(source_dir)
        return config

    return factory


_BUILD_ENV_PREFIXES = ("CXXSTDLIB", "CXX", "AR", "HOST_", "TARGET_")
_BUILD_ENV_VARS = ("TARGET", "HOST", "OUT_DIR", "PROFILE", "NUM_JOBS", "LUAU_SOURCE_DIR")


@pytest.fixture(autouse=True)
def clean_build_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's toolchain environment out of the tests."""
    import os

    for name in list(os.environ):
        if name in _BUILD_ENV_VARS or name.startswith(_BUILD_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
