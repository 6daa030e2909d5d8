"""Component table, gating and include paths."""

from __future__ import annotations

import pathlib

import pytest

from luau_build.components import (
    LUAU_COMPONENTS,
    Component,
    Dependency,
    GATE_CODEGEN,
    codegen_supported,
    include_dirs_for,
    manifest_order,
    plan_components,
    validate_components,
)
from luau_build.config import BuildConfig
from luau_build.errors import InvalidConfiguration, UnsupportedPlatformFeature

LINUX = "x86_64-unknown-linux-gnu"


def config_for(target: str = LINUX, codegen: bool = False):
    return (
        BuildConfig()
        .target(target)
        .host(LINUX)
        .out_dir("/tmp/out")
        .enable_codegen(codegen)
        .finalize(environ={})
    )


def names(components) -> list:
    return [c.name for c in components]


def test_luau_table_is_valid() -> None:
    validate_components(LUAU_COMPONENTS)
    assert names(LUAU_COMPONENTS) == [
        "ast", "common", "compiler", "codegen", "config", "custom", "require", "vm",
    ]


def test_luau_dependency_edges() -> None:
    edges = {c.name: [d.name for d in c.depends_on] for c in LUAU_COMPONENTS}
    assert edges["ast"] == []
    assert edges["common"] == []
    assert edges["vm"] == []
    assert edges["compiler"] == ["ast"]
    assert edges["codegen"] == ["vm"]
    assert edges["config"] == ["ast", "compiler", "vm"]
    assert edges["custom"] == ["vm"]
    assert edges["require"] == ["ast", "config", "vm"]


def test_require_merges_two_parts() -> None:
    require = next(c for c in LUAU_COMPONENTS if c.name == "require")
    assert len(require.source_dirs) == 2
    assert len(require.include_dirs) == 2


def test_duplicate_component_rejected() -> None:
    a = Component(name="a", lib_name="a", source_dirs=("a",))
    with pytest.raises(InvalidConfiguration):
        validate_components([a, a])


def test_unknown_dependency_rejected() -> None:
    a = Component(name="a", lib_name="a", source_dirs=("a",), depends_on=(Dependency("ghost"),))
    with pytest.raises(InvalidConfiguration, match="ghost"):
        validate_components([a])


def test_self_dependency_rejected() -> None:
    a = Component(name="a", lib_name="a", source_dirs=("a",), depends_on=(Dependency("a"),))
    with pytest.raises(InvalidConfiguration):
        validate_components([a])


def test_cycle_rejected() -> None:
    a = Component(name="a", lib_name="a", source_dirs=("a",), depends_on=(Dependency("b"),))
    b = Component(name="b", lib_name="b", source_dirs=("b",), depends_on=(Dependency("a"),))
    with pytest.raises(InvalidConfiguration, match="cycle"):
        validate_components([a, b])


def test_codegen_skipped_when_disabled() -> None:
    planned = plan_components(config_for(codegen=False), LUAU_COMPONENTS)
    assert "codegen" not in names(planned)
    assert len(planned) == len(LUAU_COMPONENTS) - 1


def test_codegen_built_when_enabled() -> None:
    planned = plan_components(config_for(codegen=True), LUAU_COMPONENTS)
    assert "codegen" in names(planned)


@pytest.mark.parametrize("target", ["wasm32-unknown-emscripten", "wasm32-unknown-unknown"])
def test_codegen_unsupported_on_wasm(target: str) -> None:
    assert not codegen_supported(target)
    with pytest.raises(UnsupportedPlatformFeature) as excinfo:
        plan_components(config_for(target=target, codegen=True), LUAU_COMPONENTS)
    assert excinfo.value.component == "codegen"
    assert excinfo.value.target == target


def test_wasm_without_codegen_is_fine() -> None:
    planned = plan_components(config_for(target="wasm32-unknown-emscripten"), LUAU_COMPONENTS)
    assert "vm" in names(planned)


def test_manifest_order_puts_codegen_last() -> None:
    planned = plan_components(config_for(codegen=True), LUAU_COMPONENTS)
    ordered = names(manifest_order(planned))
    assert ordered[-1] == "codegen"
    assert ordered[:-1] == [n for n in names(LUAU_COMPONENTS) if n != "codegen"]


def test_unknown_gate_rejected() -> None:
    odd = Component(name="odd", lib_name="odd", source_dirs=("odd",), gate="sometimes")
    with pytest.raises(InvalidConfiguration):
        plan_components(config_for(), [odd])


def test_include_dirs_for_compiler() -> None:
    root = pathlib.Path("/luau")
    compiler = next(c for c in LUAU_COMPONENTS if c.name == "compiler")
    assert include_dirs_for(compiler, LUAU_COMPONENTS, root) == [
        root / "Compiler/include",
        root / "Ast/include",
        root / "Common/include",
    ]


def test_include_dirs_for_internals() -> None:
    root = pathlib.Path("/luau")
    codegen = next(c for c in LUAU_COMPONENTS if c.gate == GATE_CODEGEN)
    assert include_dirs_for(codegen, LUAU_COMPONENTS, root) == [
        root / "CodeGen/include",
        root / "VM/include",
        root / "VM/src",
        root / "Common/include",
    ]


def test_include_dirs_deduplicated() -> None:
    root = pathlib.Path("/luau")
    common = next(c for c in LUAU_COMPONENTS if c.name == "common")
    assert include_dirs_for(common, LUAU_COMPONENTS, root) == [root / "Common/include"]
