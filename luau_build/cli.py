#!/usr/bin/env python3
"""
Command line front end: build the Luau libraries and print link metadata.

Progress goes to stderr, the metadata to stdout, so the output can be piped
straight into the coordinator that asked for the build.
"""

import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from .builder import build, describe
from .config import DEFAULT_MAX_CSTACK_SIZE, DEFAULT_VECTOR_SIZE, PROFILES, BuildConfig
from .errors import BuildError, CompilationFailure, FilesystemFailure
from .manifest import FORMAT_DIRECTIVES, METADATA_FORMATS
from .utils import console, set_quiet

app = typer.Typer(add_completion=False, help="Luau static library build tool")


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def run(
    target: Optional[str] = typer.Option(None, "--target", help="Target triple (default: $TARGET)"),
    host: Optional[str] = typer.Option(None, "--host", help="Host triple (default: $HOST)"),
    out_dir: Optional[Path] = typer.Option(
        None, "--out-dir", "-o", help="Output location (default: $OUT_DIR/luau-build)"
    ),
    source_dir: Optional[Path] = typer.Option(
        None, "--source-dir", "-s", help="Luau source tree (default: $LUAU_SOURCE_DIR)"
    ),
    codegen: bool = typer.Option(False, "--codegen/--no-codegen", help="Build the JIT code generator"),
    longjmp: bool = typer.Option(False, "--longjmp", help="Use longjmp instead of C++ exceptions"),
    vector_size: int = typer.Option(DEFAULT_VECTOR_SIZE, "--vector-size", help="Vector size, 3 or 4"),
    max_cstack_size: int = typer.Option(
        DEFAULT_MAX_CSTACK_SIZE, "--max-cstack-size", help="Max Lua stack slots a C function can use"
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", help=f"Build profile: {', '.join(PROFILES)} (default: $PROFILE)"
    ),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", help="Parallel compiles per component"),
    fmt: str = typer.Option(
        FORMAT_DIRECTIVES, "--format", "-f", help=f"Metadata format: {', '.join(METADATA_FORMATS)}"
    ),
    info: bool = typer.Option(False, "--info", "-i", help="Show the build plan and exit"),
    clean: bool = typer.Option(False, "--clean", "-c", help="Remove the output location and exit"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the link metadata"),
):
    """
    Build the Luau static libraries and print the link metadata.
    """
    set_quiet(quiet)

    if fmt not in METADATA_FORMATS:
        console.print(f"[red]Error: unknown metadata format {fmt!r}[/]")
        raise typer.Exit(code=2)

    builder = (
        BuildConfig()
        .enable_codegen(codegen)
        .use_longjmp(longjmp)
        .set_vector_size(vector_size)
        .set_max_cstack_size(max_cstack_size)
    )
    if target:
        builder.target(target)
    if host:
        builder.host(host)
    if out_dir:
        builder.out_dir(out_dir)
    if source_dir:
        builder.source_dir(source_dir)
    if profile:
        builder.profile(profile)
    if jobs is not None:
        builder.jobs(jobs)

    try:
        config = builder.finalize()

        if info:
            console.print(f"  Compiler: {config.cxx}")
            console.print(f"  Archiver: {config.ar}")
            console.print(f"  Source tree: {config.source_dir}")
            console.print(f"  Output location: {config.out_dir}")
            console.print(describe(config))
            raise typer.Exit(code=0)

        if clean:
            if config.out_dir.exists():
                try:
                    shutil.rmtree(config.out_dir)
                except OSError as e:
                    raise FilesystemFailure(f"cannot remove output location ({e.strerror})", config.out_dir) from e
                console.print(f"[green]Deleted directory: {config.out_dir}[/]")
            else:
                console.print("[cyan]No directories to clean[/]")
            raise typer.Exit(code=0)

        manifest = build(config)
    except CompilationFailure as e:
        console.print(f"[red]Error: failed to build {e.component}[/]")
        if e.diagnostic:
            console.print(e.diagnostic, markup=False)
        raise typer.Exit(code=1)
    except BuildError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        raise typer.Exit(code=1)

    manifest.emit(fmt=fmt)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
