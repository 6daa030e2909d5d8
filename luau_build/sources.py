"""
Deterministic source enumeration.

Directory listings come back in whatever order the filesystem prefers, so the
set of translation units (and the order of archive members) would differ from
machine to machine. Everything returned here is sorted.
"""

from pathlib import Path, PurePath
from typing import Iterable, Tuple, TypeVar

from .errors import FilesystemFailure

P = TypeVar("P", bound=PurePath)


def sort_sources(paths: Iterable[P]) -> Tuple[P, ...]:
    """
    Order files of one directory by their name as a plain string.

    Path comparison is case-folded on Windows and case-sensitive elsewhere,
    so comparing Path objects would order mixed-case names differently per
    platform.
    """
    return tuple(sorted(paths, key=lambda p: p.name))


def list_sources(directory: Path, ext: str) -> Tuple[Path, ...]:
    """
    List source files in a directory by extension.

    Args:
        directory: Directory to scan (not recursive)
        ext: Extension to match, with or without the leading dot

    Returns:
        Matching file paths in lexicographic order
    """
    suffix = ext if ext.startswith(".") else f".{ext}"
    directory = Path(directory)
    try:
        entries = [p for p in directory.iterdir() if p.suffix == suffix and p.is_file()]
    except OSError as e:
        raise FilesystemFailure(f"cannot list sources ({e.strerror})", directory) from e
    return sort_sources(entries)


def list_component_sources(directories: Iterable[Path], ext: str) -> Tuple[Path, ...]:
    """Sorted listing of each directory, concatenated in the order given."""
    files = []
    for directory in directories:
        files.extend(list_sources(directory, ext))
    return tuple(files)
