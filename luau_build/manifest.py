"""
Artifact manifest and link-metadata emission.

The emitted lines are the whole contract with the coordinator that invoked
the build, so they depend on nothing but the manifest itself.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

VERSION_MARKER = "+luau"

FORMAT_DIRECTIVES = "directives"
FORMAT_CARGO = "cargo"

_TEMPLATES = {
    FORMAT_DIRECTIVES: {
        "search": "library-search-path = {}",
        "static": "link-static-library = {}",
        "runtime": "link-runtime-library = {}",
        "version": "derived-version = {}",
    },
    FORMAT_CARGO: {
        "search": "cargo:rustc-link-search=native={}",
        "static": "cargo:rustc-link-lib=static={}",
        "runtime": "cargo:rustc-link-lib={}",
        "version": "cargo:rustc-env=LUAU_VERSION={}",
    },
}

METADATA_FORMATS = tuple(_TEMPLATES)


def derive_version(package_version: str, marker: str = VERSION_MARKER) -> Optional[str]:
    """
    Luau release number carried in the package version.

    "0.12.0+luau653" -> "0.653"; None when the marker is absent.
    """
    _, found, suffix = package_version.partition(marker)
    if not found:
        return None
    return f"0.{suffix}"


@dataclass(frozen=True)
class ArtifactManifest:
    lib_dir: Path
    libs: Tuple[str, ...]
    include_dir: Optional[Path] = None
    runtime_library: Optional[str] = None
    version: Optional[str] = None

    def metadata_lines(self, fmt: str = FORMAT_DIRECTIVES) -> List[str]:
        """Render the manifest as link directives, in protocol order."""
        try:
            templates = _TEMPLATES[fmt]
        except KeyError:
            raise ValueError(f"unknown metadata format: {fmt!r}") from None

        lines = [templates["search"].format(self.lib_dir)]
        lines += [templates["static"].format(lib) for lib in self.libs]
        if self.runtime_library:
            lines.append(templates["runtime"].format(self.runtime_library))
        if self.version:
            lines.append(templates["version"].format(self.version))
        return lines

    def emit(self, stream: Optional[TextIO] = None, fmt: str = FORMAT_DIRECTIVES) -> None:
        """Write the link metadata, one directive per line (stdout by default)."""
        stream = stream or sys.stdout
        for line in self.metadata_lines(fmt):
            stream.write(line + "\n")
        stream.flush()
