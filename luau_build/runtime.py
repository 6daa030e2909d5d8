#!/usr/bin/env python3
"""
Platform/runtime-library resolution.

Code compiled from C++ sources has to be linked against the platform's C++
runtime. The consumer cannot know which one a given target wants, so the
manifest carries it.
"""

import os
from typing import Mapping, Optional

########################################################################
# Environment Overrides
########################################################################

RUNTIME_LIBRARY_VAR = "CXXSTDLIB"


def is_cross_build(target: str, host: str) -> bool:
    return target != host


def env_override(
    var: str,
    target: str,
    host: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Look up a per-target environment override, first match wins.

    Checked in order:
    1. <VAR>_<target>              e.g. CXXSTDLIB_aarch64-linux-android
    2. <VAR>_<target_underscored>  e.g. CXXSTDLIB_aarch64_linux_android
    3. HOST_<VAR> for native builds, TARGET_<VAR> for cross builds
    4. <VAR>

    Returns:
        The override value (possibly empty), or None if nothing is set
    """
    if environ is None:
        environ = os.environ

    kind = "TARGET" if is_cross_build(target, host) else "HOST"
    candidates = [
        f"{var}_{target}",
        f"{var}_{target.replace('-', '_')}",
        f"{kind}_{var}",
        var,
    ]
    for name in candidates:
        value = environ.get(name)
        if value is not None:
            return value
    return None


########################################################################
# Built-in Table
########################################################################


def default_runtime_library(target: str) -> Optional[str]:
    """C++ runtime a target links against when nothing overrides it."""
    if "msvc" in target:
        # linked implicitly by the MSVC toolchain
        return None
    if "apple" in target or "freebsd" in target or "openbsd" in target:
        return "c++"
    if "android" in target:
        return "c++_shared"
    return "stdc++"


def resolve_runtime_library(
    target: str,
    host: str,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Resolve the C++ runtime library for a target/host pair.

    An explicit override always wins over the built-in table. An override set
    to the empty string means no runtime library is linked at all.
    """
    override = env_override(RUNTIME_LIBRARY_VAR, target, host, environ)
    if override is not None:
        return override or None
    return default_runtime_library(target)
