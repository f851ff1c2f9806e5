from __future__ import annotations

from ..errors import PreconditionError

# uname -m -> architecture tag used in the staged image archive names.
ARCH_MAP = {
    "x86_64": "amd64",
    "aarch64": "arm64",
    "arm": "arm",
    "armv7l": "arm",
}


def map_architecture(machine: str) -> str:
    arch = ARCH_MAP.get(machine.strip().lower())
    if not arch:
        raise PreconditionError(f"Unsupported hardware architecture: {machine!r}")
    return arch
