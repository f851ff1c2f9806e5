"""Read-only host diagnostics. Each check raises PreconditionError on failure."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence

from ..errors import PreconditionError
from .command import run_cmd

logger = logging.getLogger(__name__)

SELINUX_ENFORCE_PATH = Path("/sys/fs/selinux/enforce")
MIB = 1024 * 1024


def parse_os_release(text: str) -> Dict[str, str]:
    info: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        info[key.strip()] = value.strip().strip("'\"")
    return info


def require_supported_os(os_release_path: Path, supported: Mapping[str, Sequence[str]]) -> None:
    try:
        info = parse_os_release(os_release_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise PreconditionError(f"Unable to identify the operating system ({os_release_path} missing)")

    os_id = info.get("ID", "").lower()
    version = info.get("VERSION_ID", "")
    # ID_LIKE lets derivatives (e.g. "rocky" -> "rhel") match the parent entry.
    candidates = [os_id] + info.get("ID_LIKE", "").lower().split()

    for cand in candidates:
        versions = supported.get(cand)
        if versions is None:
            continue
        if any(version == v or version.startswith(v + ".") for v in versions):
            logger.info("Operating system %s %s is supported", os_id, version)
            return

    name = info.get("PRETTY_NAME") or f"{os_id} {version}".strip()
    raise PreconditionError(f"Unsupported operating system: {name or 'unknown'}")


def selinux_mode(search_path: str, enforce_path: Path = SELINUX_ENFORCE_PATH) -> Optional[str]:
    """Return Enforcing|Permissive|Disabled, or None when SELinux is absent."""

    getenforce = shutil.which("getenforce", path=search_path)
    if getenforce:
        r = run_cmd([getenforce], check=False)
        if r.ok and r.stdout.strip():
            return r.stdout.strip().capitalize()
    if enforce_path.exists():
        return "Enforcing" if enforce_path.read_text(encoding="utf-8").strip() == "1" else "Permissive"
    return None


def require_selinux_permissive(search_path: str, enforce_path: Path = SELINUX_ENFORCE_PATH) -> None:
    mode = selinux_mode(search_path, enforce_path)
    if mode == "Enforcing":
        raise PreconditionError(
            "SELinux is in enforcing mode. Set it to permissive or disabled and re-run the installer."
        )
    logger.info("SELinux: %s", mode or "not present")


def free_mib(path: Path) -> int:
    return shutil.disk_usage(str(path)).free // MIB


def require_free_space_mib(paths: Iterable[Path], minimum_mib: int) -> None:
    for p in paths:
        available = free_mib(p)
        if available <= minimum_mib:
            raise PreconditionError(
                f"Insufficient free space on {p}: {available} MiB available, more than {minimum_mib} MiB required"
            )
        logger.info("Free space on %s: %s MiB", p, available)
