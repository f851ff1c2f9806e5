"""Docker CLI wrappers used by the installer."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import EnvironmentFailure
from .command import run_cmd

logger = logging.getLogger(__name__)


def install_runtime(installer: Path) -> None:
    run_cmd(["bash", str(installer)])


def runtime_is_operable() -> bool:
    return run_cmd(["docker", "ps"], check=False).ok


def load_image(archive: Path) -> None:
    # docker load understands gzip-compressed archives directly.
    run_cmd(["docker", "load", "-i", str(archive)])


def container_running(name: str) -> bool:
    r = run_cmd(
        ["docker", "ps", "-f", f"name={name}", "-f", "status=running", "--format", "{{.ID}}"],
        check=False,
    )
    return r.ok and bool(r.stdout.strip())


def require_container_running(name: str) -> None:
    if not container_running(name):
        raise EnvironmentFailure(
            "An error occurred while starting Zeek",
            hint=f"Check 'docker logs {name}' for details.",
        )
