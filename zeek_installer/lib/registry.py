"""Multi-architecture image export through skopeo, run as a container."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

DOCKER_SOCKET = Path("/var/run/docker.sock")


def docker_prefix(socket: Path = DOCKER_SOCKET) -> List[str]:
    """``sudo -E`` when the current user cannot talk to the docker daemon."""
    if os.access(socket, os.W_OK):
        return []
    return ["sudo", "-E"]


def _user_flag() -> List[str]:
    if hasattr(os, "getuid"):
        return ["-u", f"{os.getuid()}:{os.getgid()}"]
    return []


def skopeo_argv(
    skopeo_image: str,
    args: Sequence[str],
    *,
    prefix: Sequence[str] = (),
    host_dir: Optional[Path] = None,
) -> List[str]:
    argv = [*prefix, "docker", "run", "--rm", "-i"]
    if host_dir is not None:
        argv += ["-v", f"{host_dir}:/host"]
    argv += _user_flag()
    argv.append(skopeo_image)
    argv += list(args)
    return argv


def parse_architectures(manifest: Dict[str, Any]) -> List[str]:
    """Architectures listed in a manifest list / OCI index, in published order."""

    archs: List[str] = []
    for entry in manifest.get("manifests") or []:
        arch = ((entry or {}).get("platform") or {}).get("architecture")
        if arch and arch != "unknown" and arch not in archs:
            archs.append(str(arch))
    return archs


def list_architectures(
    image_url: str,
    *,
    skopeo_image: str,
    prefix: Sequence[str] = (),
) -> List[str]:
    r = run_cmd(skopeo_argv(skopeo_image, ["inspect", "--raw", image_url], prefix=prefix))
    archs = parse_architectures(json.loads(r.stdout or "{}"))
    if archs:
        return archs

    # Single-architecture image: no manifest list to enumerate.
    r = run_cmd(skopeo_argv(skopeo_image, ["inspect", image_url], prefix=prefix))
    arch = json.loads(r.stdout or "{}").get("Architecture")
    if not arch:
        raise RuntimeError(f"Unable to determine architectures published for {image_url}")
    return [str(arch)]


def copy_image(
    image_url: str,
    *,
    image: str,
    arch: str,
    out_dir: Path,
    archive_name: str,
    skopeo_image: str,
    prefix: Sequence[str] = (),
) -> Path:
    """Export one architecture of ``image_url`` as an uncompressed docker-archive."""

    out_dir.mkdir(parents=True, exist_ok=True)
    run_cmd(
        skopeo_argv(
            skopeo_image,
            [
                "--override-arch",
                arch,
                "copy",
                "--multi-arch",
                "system",
                image_url,
                "--additional-tag",
                image,
                f"docker-archive:/host/{archive_name}",
            ],
            prefix=prefix,
            host_dir=out_dir.resolve(),
        )
    )
    return out_dir / archive_name
