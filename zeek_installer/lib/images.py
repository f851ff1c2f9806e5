from __future__ import annotations

import re
from pathlib import Path
from typing import Tuple

from ..errors import PreconditionError

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def sanitize(name: str) -> str:
    return _UNSAFE.sub("_", name)


def image_archive_stem(image_ref: str, arch: str) -> str:
    return f"{sanitize(image_ref)}_{arch}.tar"


def image_archive_name(image_ref: str, arch: str) -> str:
    """activecm/zeek:4.2.0 + arm64 -> activecm_zeek_4_2_0_arm64.tar.gz"""
    return image_archive_stem(image_ref, arch) + ".gz"


def split_image_ref(image_ref: str) -> Tuple[str, str]:
    """Split ``repo[:tag]`` into (repo, tag); tag is "" when absent.

    A colon inside the registry host (``host:5000/repo``) is not a tag.
    """
    head, _, last = image_ref.rpartition("/")
    if ":" not in last:
        return image_ref, ""
    name, tag = last.split(":", 1)
    repo = f"{head}/{name}" if head else name
    return repo, tag


def read_version(path: Path) -> str:
    try:
        version = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        version = ""
    if not version:
        raise PreconditionError(f"Could not read target Zeek release from {path}")
    return version


def write_version(path: Path, version: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(version + "\n", encoding="utf-8")
