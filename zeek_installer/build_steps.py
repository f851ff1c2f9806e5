from __future__ import annotations

import gzip
import logging
import os
import shutil
import sys
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .build_config import BuildConfig
from .lib.command import run_cmd
from .lib.fetch import fetch_file
from .lib.images import image_archive_name, image_archive_stem, split_image_ref, write_version
from .lib.prompt import press_enter
from .lib.registry import copy_image, docker_prefix, list_architectures

logger = logging.getLogger(__name__)


@dataclass
class BuildCtx:
    cfg: BuildConfig
    no_pull: bool = False
    prefix: List[str] = field(default_factory=list)
    archive_path: Optional[Path] = None

    @property
    def stage_dir(self) -> Path:
        return self.cfg.stage_dir

    @property
    def images_dir(self) -> Path:
        return self.stage_dir / self.cfg.images_subdir

    @property
    def image_url(self) -> str:
        return f"docker://{self.cfg.registry}/{self.cfg.image}"


def compress_in_place(path: Path) -> Path:
    """gzip -f: replace ``path`` with ``path.gz``.

    The ``.gz`` only appears once complete. On failure the partial output and
    the source are both removed, so a later --no-pull run exports again.
    """

    gz_path = path.with_name(path.name + ".gz")
    tmp = gz_path.with_name(gz_path.name + ".part")
    try:
        with path.open("rb") as src, gzip.open(tmp, "wb") as dst:
            shutil.copyfileobj(src, dst)
        os.replace(tmp, gz_path)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    finally:
        tmp.unlink(missing_ok=True)
    path.unlink()
    return gz_path


def _exclude_hidden(info: tarfile.TarInfo) -> Optional[tarfile.TarInfo]:
    if any(part.startswith(".") for part in Path(info.name).parts):
        return None
    return info


def seal_archive(stage_dir: Path, out_path: Path, root_name: str) -> Path:
    """Tar ``stage_dir`` under a fixed top-level directory, skipping dotfiles."""

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(out_path, "w", dereference=True) as tar:
        tar.add(str(stage_dir), arcname=root_name, filter=_exclude_hidden)
    return out_path


def step_00_check_docker(*, ctx: BuildCtx) -> None:
    ctx.prefix = docker_prefix()
    if run_cmd([*ctx.prefix, "docker", "version"], check=False).ok:
        return

    logger.warning(
        "The generator did not detect a supported version of Docker. "
        "A supported version of Docker can be installed by running "
        "the install_docker.sh script in the scripts directory."
    )
    if sys.stdin.isatty():
        press_enter()


def step_01_export_images(*, ctx: BuildCtx) -> None:
    image = ctx.cfg.image
    archs = list_architectures(ctx.image_url, skopeo_image=ctx.cfg.skopeo_image, prefix=ctx.prefix)
    logger.info("Architectures published for %s: %s", image, ", ".join(archs))

    # Each architecture writes its own file, so the order here does not matter.
    for arch in archs:
        target = ctx.images_dir / image_archive_name(image, arch)
        if ctx.no_pull and target.is_file():
            logger.info("The latest images will *not* be pulled for %s.", target.name)
            continue

        logger.info("The latest images will be pulled for %s.", target.name)
        tar_path = copy_image(
            ctx.image_url,
            image=image,
            arch=arch,
            out_dir=ctx.images_dir,
            archive_name=image_archive_stem(image, arch),
            skopeo_image=ctx.cfg.skopeo_image,
            prefix=ctx.prefix,
        )
        compress_in_place(tar_path)


def step_02_write_version(*, ctx: BuildCtx) -> None:
    _, tag = split_image_ref(ctx.cfg.image)
    if not tag:
        raise ValueError(f"Image reference {ctx.cfg.image!r} has no version tag")
    logger.info("Updating VERSION file (%s)", tag)
    write_version(ctx.stage_dir / "VERSION", tag)


def step_03_fetch_scripts(*, ctx: BuildCtx) -> None:
    for script in ctx.cfg.scripts:
        fetch_file(script.url, ctx.stage_dir / script.dest, mode=script.mode, timeout=ctx.cfg.fetch_timeout)


def step_04_copy_installer(*, ctx: BuildCtx) -> None:
    # The archive installs itself: python3 -m zeek_installer from its root.
    src = Path(__file__).resolve().parent
    dst = ctx.stage_dir / src.name
    if dst.exists():
        shutil.rmtree(dst)
    shutil.copytree(src, dst, ignore=shutil.ignore_patterns("__pycache__", "*.pyc"))


def step_05_seal_archive(*, ctx: BuildCtx) -> None:
    logger.info("Creating Zeek installer archive...")
    out = ctx.cfg.output_dir / f"{ctx.cfg.archive_name}.tar"
    ctx.archive_path = seal_archive(ctx.stage_dir, out, ctx.cfg.archive_name)
    logger.info("Wrote %s", ctx.archive_path)


ALL_STEPS = [
    step_00_check_docker,
    step_01_export_images,
    step_02_write_version,
    step_03_fetch_scripts,
    step_04_copy_installer,
    step_05_seal_archive,
]
