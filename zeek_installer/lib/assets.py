from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def install_if_missing(src: Path, dst: Path) -> bool:
    if dst.exists() or dst.is_symlink():
        logger.info("Keeping existing %s", dst)
        return False
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    logger.info("Installed %s", dst)
    return True


def copy_tree_no_clobber(src: Path, dst: Path) -> List[Path]:
    """Recursive copy that never replaces a file already present at the target."""

    if not src.exists():
        raise FileNotFoundError(str(src))

    copied: List[Path] = []
    dst.mkdir(parents=True, exist_ok=True)
    for item in sorted(src.rglob("*")):
        out = dst / item.relative_to(src)
        if item.is_dir():
            out.mkdir(parents=True, exist_ok=True)
        elif install_if_missing(item, out):
            copied.append(out)
    return copied
