from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)


def fetch_file(url: str, dest: Path, *, mode: Optional[int] = None, timeout: float = 60) -> Path:
    """Download ``url`` to ``dest``; the previous file is only replaced on success."""

    logger.info("GET %s -> %s", url, dest)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(dest.name + ".part")
    tmp.write_bytes(resp.content)
    os.replace(tmp, dest)
    if mode is not None:
        os.chmod(dest, mode)
    return dest
