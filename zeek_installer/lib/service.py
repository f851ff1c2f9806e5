"""The installed control script and its environment-profile fragment."""

from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Mapping

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

PROFILE_HEADER = "# This file is auto-generated. Any changes will be overwritten on next upgrade."

_EXPORT = re.compile(r"^\s*export\s+([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


def install_control_script(src: Path, dst: Path, link: Path) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    os.chmod(dst, 0o755)

    link.parent.mkdir(parents=True, exist_ok=True)
    if link.is_symlink() or link.exists():
        link.unlink()
    link.symlink_to(dst)
    logger.info("Installed %s (linked from %s)", dst, link)


def write_profile(path: Path, *, zeek_top_dir: str, zeek_release: str) -> None:
    # Trailing slash on zeek_top_dir is what the control script expects.
    top = zeek_top_dir.rstrip("/") + "/"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "\n".join(
            [
                PROFILE_HEADER,
                f"export zeek_top_dir='{top}'",
                f"export zeek_release='{zeek_release}'",
                "",
            ]
        ),
        encoding="utf-8",
    )
    os.chmod(path, 0o644)


def load_profile_env(path: Path) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        m = _EXPORT.match(line)
        if m:
            env[m.group(1)] = m.group(2).strip().strip("'\"")
    return env


def stop_service(control_script: Path, env: Mapping[str, str]) -> CmdResult:
    r = run_cmd([str(control_script), "stop"], check=False, env=env)
    if not r.ok:
        logger.info("Zeek was not running (stop returned %s)", r.returncode)
    return r


def start_service(control_script: Path, env: Mapping[str, str]) -> None:
    run_cmd([str(control_script), "start"], env=env)
