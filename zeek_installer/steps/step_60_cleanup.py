from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Tuple

from ..install_config import InstallConfig
from ..lib.prompt import ask_yes_no
from ..lib.runtime import require_container_running
from ..pipeline import Stage

logger = logging.getLogger(__name__)


def obsolete_items(home: Path) -> List[Tuple[Path, str]]:
    """Leftovers from the AC-Hunter releases that shipped Bro, with the prompt text."""
    return [
        (
            home / "AIH-Bro-latest",
            "Zeek is now installed in /opt/zeek. Previous versions of AC-Hunter used the directory "
            f"{home / 'AIH-Bro-latest'}. We recommend deleting this old installation directory as long "
            "as you have not saved any personal files there.",
        ),
        (
            home / "remscript",
            f"The directory {home / 'remscript'} was used by previous versions of AC-Hunter but is no longer needed.",
        ),
        (
            home / "AIH-Bro-latest.tar",
            f"The file {home / 'AIH-Bro-latest.tar'} was used by previous versions of AC-Hunter but is no longer needed.",
        ),
    ]


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.info("Removed %s", path)


class CleanupStep:
    step_id = "60_cleanup"
    reaches = Stage.CLEANED

    def run(self, cfg: InstallConfig) -> None:
        if cfg.sensor:
            require_container_running(cfg.container_name)

        logger.info("Cleaning up old files")
        if not cfg.interactive:
            return

        for path, explanation in obsolete_items(cfg.home):
            if not (path.exists() or path.is_symlink()):
                continue
            print(explanation)
            kind = "directory" if path.is_dir() else "file"
            if ask_yes_no(f"Would you like to remove the {kind} {path}?"):
                _remove(path)
            else:
                logger.info("Keeping %s", path)
