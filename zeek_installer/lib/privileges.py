from __future__ import annotations

import logging
import os
import shutil
import sys
from typing import Sequence

from ..errors import PreconditionError

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def require_root(argv: Sequence[str]) -> None:
    """Re-execute the installer under ``sudo -E`` unless already root.

    Does not return when re-executing. Raises when neither is possible.
    """

    logger.info("Checking for administrator privileges")
    if is_root():
        return

    sudo = shutil.which("sudo")
    if not sudo:
        raise PreconditionError("This installer must be run as root or by a user with sudo privileges.")

    logger.info("Re-running the installer with sudo")
    sys.stdout.flush()
    sys.stderr.flush()
    os.execv(sudo, [sudo, "-E", sys.executable, "-m", "zeek_installer", *argv])
