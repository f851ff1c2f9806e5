from __future__ import annotations

import logging
from typing import Optional

from ..install_config import InstallConfig
from ..pipeline import Stage
from ..lib.sysreq import require_free_space_mib, require_selinux_permissive, require_supported_os

logger = logging.getLogger(__name__)


class CheckSystemStep:
    step_id = "10_check_system"
    reaches: Optional[Stage] = None

    def run(self, cfg: InstallConfig) -> None:
        logger.info("Checking minimum requirements")
        require_supported_os(cfg.os_release_path, dict(cfg.supported_os))
        require_selinux_permissive(cfg.search_path, cfg.selinux_enforce_path)
        require_free_space_mib(cfg.free_space_mounts, cfg.min_free_mib)
