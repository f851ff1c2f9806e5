from __future__ import annotations

import logging

from ..errors import ConflictError
from ..install_config import InstallConfig
from ..lib.legacy import find_unmanaged_install
from ..pipeline import Stage

logger = logging.getLogger(__name__)

LINKING_FAQ = (
    "https://portal.activecountermeasures.com/ufaqs/"
    "can-i-send-bro-zeek-logs-from-an-existing-bro-zeek-sensor-to-rita-to-be-analyzed"
)


class CheckUnmanagedStep:
    step_id = "30_check_unmanaged"
    reaches = Stage.CHECKS_PASSED

    def run(self, cfg: InstallConfig) -> None:
        found = find_unmanaged_install(cfg.unmanaged_ctl_paths, cfg.search_path)
        if found is not None:
            raise ConflictError(
                f"Zeek installation detected at {found}. Stopping script",
                hint=(
                    "Please refer to our FAQ for guidance on linking existing Zeek installations "
                    f"to AC-Hunter: {LINKING_FAQ}"
                ),
            )
