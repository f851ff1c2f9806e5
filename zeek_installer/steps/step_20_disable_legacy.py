from __future__ import annotations

import logging
from typing import Optional

from ..install_config import InstallConfig
from ..pipeline import Stage
from ..lib.legacy import disable_legacy_agent, migrate_legacy_logs

logger = logging.getLogger(__name__)


class DisableLegacyStep:
    """Stop a Bro installation and carry its logs over to the Zeek log path."""

    step_id = "20_disable_legacy"
    reaches: Optional[Stage] = None

    def run(self, cfg: InstallConfig) -> None:
        if cfg.legacy_agent is not None:
            logger.info("Disabling existing Bro IDS installation at %s", cfg.legacy_agent)
            disable_legacy_agent(cfg.legacy_agent)

        migrate_legacy_logs(cfg.legacy_logs, cfg.paths.log_dir)
