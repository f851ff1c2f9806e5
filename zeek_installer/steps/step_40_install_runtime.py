from __future__ import annotations

import logging

from ..errors import EnvironmentFailure, PreconditionError
from ..install_config import InstallConfig
from ..lib.runtime import install_runtime, runtime_is_operable
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class InstallRuntimeStep:
    step_id = "40_install_runtime"
    reaches = Stage.RUNTIME_READY

    def run(self, cfg: InstallConfig) -> None:
        logger.info("Installing docker")
        installer = cfg.runtime_installer
        if not installer.is_file():
            raise PreconditionError(f"Docker installer missing from package: {installer}")

        install_runtime(installer)

        if not runtime_is_operable():
            raise EnvironmentFailure(
                "Docker does not appear to be working.",
                hint="Does the current user have sudo or docker privileges? "
                "A new docker group membership only applies to new login sessions.",
            )
        logger.info("Docker appears to be working, continuing.")
