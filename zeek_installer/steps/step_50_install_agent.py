from __future__ import annotations

import logging
import time

from ..errors import PreconditionError
from ..install_config import InstallConfig
from ..lib.assets import copy_tree_no_clobber, install_if_missing
from ..lib.hwdetect import map_architecture
from ..lib.images import image_archive_name, read_version
from ..lib.runtime import load_image, require_container_running
from ..lib.service import install_control_script, load_profile_env, start_service, stop_service, write_profile
from ..pipeline import Stage

logger = logging.getLogger(__name__)


class InstallAgentStep:
    step_id = "50_install_agent"
    reaches = Stage.AGENT_INSTALLED

    def run(self, cfg: InstallConfig) -> None:
        logger.info("Installing Zeek")
        paths = cfg.paths

        zeek_release = read_version(cfg.version_file)

        install_control_script(cfg.control_script_src, paths.control_script, paths.bin_link)

        # The control script is configured through these variables; pin them
        # here instead of relying on its defaults.
        write_profile(paths.profile_path, zeek_top_dir=str(paths.zeek_top_dir), zeek_release=zeek_release)
        profile_env = load_profile_env(paths.profile_path)

        stop_service(paths.control_script, profile_env)

        arch = map_architecture(cfg.machine)
        archive = cfg.images_dir / image_archive_name(f"{cfg.image_repository}:{zeek_release}", arch)
        if not archive.is_file():
            raise PreconditionError(
                f"This package does not include a Zeek image for the {arch} architecture ({archive.name} missing)"
            )
        load_image(archive)

        # Must run before the site copy below, which ships its own autoload
        # directory and would make a customer's 100-default.zeek look absent.
        install_if_missing(cfg.default_site_config_src, paths.default_site_config)

        copy_tree_no_clobber(cfg.site_scripts_src, paths.site_dir)

        if cfg.sensor:
            logger.info("Starting Zeek as a network monitor")
            start_service(paths.control_script, profile_env)

            logger.info("Waiting for initialization")
            time.sleep(cfg.settle_seconds)

            require_container_running(cfg.container_name)

        logger.info("Congratulations, Zeek is installed.")
