from __future__ import annotations

import argparse
import logging
import sys
from typing import List, NoReturn, Optional

from .errors import InstallerError
from .install_config import InstallConfig, build_install_config, load_install_settings
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .lib.privileges import require_root
from .pipeline import PipelineResult, Step, run_pipeline
from .steps import (
    CheckSystemStep,
    CheckUnmanagedStep,
    CleanupStep,
    DisableLegacyStep,
    InstallAgentStep,
    InstallRuntimeStep,
)

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Install Zeek from this offline package. With --sensor, Zeek is set up to
monitor a network interface as a service. Otherwise Zeek is set up to process
packet captures with the "zeek readpcap" command.
"""


def build_steps() -> List[Step]:
    return [
        CheckSystemStep(),
        DisableLegacyStep(),
        CheckUnmanagedStep(),
        InstallRuntimeStep(),
        InstallAgentStep(),
        CleanupStep(),
    ]


def run(cfg: InstallConfig) -> PipelineResult:
    """Run the installer pipeline against an already-built config."""
    return run_pipeline(cfg=cfg, steps=build_steps())


def report(result: PipelineResult) -> int:
    if result.ok:
        logger.info("Installation complete (steps: %s)", ", ".join(result.ran_steps))
        return 0

    outcome = result.outcome
    if result.cancelled:
        print("\nInstallation cancelled.\n")
        return 1

    print(f"\nInstallation failed on step {outcome.step_id}: {outcome.message}")
    if outcome.hint:
        print(outcome.hint)
    print()
    return 1


class InstallerArgumentParser(argparse.ArgumentParser):
    """Usage errors exit 1 like every other installer failure."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = InstallerArgumentParser(prog="zeek-installer", description=DESCRIPTION)
    p.add_argument("--sensor", action="store_true", help="Run Zeek as a live network monitor service")
    p.add_argument(
        "--non-interactive",
        action="store_true",
        default=None,
        help="Never prompt (also enabled by acm_no_interactive=yes)",
    )
    p.add_argument("--stage-dir", default=None, help="Extracted package directory (default: this package)")
    p.add_argument("--config", default=None, help="Optional YAML file overriding installer defaults")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(log_path=args.log)

    try:
        require_root(sys.argv[1:] if argv is None else argv)
        cfg = build_install_config(
            sensor=args.sensor,
            interactive=None if args.non_interactive is None else False,
            stage_dir=args.stage_dir,
            settings=load_install_settings(args.config),
        )
    except InstallerError as e:
        print(f"\nInstallation failed: {e}\n")
        return 1
    except (OSError, ValueError) as e:
        logger.error("Invalid installer configuration: %s", e)
        print(f"\nInstallation failed: {e}\n")
        return 1
    except KeyboardInterrupt:
        print("\nInstallation cancelled.\n")
        return 1

    try:
        return report(run(cfg))
    except KeyboardInterrupt:
        logger.warning("Installation interrupted between steps")
        print("\nInstallation cancelled.\n")
        return 1
