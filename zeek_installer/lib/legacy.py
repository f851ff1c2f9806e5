"""Detection of earlier Bro/Zeek installations on the host."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from .command import run_cmd
from .probe import command_on_path, directory_at, executable_at, first_match, install_prefix, sibling_of

logger = logging.getLogger(__name__)

DEFAULT_LEGACY_AGENT_PATHS: Tuple[str, ...] = (
    "/opt/bro/bin/broctl",
    "/usr/local/bro/bin/broctl",
)
DEFAULT_LEGACY_LOG_DIRS: Tuple[str, ...] = (
    "/opt/bro/logs",
    "/usr/local/bro/logs",
)
# (zeekctl location, installation prefix reported to the operator)
DEFAULT_UNMANAGED_CTL_PATHS: Tuple[Tuple[str, str], ...] = (
    ("/opt/bro/bin/zeekctl", "/opt/bro"),
    ("/opt/zeek/bin/zeekctl", "/opt/zeek"),
    ("/usr/local/zeek/bin/zeekctl", "/usr/local/zeek"),
)

LEGACY_CTL = "broctl"
UNMANAGED_CTL = "zeekctl"


def find_legacy_agent(agent_paths: Iterable[str], search_path: str) -> Optional[Path]:
    strategies = [executable_at(p) for p in agent_paths]
    strategies.append(command_on_path(LEGACY_CTL, search_path))
    return first_match(strategies)


def find_legacy_logs(agent: Optional[Path], log_dirs: Iterable[str]) -> Optional[Path]:
    strategies = [directory_at(p) for p in log_dirs]
    strategies.append(sibling_of(agent, "logs"))
    return first_match(strategies)


def disable_legacy_agent(agent: Path) -> None:
    """Stop Bro and its cron jobs. Failures propagate: two live agents is worse."""

    logger.info("Zeek IDS cannot run alongside Bro IDS. Stopping the Bro IDS service...")
    run_cmd([str(agent), "stop"])
    run_cmd([str(agent), "cron", "disable"])


def migrate_legacy_logs(legacy_logs: Optional[Path], new_log_path: Path) -> bool:
    """Link the new log path to the legacy log directory.

    Returns True when a link was created. Never replaces an existing path,
    including a dangling symlink.
    """

    if legacy_logs is None:
        return False
    if new_log_path.exists() or new_log_path.is_symlink():
        logger.info("%s already exists; leaving legacy logs in place", new_log_path)
        return False

    logger.info("Linking %s to %s", legacy_logs, new_log_path)
    new_log_path.parent.mkdir(parents=True, exist_ok=True)
    new_log_path.symlink_to(legacy_logs, target_is_directory=True)
    return True


def find_unmanaged_install(ctl_paths: Sequence[Tuple[str, str]], search_path: str) -> Optional[Path]:
    def _prefix_if_present(ctl: str, prefix: str):
        probe = executable_at(ctl)
        return lambda: Path(prefix) if probe() else None

    def _prefix_from_path():
        found = command_on_path(UNMANAGED_CTL, search_path)()
        return install_prefix(found) if found else None

    strategies = [_prefix_if_present(ctl, prefix) for ctl, prefix in ctl_paths]
    strategies.append(_prefix_from_path)
    return first_match(strategies)
