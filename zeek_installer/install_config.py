from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .lib.legacy import (
    DEFAULT_LEGACY_AGENT_PATHS,
    DEFAULT_LEGACY_LOG_DIRS,
    DEFAULT_UNMANAGED_CTL_PATHS,
    find_legacy_agent,
    find_legacy_logs,
)
from .lib.sysreq import SELINUX_ENFORCE_PATH

logger = logging.getLogger(__name__)


DEFAULT_SUPPORTED_OS: Dict[str, Tuple[str, ...]] = {
    "ubuntu": ("18.04", "20.04", "22.04", "24.04"),
    "debian": ("10", "11", "12"),
    "centos": ("7", "8"),
    "rhel": ("7", "8", "9"),
    "rocky": ("8", "9"),
    "almalinux": ("8", "9"),
}
DEFAULT_MIN_FREE_MIB = 5120
DEFAULT_SETTLE_SECONDS = 15.0
DEFAULT_CONTAINER_NAME = "zeek"
DEFAULT_IMAGE_REPOSITORY = "activecm/zeek"


def _repo_root() -> Path:
    # zeek_installer/install_config.py -> zeek_installer -> archive root
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class InstallPaths:
    zeek_top_dir: Path = Path("/opt/zeek")
    bin_link: Path = Path("/usr/local/bin/zeek")
    profile_path: Path = Path("/etc/profile.d/docker-zeek.sh")

    @property
    def control_script(self) -> Path:
        return self.zeek_top_dir / "bin" / "zeek"

    @property
    def log_dir(self) -> Path:
        return self.zeek_top_dir / "logs"

    @property
    def site_dir(self) -> Path:
        return self.zeek_top_dir / "share" / "zeek" / "site"

    @property
    def default_site_config(self) -> Path:
        return self.site_dir / "autoload" / "100-default.zeek"

    def under(self, root: str | Path) -> "InstallPaths":
        """Re-root every path below ``root`` (chroot-style installs, tests)."""
        r = Path(root)
        return InstallPaths(
            zeek_top_dir=r / str(self.zeek_top_dir).lstrip("/"),
            bin_link=r / str(self.bin_link).lstrip("/"),
            profile_path=r / str(self.profile_path).lstrip("/"),
        )


@dataclass(frozen=True)
class InstallConfig:
    """Everything a step may consult. Built once at startup, never mutated."""

    stage_dir: Path
    home: Path
    search_path: str
    machine: str
    sensor: bool = False
    interactive: bool = True
    privileged: bool = True
    paths: InstallPaths = field(default_factory=InstallPaths)
    os_release_path: Path = Path("/etc/os-release")
    selinux_enforce_path: Path = SELINUX_ENFORCE_PATH
    supported_os: Tuple[Tuple[str, Tuple[str, ...]], ...] = tuple(DEFAULT_SUPPORTED_OS.items())
    min_free_mib: int = DEFAULT_MIN_FREE_MIB
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    container_name: str = DEFAULT_CONTAINER_NAME
    image_repository: str = DEFAULT_IMAGE_REPOSITORY
    legacy_agent: Optional[Path] = None
    legacy_logs: Optional[Path] = None
    unmanaged_ctl_paths: Tuple[Tuple[str, str], ...] = DEFAULT_UNMANAGED_CTL_PATHS

    @property
    def version_file(self) -> Path:
        return self.stage_dir / "VERSION"

    @property
    def images_dir(self) -> Path:
        return self.stage_dir / "images"

    @property
    def control_script_src(self) -> Path:
        return self.stage_dir / "scripts" / "zeek"

    @property
    def runtime_installer(self) -> Path:
        return self.stage_dir / "scripts" / "shell-lib" / "docker" / "install_docker.sh"

    @property
    def default_site_config_src(self) -> Path:
        return self.stage_dir / "zeek_scripts" / "100-default.zeek"

    @property
    def site_scripts_src(self) -> Path:
        return self.stage_dir / "zeek_scripts" / "site"

    @property
    def free_space_mounts(self) -> Tuple[Path, ...]:
        return (self.home, Path("/"), Path("/usr"))

    def with_overrides(self, **changes: Any) -> "InstallConfig":
        return replace(self, **changes)


def load_install_settings(path: Optional[str]) -> Dict[str, Any]:
    """Load optional YAML overrides. PyYAML is only needed when a file is given."""

    if not path:
        return {}

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    try:
        import yaml  # type: ignore
    except ImportError as e:
        raise RuntimeError("PyYAML is required to read an installer config file") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")
    return raw


def _supported_os(raw: Mapping[str, Any]) -> Tuple[Tuple[str, Tuple[str, ...]], ...]:
    table = raw.get("supported_os") or DEFAULT_SUPPORTED_OS
    return tuple((str(k).lower(), tuple(str(v) for v in (vs or []))) for k, vs in table.items())


def build_install_config(
    *,
    sensor: bool,
    interactive: Optional[bool] = None,
    stage_dir: Optional[str] = None,
    settings: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    paths: Optional[InstallPaths] = None,
    machine: Optional[str] = None,
) -> InstallConfig:
    """Probe the host once and freeze the result.

    This is the only place the process environment is consulted.
    """

    env = os.environ if environ is None else environ
    raw = dict(settings or {})
    legacy_cfg = raw.get("legacy") or {}
    unmanaged_cfg = raw.get("unmanaged") or {}

    if interactive is None:
        interactive = env.get("acm_no_interactive", "") != "yes"

    search_path = env.get("PATH", os.defpath)
    agent_paths = tuple(legacy_cfg.get("agent_paths") or DEFAULT_LEGACY_AGENT_PATHS)
    log_dirs = tuple(legacy_cfg.get("log_dirs") or DEFAULT_LEGACY_LOG_DIRS)
    ctl_paths = tuple(
        (str(e["ctl"]), str(e["prefix"])) for e in (unmanaged_cfg.get("ctl_paths") or [])
    ) or DEFAULT_UNMANAGED_CTL_PATHS

    legacy_agent = find_legacy_agent(agent_paths, search_path)
    legacy_logs = find_legacy_logs(legacy_agent, log_dirs)

    cfg = InstallConfig(
        stage_dir=Path(stage_dir).resolve() if stage_dir else _repo_root(),
        home=Path(env.get("HOME") or Path.home()),
        search_path=search_path,
        machine=machine or platform.machine(),
        sensor=bool(sensor),
        interactive=bool(interactive),
        privileged=hasattr(os, "geteuid") and os.geteuid() == 0,
        paths=paths or InstallPaths(),
        supported_os=_supported_os(raw),
        min_free_mib=int(raw.get("min_free_mib", DEFAULT_MIN_FREE_MIB)),
        settle_seconds=float(raw.get("settle_seconds", DEFAULT_SETTLE_SECONDS)),
        container_name=str(raw.get("container_name") or DEFAULT_CONTAINER_NAME),
        image_repository=str(raw.get("image_repository") or DEFAULT_IMAGE_REPOSITORY),
        legacy_agent=legacy_agent,
        legacy_logs=legacy_logs,
        unmanaged_ctl_paths=ctl_paths,
    )

    logger.info(
        "Install config: sensor=%s interactive=%s privileged=%s stage=%s legacy_agent=%s legacy_logs=%s",
        cfg.sensor,
        cfg.interactive,
        cfg.privileged,
        cfg.stage_dir,
        cfg.legacy_agent,
        cfg.legacy_logs,
    )
    return cfg
