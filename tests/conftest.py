from __future__ import annotations

import gzip
import os
import types
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from zeek_installer.errors import CommandError
from zeek_installer.install_config import InstallConfig, InstallPaths
from zeek_installer.lib.command import CmdResult

RUN_CMD_USERS = [
    "zeek_installer.lib.legacy",
    "zeek_installer.lib.runtime",
    "zeek_installer.lib.service",
    "zeek_installer.lib.sysreq",
    "zeek_installer.lib.registry",
    "zeek_installer.build_steps",
]


class FakeRunner:
    """Stands in for run_cmd: records every argv and answers from rules."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[Optional[dict]] = []
        self._rules: list = []

    def on(
        self,
        needle: str,
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        action: Optional[Callable[[List[str]], None]] = None,
    ) -> None:
        self._rules.append((needle, returncode, stdout, stderr, action))

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None):
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.envs.append(dict(env) if env else None)
        line = " ".join(argv)

        returncode, stdout, stderr = 0, "", ""
        for needle, rc, out, err, action in reversed(self._rules):
            if needle in line:
                returncode, stdout, stderr = rc, out, err
                if action is not None:
                    action(argv)
                break

        if check and returncode != 0:
            raise CommandError(argv, returncode, stderr)
        return CmdResult(argv=argv, returncode=returncode, stdout=stdout, stderr=stderr)

    @property
    def lines(self) -> List[str]:
        return [" ".join(c) for c in self.calls]

    def ran(self, needle: str) -> bool:
        return any(needle in line for line in self.lines)

    def index(self, needle: str) -> int:
        for i, line in enumerate(self.lines):
            if needle in line:
                return i
        raise AssertionError(f"{needle!r} never ran; calls: {self.lines}")


@pytest.fixture
def fake_cmd(monkeypatch) -> FakeRunner:
    runner = FakeRunner()
    for module in RUN_CMD_USERS:
        monkeypatch.setattr(f"{module}.run_cmd", runner)
    return runner


@pytest.fixture
def plenty_of_space(monkeypatch):
    monkeypatch.setattr(
        "zeek_installer.lib.sysreq.shutil.disk_usage",
        lambda path: types.SimpleNamespace(total=0, used=0, free=50 * 1024 * 1024 * 1024),
    )


def _write(path: Path, text: str, mode: Optional[int] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    if mode is not None:
        os.chmod(path, mode)
    return path


def _write_gz(path: Path, payload: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with gzip.open(path, "wb") as f:
        f.write(payload)
    return path


@pytest.fixture
def stage_dir(tmp_path: Path) -> Path:
    """An extracted ACH-Zeek package for release 4.2.0 (amd64 + arm64)."""

    stage = tmp_path / "ACH-Zeek"
    _write(stage / "VERSION", "4.2.0\n")
    _write(stage / "scripts" / "zeek", "#!/bin/sh\nexit 0\n", 0o755)
    _write(stage / "scripts" / "shell-lib" / "docker" / "install_docker.sh", "#!/bin/sh\nexit 0\n", 0o755)
    _write_gz(stage / "images" / "activecm_zeek_4_2_0_amd64.tar.gz", b"amd64-image")
    _write_gz(stage / "images" / "activecm_zeek_4_2_0_arm64.tar.gz", b"arm64-image")
    _write(stage / "zeek_scripts" / "100-default.zeek", "# packaged default\n")
    _write(stage / "zeek_scripts" / "site" / "zeek_open_connections.zeek", "# open connections\n")
    # Same name as the default config: must never win over it.
    _write(stage / "zeek_scripts" / "site" / "autoload" / "100-default.zeek", "# site copy\n")
    return stage


@pytest.fixture
def host_root(tmp_path: Path) -> Path:
    root = tmp_path / "root"
    (root / "bin").mkdir(parents=True)
    _write(root / "etc" / "os-release", 'ID=ubuntu\nVERSION_ID="22.04"\nPRETTY_NAME="Ubuntu 22.04.3 LTS"\n')
    (root / "home").mkdir()
    return root


@pytest.fixture
def make_cfg(host_root: Path, stage_dir: Path) -> Callable[..., InstallConfig]:
    def _make(**overrides) -> InstallConfig:
        base = InstallConfig(
            stage_dir=stage_dir,
            home=host_root / "home",
            search_path=str(host_root / "bin"),
            machine="x86_64",
            sensor=False,
            interactive=False,
            paths=InstallPaths().under(host_root),
            os_release_path=host_root / "etc" / "os-release",
            selinux_enforce_path=host_root / "sys" / "fs" / "selinux" / "enforce",
            settle_seconds=0,
            unmanaged_ctl_paths=(
                (str(host_root / "opt" / "bro" / "bin" / "zeekctl"), str(host_root / "opt" / "bro")),
                (str(host_root / "opt" / "zeek" / "bin" / "zeekctl"), str(host_root / "opt" / "zeek")),
            ),
        )
        return base.with_overrides(**overrides) if overrides else base

    return _make


@pytest.fixture
def write_file():
    return _write
