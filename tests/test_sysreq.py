from __future__ import annotations

import types
from pathlib import Path

import pytest

from zeek_installer.errors import PreconditionError
from zeek_installer.lib.sysreq import (
    parse_os_release,
    require_free_space_mib,
    require_selinux_permissive,
    require_supported_os,
)

SUPPORTED = {"ubuntu": ("20.04", "22.04"), "rhel": ("8",)}


def test_parse_os_release_strips_quotes_and_comments():
    info = parse_os_release('# comment\nID=ubuntu\nVERSION_ID="22.04"\nNAME=\'Ubuntu\'\n\n')
    assert info == {"ID": "ubuntu", "VERSION_ID": "22.04", "NAME": "Ubuntu"}


def test_supported_os_passes(tmp_path):
    p = tmp_path / "os-release"
    p.write_text('ID=ubuntu\nVERSION_ID="22.04"\n', encoding="utf-8")
    require_supported_os(p, SUPPORTED)


def test_derivative_matches_parent_by_major_version(tmp_path):
    p = tmp_path / "os-release"
    p.write_text('ID="rocky"\nID_LIKE="rhel centos fedora"\nVERSION_ID="8.9"\n', encoding="utf-8")
    require_supported_os(p, SUPPORTED)


@pytest.mark.parametrize(
    "content",
    ['ID=ubuntu\nVERSION_ID="16.04"\n', 'ID=arch\n', 'ID=ubuntu\nVERSION_ID="22.040"\n'],
)
def test_unsupported_os_is_fatal(tmp_path, content):
    p = tmp_path / "os-release"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(PreconditionError, match="Unsupported operating system"):
        require_supported_os(p, SUPPORTED)


def test_missing_os_release_is_fatal(tmp_path):
    with pytest.raises(PreconditionError):
        require_supported_os(tmp_path / "missing", SUPPORTED)


def test_selinux_enforcing_is_fatal(tmp_path):
    enforce = tmp_path / "enforce"
    enforce.write_text("1\n", encoding="utf-8")
    with pytest.raises(PreconditionError, match="enforcing"):
        require_selinux_permissive(str(tmp_path / "empty-bin"), enforce)


def test_selinux_permissive_or_absent_passes(tmp_path):
    enforce = tmp_path / "enforce"
    require_selinux_permissive(str(tmp_path), enforce)
    enforce.write_text("0\n", encoding="utf-8")
    require_selinux_permissive(str(tmp_path), enforce)


def test_selinux_reported_by_getenforce(tmp_path, fake_cmd):
    tool = tmp_path / "getenforce"
    tool.write_text("#!/bin/sh\n", encoding="utf-8")
    tool.chmod(0o755)
    fake_cmd.on("getenforce", stdout="Enforcing\n")

    with pytest.raises(PreconditionError):
        require_selinux_permissive(str(tmp_path), tmp_path / "no-enforce-file")


def test_free_space_names_the_short_mount(monkeypatch):
    free = {"/": 6000, "/usr": 5120}
    monkeypatch.setattr(
        "zeek_installer.lib.sysreq.shutil.disk_usage",
        lambda path: types.SimpleNamespace(free=free[path] * 1024 * 1024),
    )

    with pytest.raises(PreconditionError, match="/usr"):
        require_free_space_mib([Path("/"), Path("/usr")], 5120)

    free["/usr"] = 5121
    require_free_space_mib([Path("/"), Path("/usr")], 5120)
