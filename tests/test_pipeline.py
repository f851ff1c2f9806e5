from __future__ import annotations

import pytest

from zeek_installer.errors import ConflictError, PreconditionError
from zeek_installer.main import build_steps, run
from zeek_installer.pipeline import CANCELLED, FAILED, Stage, run_pipeline


class Recorder:
    def __init__(self, step_id, reaches=None, exc=None, log=None):
        self.step_id = step_id
        self.reaches = reaches
        self.exc = exc
        self.log = log if log is not None else []

    def run(self, cfg):
        self.log.append(self.step_id)
        if self.exc is not None:
            raise self.exc


def test_stages_advance_in_order(make_cfg):
    log = []
    steps = [
        Recorder("a", Stage.CHECKS_PASSED, log=log),
        Recorder("b", Stage.RUNTIME_READY, log=log),
        Recorder("c", None, log=log),
    ]
    result = run_pipeline(cfg=make_cfg(), steps=steps)

    assert result.ok and result.stage is Stage.DONE
    assert result.ran_steps == ["a", "b", "c"] == log


def test_first_failure_halts_and_names_step(make_cfg):
    log = []
    steps = [
        Recorder("a", Stage.CHECKS_PASSED, log=log),
        Recorder("b", exc=PreconditionError("SELinux is in enforcing mode"), log=log),
        Recorder("c", log=log),
    ]
    result = run_pipeline(cfg=make_cfg(), steps=steps)

    assert result.stage is Stage.ABORTED
    assert log == ["a", "b"]
    assert result.outcome.step_id == "b"
    assert result.outcome.status == FAILED
    assert result.outcome.kind == "precondition"


def test_conflict_carries_guidance(make_cfg):
    steps = [Recorder("guard", exc=ConflictError("found", hint="see FAQ"))]
    outcome = run_pipeline(cfg=make_cfg(), steps=steps).outcome
    assert (outcome.kind, outcome.hint) == ("conflict", "see FAQ")


def test_interrupt_is_a_cancellation(make_cfg):
    log = []
    steps = [Recorder("a", exc=KeyboardInterrupt(), log=log), Recorder("b", log=log)]
    result = run_pipeline(cfg=make_cfg(), steps=steps)

    assert result.stage is Stage.ABORTED
    assert result.cancelled and result.outcome.status == CANCELLED
    assert result.outcome.kind == "cancelled"
    assert log == ["a"]


def test_unexpected_exception_is_reported_as_failure(make_cfg):
    result = run_pipeline(cfg=make_cfg(), steps=[Recorder("x", exc=OSError("disk on fire"))])
    assert result.outcome.status == FAILED
    assert result.outcome.kind == "unexpected"
    assert "disk on fire" in result.outcome.message


def test_step_order_matches_install_sequence():
    assert [s.step_id for s in build_steps()] == [
        "10_check_system",
        "20_disable_legacy",
        "30_check_unmanaged",
        "40_install_runtime",
        "50_install_agent",
        "60_cleanup",
    ]
    assert [s.reaches for s in build_steps()] == [
        None,
        None,
        Stage.CHECKS_PASSED,
        Stage.RUNTIME_READY,
        Stage.AGENT_INSTALLED,
        Stage.CLEANED,
    ]


@pytest.fixture
def running_zeek(fake_cmd):
    fake_cmd.on("status=running", stdout="3f2a1b\n")
    return fake_cmd


def _snapshot(cfg):
    paths = cfg.paths
    return {
        "script": paths.control_script.read_bytes(),
        "link": paths.bin_link.resolve(),
        "profile": paths.profile_path.read_text(encoding="utf-8"),
        "default": paths.default_site_config.read_text(encoding="utf-8"),
        "site": sorted(str(p.relative_to(paths.site_dir)) for p in paths.site_dir.rglob("*")),
    }


def test_full_run_is_idempotent(running_zeek, plenty_of_space, make_cfg):
    cfg = make_cfg(sensor=True)

    first = run(cfg)
    assert first.ok, first.outcome
    after_first = _snapshot(cfg)

    second = run(cfg)
    assert second.ok, second.outcome
    assert _snapshot(cfg) == after_first

    cfg.paths.default_site_config.write_text("# tuned\n", encoding="utf-8")
    third = run(cfg)
    assert third.ok, third.outcome
    assert cfg.paths.default_site_config.read_text(encoding="utf-8") == "# tuned\n"
    assert running_zeek.lines.count(f"{cfg.paths.control_script} start") == 3


def test_runtime_not_operable_is_environment_failure(fake_cmd, plenty_of_space, make_cfg):
    fake_cmd.on("docker ps", returncode=1, stderr="permission denied while trying to connect")

    result = run(make_cfg())

    assert result.outcome.step_id == "40_install_runtime"
    assert result.outcome.kind == "environment"
    assert "privileges" in result.outcome.hint
    assert not fake_cmd.ran("docker load")


def test_unsupported_os_aborts_before_anything_changes(fake_cmd, plenty_of_space, make_cfg, host_root):
    (host_root / "etc" / "os-release").write_text("ID=gentoo\n", encoding="utf-8")

    result = run(make_cfg())

    assert result.outcome.step_id == "10_check_system"
    assert fake_cmd.calls == []
    assert not (host_root / "opt").exists()
