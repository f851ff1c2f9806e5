from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .errors import InstallerError
from .install_config import InstallConfig

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    INIT = "init"
    CHECKS_PASSED = "checks_passed"
    RUNTIME_READY = "runtime_ready"
    AGENT_INSTALLED = "agent_installed"
    CLEANED = "cleaned"
    DONE = "done"
    ABORTED = "aborted"


class Step(Protocol):
    """A single idempotent step.

    ``reaches`` is the stage the machine enters once the step succeeds;
    None keeps the current stage.
    """

    step_id: str
    reaches: Optional[Stage]

    def run(self, cfg: InstallConfig) -> None:
        ...


OK = "ok"
FAILED = "failed"
CANCELLED = "cancelled"


@dataclass(frozen=True)
class StepOutcome:
    step_id: str
    status: str
    message: str = ""
    kind: Optional[str] = None
    hint: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OK


@dataclass(frozen=True)
class PipelineResult:
    stage: Stage
    ran_steps: List[str] = field(default_factory=list)
    outcome: Optional[StepOutcome] = None

    @property
    def ok(self) -> bool:
        return self.stage is Stage.DONE

    @property
    def cancelled(self) -> bool:
        return self.outcome is not None and self.outcome.status == CANCELLED


def run_step(step: Step, cfg: InstallConfig) -> StepOutcome:
    """Run one step and fold whatever it raises into a StepOutcome."""

    try:
        step.run(cfg)
    except KeyboardInterrupt:
        return StepOutcome(step.step_id, CANCELLED, "Installation cancelled.", kind=CANCELLED)
    except InstallerError as e:
        return StepOutcome(step.step_id, FAILED, str(e), kind=e.kind, hint=e.hint)
    except Exception as e:
        logger.exception("Unexpected error in step %s", step.step_id)
        return StepOutcome(step.step_id, FAILED, str(e) or type(e).__name__, kind="unexpected")
    return StepOutcome(step.step_id, OK)


def run_pipeline(*, cfg: InstallConfig, steps: Sequence[Step]) -> PipelineResult:
    """Run steps strictly in order; the first non-ok outcome aborts the run.

    There is no resume: every invocation starts at INIT and relies on each
    step being idempotent.
    """

    stage = Stage.INIT
    ran: List[str] = []

    for step in steps:
        logger.info("Running step %s (stage=%s)", step.step_id, stage.value)
        outcome = run_step(step, cfg)
        ran.append(step.step_id)

        if not outcome.ok:
            if outcome.status == CANCELLED:
                logger.warning("Step %s cancelled", step.step_id)
            else:
                logger.error("Step %s failed (%s): %s", step.step_id, outcome.kind, outcome.message)
            return PipelineResult(stage=Stage.ABORTED, ran_steps=ran, outcome=outcome)

        if step.reaches is not None:
            stage = step.reaches

    return PipelineResult(stage=Stage.DONE, ran_steps=ran)
