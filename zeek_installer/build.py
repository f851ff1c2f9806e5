from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .build_config import BuildConfig, load_build_config
from .build_steps import ALL_STEPS, BuildCtx
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


DEFAULT_BUILD_CONFIG = "build_config.yaml"
DEFAULT_BUILD_LOG = "logs/zeek-stage.log"


def stage(cfg: BuildConfig, *, no_pull: bool = False) -> Path:
    """Stage every architecture of the configured image and seal the archive."""

    ctx = BuildCtx(cfg=cfg, no_pull=no_pull)
    logger.info("=== Staging %s into %s ===", cfg.image, ctx.stage_dir)
    for fn in ALL_STEPS:
        fn(ctx=ctx)
    assert ctx.archive_path is not None
    return ctx.archive_path


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="zeek-stage", description="Generate the offline Zeek installer archive.")
    p.add_argument("--config", default=DEFAULT_BUILD_CONFIG)
    p.add_argument("--log", default=DEFAULT_BUILD_LOG)
    p.add_argument(
        "--no-pull",
        action="store_true",
        help="Reuse image archives already staged instead of pulling them again",
    )

    args = p.parse_args(argv)

    configure_logging(log_path=args.log)

    try:
        archive = stage(load_build_config(args.config), no_pull=bool(args.no_pull))
    except KeyboardInterrupt:
        logger.warning("Staging cancelled")
        return 1
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Staging failed: %s", e)
        return 1

    print(archive)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
