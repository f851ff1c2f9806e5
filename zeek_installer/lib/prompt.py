from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def ask_yes_no(question: str, default: bool = False) -> bool:
    """Blocking yes/no prompt. EOF (no operator attached) counts as the default."""

    hint = "[Y/n]" if default else "[y/N]"
    while True:
        try:
            answer = input(f"{question} {hint} ").strip().lower()
        except EOFError:
            logger.info("No answer for %r; assuming %s", question, "yes" if default else "no")
            return default
        if not answer:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("Please answer yes or no.")


def press_enter(message: str = "Press enter to continue...") -> None:
    try:
        input(message)
    except EOFError:
        pass
