"""ANSI-colored console logging for query cache and mutation steps.

Makes it easy to follow an optimistic mutation through the terminal:

    Blue: Cancel / Snapshot
    Yellow: Optimistic apply
    Magenta: Remote call
    Green: Commit
    Red: Rollback / errors
    Cyan: Fetch / invalidate
    Gray: Details and timing
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


class SyncStage:
    """Predefined sync stages with colors and labels."""

    CANCEL = ("CANCEL", _Colors.BLUE)
    SNAPSHOT = ("SNAPSHOT", _Colors.BLUE)
    OPTIMISTIC = ("OPTIMISTIC", _Colors.YELLOW)
    REMOTE = ("REMOTE", _Colors.MAGENTA)
    COMMIT = ("COMMIT", _Colors.GREEN)
    ROLLBACK = ("ROLLBACK", _Colors.RED)
    SETTLE = ("SETTLE", _Colors.WHITE)
    FETCH = ("FETCH", _Colors.CYAN)
    INVALIDATE = ("INVALIDATE", _Colors.CYAN)


class SyncLogger:
    """Color-coded logger for the query cache and mutation coordinator.

    Usage:
        log = SyncLogger("MutationCoordinator")
        log.step(SyncStage.OPTIMISTIC, "delete", key=("subjects",))
        log.step_error(SyncStage.ROLLBACK, "delete failed", error=exc)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        """Log a step at DEBUG, in its stage color."""
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(self._format(stage, message, kwargs))

    def step_info(self, stage: tuple[str, str], message: str, **kwargs: Any) -> None:
        self._logger.info(self._format(stage, message, kwargs))

    def step_error(
        self, stage: tuple[str, str], message: str, error: BaseException | None = None
    ) -> None:
        """Log a failed step in red at WARNING; rollbacks are expected, not crashes."""
        label, _ = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}[{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error is not None:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.warning(formatted)

    @contextmanager
    def timed_step(self, stage: tuple[str, str], message: str, **kwargs: Any):
        """Context manager that logs elapsed time of the wrapped block.

        Usage:
            with log.timed_step(SyncStage.REMOTE, "delete"):
                result = await api.delete(subject_id)
        """
        self.step(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.step(stage, f"{message} in {elapsed:.3f}s")

    @staticmethod
    def _format(stage: tuple[str, str], message: str, details: dict[str, Any]) -> str:
        label, color = stage
        formatted = (
            f"{color}{_Colors.BOLD}[{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        if details:
            joined = " | ".join(f"{k}={v}" for k, v in details.items())
            formatted += f" {_Colors.GRAY}({joined}){_Colors.RESET}"
        return formatted
