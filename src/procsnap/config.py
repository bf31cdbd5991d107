"""Collector configuration."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

import psutil

from procsnap.classifier import CONTAINER_KEYWORDS
from procsnap.sources import CMDLINE_MAX, DEFAULT_PROC_ROOT

logger = logging.getLogger(__name__)

MIN_POLL_RATE = 0.1


def _env_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(slots=True, frozen=True)
class CollectorConfig:
    """Settings shared by the CLI and the viewer."""

    proc_root: Path = DEFAULT_PROC_ROOT
    cmdline_max: int = CMDLINE_MAX
    classify: bool = True
    container_keywords: tuple[str, ...] = CONTAINER_KEYWORDS
    poll_rate: float = 2.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "proc_root", Path(self.proc_root))
        object.__setattr__(self, "poll_rate", max(MIN_POLL_RATE, self.poll_rate))
        if self.cmdline_max <= 0:
            raise ValueError(f"cmdline_max must be positive, got {self.cmdline_max}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "CollectorConfig":
        """
        Build a config from ``PROCSNAP_*`` environment variables.

        Recognized: PROCSNAP_PROC_ROOT, PROCSNAP_CMDLINE_MAX, PROCSNAP_CLASSIFY,
        PROCSNAP_POLL_RATE. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()
        if "PROCSNAP_PROC_ROOT" in env:
            config = replace(config, proc_root=Path(env["PROCSNAP_PROC_ROOT"]))
        if "PROCSNAP_CMDLINE_MAX" in env:
            config = replace(config, cmdline_max=int(env["PROCSNAP_CMDLINE_MAX"]))
        if "PROCSNAP_CLASSIFY" in env:
            config = replace(config, classify=_env_bool(env["PROCSNAP_CLASSIFY"]))
        if "PROCSNAP_POLL_RATE" in env:
            config = replace(config, poll_rate=float(env["PROCSNAP_POLL_RATE"]))
        return config

    def apply_procfs(self) -> None:
        """Point psutil at the configured procfs mount if it is not /proc."""
        if self.proc_root != DEFAULT_PROC_ROOT:
            logger.info(f"Using procfs mounted at {self.proc_root}")
            psutil.PROCFS_PATH = str(self.proc_root)
