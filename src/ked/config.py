"""Runtime settings.

Defaults live in :mod:`ked.constants`; any of them can be overridden with
``KED_*`` environment variables:

``KED_TAB_STOP`` -- render width of a tab stop
``KED_QUIT_TIMES`` -- Ctrl-Q presses needed to quit with unsaved changes
``KED_MESSAGE_TIMEOUT`` -- seconds a status message stays visible
``KED_LOG_FILE`` -- append debug log records to this file
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, TypeVar

from .constants import KED_MESSAGE_TIMEOUT, KED_QUIT_TIMES, KED_TAB_STOP

ENV_PREFIX = "KED_"

logger = logging.getLogger(__name__)

T = TypeVar("T", int, float)


def _env_number(
    environ: Mapping[str, str],
    name: str,
    parse: Callable[[str], T],
    default: T,
) -> T:
    raw = environ.get(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    try:
        value = parse(raw)
    except ValueError:
        logger.warning("ignoring %s%s=%r: not a number", ENV_PREFIX, name, raw)
        return default
    if value <= 0:
        logger.warning("ignoring %s%s=%r: must be positive", ENV_PREFIX, name, raw)
        return default
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    tab_stop: int = KED_TAB_STOP
    quit_times: int = KED_QUIT_TIMES
    message_timeout: float = KED_MESSAGE_TIMEOUT
    log_file: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            tab_stop=_env_number(env, "TAB_STOP", int, KED_TAB_STOP),
            quit_times=_env_number(env, "QUIT_TIMES", int, KED_QUIT_TIMES),
            message_timeout=_env_number(env, "MESSAGE_TIMEOUT", float, KED_MESSAGE_TIMEOUT),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE", ""),
        )
