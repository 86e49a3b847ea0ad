import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Mapping

from winget_gui.infra.winget import find_winget_executable
from winget_gui.logging import LOG_DIR_PATH

DEFAULT_POLL_INTERVAL_MS: Final[int] = 50
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_LOG_DIR: Final[Path] = LOG_DIR_PATH


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Runtime settings.

    Attributes:
        winget_executable: Path or name of the winget executable.
        command_timeout_sec: Subprocess timeout. None waits for winget to exit.
        poll_interval_ms: How often the UI drains background results.
        log_level: Minimum level for the console/file logger.
        log_dir: Directory that receives `app.log`.
    """

    winget_executable: str
    command_timeout_sec: float | None = None
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Path = DEFAULT_LOG_DIR


def _positive_float(value: str | None) -> float | None:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _positive_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Builds the configuration from `WINGET_GUI_*` environment variables.

    Invalid numeric values fall back to their defaults.
    """
    env = os.environ if environ is None else environ

    log_dir = env.get("WINGET_GUI_LOG_DIR")
    return AppConfig(
        winget_executable=env.get("WINGET_GUI_EXECUTABLE") or find_winget_executable(),
        command_timeout_sec=_positive_float(env.get("WINGET_GUI_TIMEOUT")),
        poll_interval_ms=_positive_int(
            env.get("WINGET_GUI_POLL_MS"), DEFAULT_POLL_INTERVAL_MS
        ),
        log_level=(env.get("WINGET_GUI_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        log_dir=Path(log_dir) if log_dir else DEFAULT_LOG_DIR,
    )
