from pathlib import Path
from typing import Final

from logly import _LoggerProxy, logger

LOG_DIR_PATH: Final[Path] = Path(__file__).parent.parent / "logs"


def init_logger(level: str = "INFO", log_dir: Path = LOG_DIR_PATH) -> _LoggerProxy:
    """Initialize the logger.

    Configures colored console output plus a size-rotated `app.log` file.

    Args:
        level: Minimum log level (e.g. "DEBUG", "INFO").
        log_dir: Directory that receives the log file.

    Returns:
        The configured logger.
    """
    logger.configure(
        level=level,
        color=True,
        console=True,
        auto_sink=True,
    )

    logger.add(f"{log_dir}/app.log", size_limit="10MB", retention=3)

    logger.success("logger initialized!")

    return logger
