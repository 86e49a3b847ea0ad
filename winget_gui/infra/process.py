import os
import subprocess
from dataclasses import dataclass
from typing import Final

from logly import logger

from winget_gui.core.errors import ProcessInvocationError
from winget_gui.core.output_normalizer import decode_output

_CREATE_NO_WINDOW: Final[int] = 0x08000000


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Decoded output of a finished process."""

    stdout: str
    stderr: str
    returncode: int


def run_process(argv: list[str], timeout_sec: float | None = None) -> ProcessOutput:
    """Runs a command to completion and captures its output.

    Args:
        argv: Argument vector.
        timeout_sec: Optional timeout. None waits indefinitely.

    Returns:
        Decoded stdout/stderr and the exit code.

    Raises:
        ProcessInvocationError: If the command cannot be started or times out.
    """
    logger.info(f"Starting subprocess timeout={timeout_sec} argv={' '.join(argv)}")
    kwargs: dict = {
        "capture_output": True,
        "timeout": timeout_sec,
    }

    if os.name == "nt":
        kwargs["creationflags"] = _CREATE_NO_WINDOW

    try:
        result = subprocess.run(argv, **kwargs)
    except FileNotFoundError as e:
        logger.warning(f"Executable not found: {argv[0]}")
        raise ProcessInvocationError(
            f"Failed to run {argv[0]}. Is it installed?"
        ) from e
    except subprocess.TimeoutExpired as e:
        logger.warning("Subprocess timed out")
        raise ProcessInvocationError(
            f"timeout: command exceeded {timeout_sec} seconds"
        ) from e
    except OSError as e:
        logger.warning(f"Subprocess could not be started: {e}")
        raise ProcessInvocationError(str(e)) from e

    logger.info(f"Subprocess finished returncode={result.returncode}")
    return ProcessOutput(
        stdout=decode_output(result.stdout),
        stderr=decode_output(result.stderr),
        returncode=result.returncode,
    )
