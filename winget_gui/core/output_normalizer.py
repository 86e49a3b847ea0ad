import re
from enum import Enum

from .errors import ExternalToolFailure

# winget renders through the console host, which can include VT sequences.
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")
_ANSI_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_2CHAR_RE = re.compile(r"\x1b[@-Z\\-_]")


class ExitPolicy(Enum):
    """How a non-zero exit code is interpreted.

    LENIENT is used for read-only queries: winget exits non-zero for "no
    results" while still printing to stdout. STRICT is used for mutating
    operations, where any non-zero exit is a failure.
    """

    LENIENT = "lenient"
    STRICT = "strict"


def decode_output(data: bytes) -> str:
    """Decodes process output bytes, replacing undecodable sequences."""
    return data.decode("utf-8", errors="replace")


def _strip_ansi(text: str) -> str:
    text = _ANSI_OSC_RE.sub("", text)
    text = _ANSI_CSI_RE.sub("", text)
    text = _ANSI_2CHAR_RE.sub("", text)
    return text


def resolve_progress_overwrites(line: str) -> str:
    """Returns what a terminal would finally show for a single line.

    Spinners and progress bars redraw in place with a bare CR, so only the text
    after the last CR is the final rendered state.
    """
    if "\r" not in line:
        return line
    return line.rsplit("\r", 1)[1]


def normalize_output(text: str) -> str:
    """Cleans captured console text before any parsing.

    Args:
        text: Decoded stdout text.

    Returns:
        Text with LF line endings, progress overwrites resolved and ANSI escape
        sequences removed.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n")
    lines = [resolve_progress_overwrites(line) for line in text.split("\n")]
    return _strip_ansi("\n".join(lines))


def failure_message(stdout: str, stderr: str, returncode: int) -> str:
    """Picks the most useful text to report for a failed invocation."""
    err = stderr.strip()
    if err:
        return err
    out = stdout.strip()
    if out:
        return out
    return f"winget exited with code {returncode}"


def check_exit(stdout: str, stderr: str, returncode: int, policy: ExitPolicy) -> str:
    """Applies the exit policy and returns normalized stdout.

    Args:
        stdout: Decoded stdout text.
        stderr: Decoded stderr text.
        returncode: Process exit code.
        policy: Exit policy for the invoked subcommand.

    Returns:
        Normalized stdout text.

    Raises:
        ExternalToolFailure: If the exit code violates the policy.
    """
    cleaned = normalize_output(stdout)
    if returncode == 0:
        return cleaned

    if policy is ExitPolicy.LENIENT and cleaned.strip():
        return cleaned

    raise ExternalToolFailure(
        failure_message(cleaned, normalize_output(stderr), returncode), returncode
    )
