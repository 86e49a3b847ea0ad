import shutil


def find_winget_executable() -> str:
    """Finds the winget executable.

    Returns:
        The resolved path when winget is on PATH, otherwise the bare name so that
        the failure surfaces when the process is started.
    """
    return shutil.which("winget") or "winget"


def build_winget_argv(*args: str, executable: str | None = None) -> list[str]:
    """Builds an argv list to run a winget subcommand.

    Args:
        *args: winget arguments (e.g. "list", "--accept-source-agreements").
        executable: winget path/name. If omitted, it will be auto-detected.

    Returns:
        Argument vector suitable for `subprocess.run(...)`.
    """
    exe = executable or find_winget_executable()
    return [exe, *args]


def with_source(args: list[str], source: str | None) -> list[str]:
    """Appends `--source` when a source filter is active."""
    if source:
        return [*args, "--source", source]
    return args
