class WingetError(Exception):
    """Base class for failures surfaced to the user as text."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ProcessInvocationError(WingetError):
    """winget could not be started (missing executable, timeout, OS error)."""


class ExternalToolFailure(WingetError):
    """winget ran but its exit status violated the applicable exit policy.

    Attributes:
        returncode: Process exit code.
    """

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode
