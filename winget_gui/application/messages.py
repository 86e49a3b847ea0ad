import queue
from dataclasses import dataclass
from typing import Union

from winget_gui.core.winget_types import OperationResult, PackageDetail, PackageRecord


@dataclass(frozen=True, slots=True)
class PackagesLoaded:
    generation: int
    packages: list[PackageRecord]


@dataclass(frozen=True, slots=True)
class PackagesFailed:
    generation: int
    message: str


@dataclass(frozen=True, slots=True)
class DetailLoaded:
    generation: int
    detail: PackageDetail


@dataclass(frozen=True, slots=True)
class DetailFailed:
    generation: int
    message: str


@dataclass(frozen=True, slots=True)
class OperationComplete:
    result: OperationResult


@dataclass(frozen=True, slots=True)
class StatusUpdate:
    text: str


AppMessage = Union[
    PackagesLoaded,
    PackagesFailed,
    DetailLoaded,
    DetailFailed,
    OperationComplete,
    StatusUpdate,
]


class MessageChannel:
    """Unbounded FIFO from background tasks to the UI thread.

    Any thread may `send`; only the control loop calls `drain`.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[AppMessage] = queue.SimpleQueue()

    def send(self, message: AppMessage) -> None:
        self._queue.put(message)

    def drain(self) -> list[AppMessage]:
        """Returns every message currently queued, oldest first."""
        messages: list[AppMessage] = []
        while True:
            try:
                messages.append(self._queue.get_nowait())
            except queue.Empty:
                return messages
