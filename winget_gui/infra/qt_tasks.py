from typing import Callable

from logly import logger
from PySide6.QtCore import QObject, QThread, Signal, Slot


class TaskWorker(QObject):
    """Runs one unit of background work in a Qt thread.

    The worker is meant to be moved to a `QThread` and started via a signal/slot.
    Units report their results through their own channel; `finished` only tells
    the owning thread to shut down.
    """

    finished = Signal()

    def __init__(self, task: Callable[[], None]):
        super().__init__()
        self._task = task

    @Slot()
    def run(self):
        """Executes the task and always emits `finished`."""
        try:
            self._task()
        except Exception:
            logger.exception("Background task failed")
        finally:
            self.finished.emit()


class QtTaskDispatcher(QObject):
    """Starts each submitted task on its own `QThread`.

    Tasks run concurrently with each other and with the UI thread.
    """

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self._threads: dict[QThread, TaskWorker] = {}

    def active_count(self) -> int:
        return len(self._threads)

    def submit(self, task: Callable[[], None]) -> None:
        thread = QThread()
        worker = TaskWorker(task)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(lambda t=thread: self._on_thread_finished(t))

        self._threads[thread] = worker
        thread.start()

    def _on_thread_finished(self, finished_thread: QThread) -> None:
        self._threads.pop(finished_thread, None)

    def wait_for_all(self) -> None:
        """Blocks until every running task has returned."""
        for thread in list(self._threads):
            thread.quit()
            thread.wait()
