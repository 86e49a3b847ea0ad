from winget_gui.infra.qt_tasks import TaskWorker


def _capture_finished(worker: TaskWorker) -> list[bool]:
    captured: list[bool] = []
    worker.finished.connect(lambda: captured.append(True))
    return captured


def test_run_executes_task_and_emits_finished() -> None:
    calls: list[str] = []
    worker = TaskWorker(lambda: calls.append("ran"))
    captured = _capture_finished(worker)

    worker.run()

    assert calls == ["ran"]
    assert captured == [True]


def test_run_emits_finished_even_when_task_raises() -> None:
    def broken() -> None:
        raise RuntimeError("unexpected failure")

    worker = TaskWorker(broken)
    captured = _capture_finished(worker)

    worker.run()

    assert captured == [True]
