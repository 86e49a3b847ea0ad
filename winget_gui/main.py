import sys

from PySide6.QtWidgets import QApplication

from winget_gui.application.app_state import AppState
from winget_gui.application.reconciler import ResultReconciler
from winget_gui.config import load_config
from winget_gui.infra.qt_tasks import QtTaskDispatcher
from winget_gui.infra.winget_cli import WingetCliBackend
from winget_gui.logging import init_logger
from winget_gui.presentation.main_window import MainWindow


def main() -> int:
    config = load_config()
    logger = init_logger(config.log_level, config.log_dir)
    logger.info(f"Using winget executable {config.winget_executable}")

    app = QApplication(sys.argv)

    backend = WingetCliBackend(
        executable=config.winget_executable,
        timeout_sec=config.command_timeout_sec,
    )
    dispatcher = QtTaskDispatcher()
    reconciler = ResultReconciler(backend, dispatcher)

    window = MainWindow(
        AppState(),
        reconciler,
        dispatcher=dispatcher,
        poll_interval_ms=config.poll_interval_ms,
    )
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
