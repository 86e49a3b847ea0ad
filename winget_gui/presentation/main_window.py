from typing import Final

from PySide6.QtCore import Qt, QTimer
from logly import logger
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTabBar,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from winget_gui.application.app_state import AppState
from winget_gui.application.reconciler import ResultReconciler
from winget_gui.core.winget_types import AppMode, Operation, SourceFilter
from winget_gui.infra.qt_tasks import QtTaskDispatcher
from winget_gui.presentation.table_models import PackageTableModel

_SPINNER_FRAMES: Final[str] = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
_DETAIL_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("name", "Name"),
    ("id", "Id"),
    ("version", "Version"),
    ("available_version", "Available"),
    ("publisher", "Publisher"),
    ("source", "Source"),
    ("license", "License"),
    ("homepage", "Homepage"),
    ("description", "Description"),
)


class MainWindow(QMainWindow):
    """Main application window.

    Requests go through the reconciler, and a timer drains background results
    into `AppState` before re-rendering from it. Everything here runs on the UI
    thread.
    """

    def __init__(
        self,
        state: AppState,
        reconciler: ResultReconciler,
        dispatcher: QtTaskDispatcher | None = None,
        poll_interval_ms: int = 50,
    ) -> None:
        super().__init__()
        self.state = state
        self.reconciler = reconciler
        self._dispatcher = dispatcher
        self._tick = 0
        self._syncing = False
        self._shown_packages: list | None = None

        self.setWindowTitle("winget-gui")
        self.resize(1100, 680)

        self._build_widgets()
        self._polish_table()
        self._connect_signals()
        self._install_shortcuts()

        self._timer = QTimer(self)
        self._timer.setInterval(poll_interval_ms)
        self._timer.timeout.connect(self._on_tick)
        self._timer.start()

        QTimer.singleShot(0, self._initial_load)

    # ---- Layout

    def _build_widgets(self) -> None:
        root = QWidget(self)
        layout = QVBoxLayout(root)

        top = QHBoxLayout()
        self.tab_bar = QTabBar(root)
        for mode in AppMode:
            self.tab_bar.addTab(mode.label)
        top.addWidget(self.tab_bar)
        top.addStretch(1)

        self.line_edit_search = QLineEdit(root)
        self.line_edit_search.setPlaceholderText("Search packages")
        self.push_button_search = QPushButton("Search", root)
        self.combo_source = QComboBox(root)
        for source_filter in SourceFilter:
            self.combo_source.addItem(str(source_filter), source_filter)
        self.push_button_refresh = QPushButton("Refresh", root)
        top.addWidget(self.line_edit_search, 2)
        top.addWidget(self.push_button_search)
        top.addWidget(QLabel("Source:", root))
        top.addWidget(self.combo_source)
        top.addWidget(self.push_button_refresh)
        layout.addLayout(top)

        self.splitter = QSplitter(Qt.Orientation.Horizontal, root)
        self.model = PackageTableModel(self)
        self.table_view = QTableView(self.splitter)
        self.table_view.setModel(self.model)

        detail = QWidget(self.splitter)
        form = QFormLayout(detail)
        self.detail_labels: dict[str, QLabel] = {}
        for field, caption in _DETAIL_FIELDS:
            label = QLabel("-", detail)
            label.setWordWrap(True)
            label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            form.addRow(f"{caption}:", label)
            self.detail_labels[field] = label
        self.label_detail_note = QLabel("", detail)
        form.addRow(self.label_detail_note)
        self.splitter.setStretchFactor(0, 3)
        self.splitter.setStretchFactor(1, 2)
        layout.addWidget(self.splitter, 1)

        actions = QHBoxLayout()
        self.push_button_install = QPushButton("Install", root)
        self.push_button_uninstall = QPushButton("Uninstall", root)
        self.push_button_upgrade = QPushButton("Upgrade", root)
        self.push_button_upgrade_marked = QPushButton("Upgrade Marked", root)
        self.push_button_upgrade_all = QPushButton("Upgrade All", root)
        for button in (
            self.push_button_install,
            self.push_button_uninstall,
            self.push_button_upgrade,
            self.push_button_upgrade_marked,
            self.push_button_upgrade_all,
        ):
            actions.addWidget(button)
        actions.addStretch(1)
        layout.addLayout(actions)

        self.setCentralWidget(root)

    def _polish_table(self) -> None:
        """Applies initial settings to the package table."""
        tv = self.table_view

        tv.verticalHeader().setVisible(False)

        hh = tv.horizontalHeader()
        hh.setStretchLastSection(True)
        hh.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        for column in (1, 2, 3):
            hh.setSectionResizeMode(column, QHeaderView.ResizeMode.Interactive)

        tv.setWordWrap(False)
        tv.setAlternatingRowColors(True)
        tv.setShowGrid(False)
        tv.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        tv.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)

        tv.setColumnWidth(1, 220)
        tv.setColumnWidth(2, 120)
        tv.setColumnWidth(3, 120)

    def _connect_signals(self) -> None:
        self.tab_bar.currentChanged.connect(self.on_tab_changed)
        self.line_edit_search.returnPressed.connect(self.on_search_clicked)
        self.push_button_search.clicked.connect(self.on_search_clicked)
        self.combo_source.currentIndexChanged.connect(self.on_source_changed)
        self.push_button_refresh.clicked.connect(self.on_refresh_clicked)

        self.table_view.selectionModel().currentChanged.connect(self.on_current_changed)
        self.model.mark_toggled.connect(self.on_mark_toggled)

        self.push_button_install.clicked.connect(self.on_install_clicked)
        self.push_button_uninstall.clicked.connect(self.on_uninstall_clicked)
        self.push_button_upgrade.clicked.connect(self.on_upgrade_clicked)
        self.push_button_upgrade_marked.clicked.connect(self.on_upgrade_marked_clicked)
        self.push_button_upgrade_all.clicked.connect(self.on_upgrade_all_clicked)

    def _install_shortcuts(self) -> None:
        """Keyboard bindings. Single-key ones only fire while the table has focus."""
        table_keys = (
            ("J", lambda: self.on_move_selection(1)),
            ("K", lambda: self.on_move_selection(-1)),
            ("F", self.on_cycle_source_filter),
            ("R", self.on_refresh_clicked),
            ("/", self.line_edit_search.setFocus),
            ("S", self.line_edit_search.setFocus),
            ("I", self.on_install_clicked),
            ("X", self.on_uninstall_clicked),
            ("U", self.on_upgrade_clicked),
        )
        for key, slot in table_keys:
            shortcut = QShortcut(QKeySequence(key), self.table_view)
            shortcut.setContext(Qt.ShortcutContext.WidgetShortcut)
            shortcut.activated.connect(slot)

        window_keys = (
            ("Ctrl+Tab", lambda: self.on_cycle_mode(False)),
            ("Ctrl+Shift+Tab", lambda: self.on_cycle_mode(True)),
            (QKeySequence.StandardKey.Refresh, self.on_refresh_clicked),
        )
        for key, slot in window_keys:
            QShortcut(QKeySequence(key), self).activated.connect(slot)

    # ---- Control loop

    def _initial_load(self) -> None:
        self.reconciler.refresh_view(self.state)
        self.render()

    def _on_tick(self) -> None:
        """Drains background results, then re-renders."""
        self._tick += 1
        self.reconciler.process_messages(self.state)
        self.render()

    def render(self) -> None:
        state = self.state
        self._syncing = True
        try:
            if state.filtered_packages is not self._shown_packages:
                self.model.set_packages(state.filtered_packages)
                self._shown_packages = state.filtered_packages
            self.model.set_marked(state.marked_ids)

            if state.selected_package() is not None:
                index = self.model.index(state.selected, 0)
                if self.table_view.currentIndex().row() != state.selected:
                    self.table_view.setCurrentIndex(index)
                    self.table_view.scrollTo(index)

            modes = list(AppMode)
            if self.tab_bar.currentIndex() != modes.index(state.mode):
                self.tab_bar.setCurrentIndex(modes.index(state.mode))
            filters = list(SourceFilter)
            if self.combo_source.currentIndex() != filters.index(state.source_filter):
                self.combo_source.setCurrentIndex(filters.index(state.source_filter))
        finally:
            self._syncing = False

        self._render_detail()
        self._render_actions()

        status = state.status_message
        if state.loading or state.detail_loading:
            spinner = _SPINNER_FRAMES[self._tick % len(_SPINNER_FRAMES)]
            status = f"{spinner} {status}"
        self.statusBar().showMessage(status)

    def _render_detail(self) -> None:
        detail = self.state.detail
        for field, label in self.detail_labels.items():
            value = getattr(detail, field, "") if detail is not None else ""
            label.setText(value or "-")

        package = self.state.selected_package()
        if package is not None and package.truncated:
            self.label_detail_note.setText("Identifier truncated; full details unavailable.")
        elif self.state.detail_loading:
            self.label_detail_note.setText("Loading details...")
        else:
            self.label_detail_note.setText("")

    def _render_actions(self) -> None:
        state = self.state
        idle = not state.busy_operation
        has_selection = state.selected_package() is not None
        self.push_button_install.setEnabled(idle and has_selection)
        self.push_button_uninstall.setEnabled(idle and has_selection)
        self.push_button_upgrade.setEnabled(idle and has_selection)
        self.push_button_upgrade_marked.setEnabled(idle and bool(state.marked_ids))
        self.push_button_upgrade_all.setEnabled(
            idle and state.mode is AppMode.UPGRADES and bool(state.filtered_packages)
        )

    # ---- User actions

    def on_tab_changed(self, index: int) -> None:
        if self._syncing:
            return
        mode = list(AppMode)[index]
        if mode is not self.state.mode:
            self.reconciler.set_mode(self.state, mode)
            self.render()

    def on_source_changed(self, index: int) -> None:
        if self._syncing:
            return
        self.reconciler.set_source_filter(self.state, list(SourceFilter)[index])
        self.render()

    def on_cycle_mode(self, backwards: bool) -> None:
        self.reconciler.cycle_mode(self.state, backwards)
        self.render()

    def on_cycle_source_filter(self) -> None:
        self.reconciler.cycle_source_filter(self.state)
        self.render()

    def on_move_selection(self, delta: int) -> None:
        self.reconciler.move_selection(self.state, delta)
        self.render()

    def on_search_clicked(self) -> None:
        self.reconciler.submit_search(self.state, self.line_edit_search.text())
        self.render()

    def on_refresh_clicked(self) -> None:
        self.reconciler.refresh(self.state)
        self.render()

    def on_current_changed(self, current, previous) -> None:
        if self._syncing or not current.isValid():
            return
        self.reconciler.select(self.state, current.row())
        self.render()

    def on_mark_toggled(self, package_id: str) -> None:
        self.state.toggle_marked(package_id)
        self.render()

    def _confirm(self, operation: Operation, question: str) -> None:
        answer = QMessageBox.question(self, "Confirm", question)
        if answer != QMessageBox.StandardButton.Yes:
            self.state.set_status("Cancelled")
        else:
            self.reconciler.execute_operation(self.state, operation)
        self.render()

    def on_install_clicked(self) -> None:
        package = self.state.selected_package()
        if package is not None:
            self._confirm(Operation.install(package.id), f"Install {package.id}?")

    def on_uninstall_clicked(self) -> None:
        package = self.state.selected_package()
        if package is not None:
            self._confirm(Operation.uninstall(package.id), f"Uninstall {package.id}?")

    def on_upgrade_clicked(self) -> None:
        package = self.state.selected_package()
        if package is not None:
            self._confirm(Operation.upgrade(package.id), f"Upgrade {package.id}?")

    def on_upgrade_marked_clicked(self) -> None:
        count = len(self.state.marked_ids)
        answer = QMessageBox.question(self, "Confirm", f"Upgrade {count} marked packages?")
        if answer == QMessageBox.StandardButton.Yes:
            self.reconciler.upgrade_marked(self.state)
        else:
            self.state.set_status("Cancelled")
        self.render()

    def on_upgrade_all_clicked(self) -> None:
        answer = QMessageBox.question(self, "Confirm", "Upgrade all listed packages?")
        if answer == QMessageBox.StandardButton.Yes:
            self.reconciler.upgrade_all(self.state)
        else:
            self.state.set_status("Cancelled")
        self.render()

    def closeEvent(self, event: QCloseEvent) -> None:
        self._timer.stop()
        if self._dispatcher is not None and self._dispatcher.active_count():
            logger.info(
                f"Waiting for {self._dispatcher.active_count()} background task(s)"
            )
            self._dispatcher.wait_for_all()
        super().closeEvent(event)
