from PySide6.QtCore import QAbstractTableModel, QModelIndex, QPersistentModelIndex, Qt, Signal

from winget_gui.core.winget_types import PackageRecord


class PackageTableModel(QAbstractTableModel):
    """Table model backed by PackageRecord rows.

    Column 0 is checkable; toggling it emits `mark_toggled` with the package id
    instead of storing the state here, since marks live in `AppState`.
    """

    _HEADERS = ("Name", "Id", "Version", "Available", "Source")

    mark_toggled = Signal(str)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._rows: list[PackageRecord] = []
        self._marked: frozenset[str] = frozenset()

    def rowCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._HEADERS)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        /,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> object | None:
        if not index.isValid():
            return None

        row = self._rows[index.row()]
        column = index.column()
        if role == Qt.ItemDataRole.CheckStateRole and column == 0:
            if row.id in self._marked:
                return Qt.CheckState.Checked
            return Qt.CheckState.Unchecked
        if role == Qt.ItemDataRole.ToolTipRole and column == 1 and row.truncated:
            return "Identifier truncated by winget"
        if role not in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            return None

        if column == 0:
            return row.name
        if column == 1:
            return row.id
        if column == 2:
            return row.version
        if column == 3:
            return row.available_version
        if column == 4:
            return row.source
        return None

    def setData(
        self,
        index: QModelIndex | QPersistentModelIndex,
        value: object,
        /,
        role: int = Qt.ItemDataRole.EditRole,
    ) -> bool:
        if not index.isValid() or index.column() != 0:
            return False
        if role != Qt.ItemDataRole.CheckStateRole:
            return False
        row = self._rows[index.row()]
        self.mark_toggled.emit(row.id)
        return True

    def flags(self, index: QModelIndex | QPersistentModelIndex) -> Qt.ItemFlag:
        base = super().flags(index)
        if index.isValid() and index.column() == 0:
            return base | Qt.ItemFlag.ItemIsUserCheckable
        return base

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ):
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation != Qt.Orientation.Horizontal:
            return None
        if 0 <= section < len(self._HEADERS):
            return self._HEADERS[section]
        return None

    def set_packages(self, rows: list[PackageRecord]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self.endResetModel()

    def set_marked(self, marked: set[str]) -> None:
        """Refreshes the check boxes from the current batch marks."""
        snapshot = frozenset(marked)
        if snapshot == self._marked:
            return
        self._marked = snapshot
        if self._rows:
            self.dataChanged.emit(
                self.index(0, 0),
                self.index(len(self._rows) - 1, 0),
                [Qt.ItemDataRole.CheckStateRole],
            )
