"""Qt table model over ``DataTableViewModel``.

Exposes the current processed page to ``QTableView`` (or any item view).
Cell text is the flattened ``render_cell`` output; ``UserRole`` returns the
record itself. State-changing slots forward to the view model and reset the
model afterwards; header clicks are meant to be wired to ``toggle_sort``::

    model = DataTableModel(vm)
    table.setModel(model)
    table.horizontalHeader().sectionClicked.connect(model.toggle_sort)
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import QAbstractTableModel, QModelIndex, Qt, pyqtSignal

from tablekit.models import ProcessedView, SortDirection
from tablekit.services.value_resolver import flatten_display_text
from tablekit.viewmodels.data_table_viewmodel import DataTableViewModel

__all__ = ["DataTableModel"]

SORT_INDICATORS = {SortDirection.ASC: " ▲", SortDirection.DESC: " ▼"}


class DataTableModel(QAbstractTableModel):
    viewChanged = pyqtSignal(object)  # ProcessedView

    def __init__(self, viewmodel: DataTableViewModel, parent=None):
        super().__init__(parent)
        self._vm = viewmodel
        self._view: ProcessedView = viewmodel.view()

    # Required overrides
    def rowCount(self, parent: QModelIndex = QModelIndex()):  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._view.visible_records)

    def columnCount(self, parent: QModelIndex = QModelIndex()):  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._vm.columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        record = self._view.visible_records[index.row()]
        if role == Qt.ItemDataRole.UserRole:
            return record
        if role not in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.ToolTipRole):
            return None
        column = self._vm.columns[index.column()]
        try:
            rendered = column.render_cell(record, index.row())
        except Exception:  # noqa: BLE001
            return ""
        return flatten_display_text(rendered)

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole):  # type: ignore[override]
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation == Qt.Orientation.Vertical:
            first = (self._view.page - 1) * (self._view.page_size or 0)
            return first + section + 1
        columns = self._vm.columns
        if section < 0 or section >= len(columns):
            return None
        column = columns[section]
        label = flatten_display_text(column.header)
        sort = self._view.sort
        if sort.column_key == column.key:
            label += SORT_INDICATORS[sort.direction]
        return label

    def flags(self, index: QModelIndex):  # type: ignore[override]
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return Qt.ItemFlag.ItemIsEnabled | Qt.ItemFlag.ItemIsSelectable

    # Accessors -----------------------------------------------------
    def currentView(self) -> ProcessedView:
        return self._view

    def recordAt(self, row: int) -> Optional[Any]:
        if 0 <= row < len(self._view.visible_records):
            return self._view.visible_records[row]
        return None

    # Slots ---------------------------------------------------------
    def toggle_sort(self, section: int) -> None:
        columns = self._vm.columns
        if 0 <= section < len(columns):
            self._vm.on_sort_toggle(columns[section].key)
            self.refresh()

    def set_search_text(self, text: str) -> None:
        self._vm.on_search_change(text)
        self.refresh()

    def set_column_filter(self, key: str, value: Any) -> None:
        self._vm.on_column_filter_change(key, value)
        self.refresh()

    def set_page(self, page: int) -> None:
        self._vm.on_page_change(page)
        self.refresh()

    def set_records(self, records) -> None:
        self._vm.set_records(records)
        self.refresh()

    def refresh(self) -> None:
        self.beginResetModel()
        self._view = self._vm.view()
        self.endResetModel()
        self.headerDataChanged.emit(Qt.Orientation.Horizontal, 0, max(0, len(self._vm.columns) - 1))
        self.viewChanged.emit(self._view)
